"""
Account email bodies (plain text plus HTML alternative).
"""

from html import escape

from jobportal.notifications.email_sender import OutgoingEmail

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'

_CODE_BLOCK = """
<div style="text-align: center; margin: 30px 0;">
  <div style="background-color: #f3f4f6; padding: 20px; border-radius: 8px; display: inline-block;">
    <h3 style="color: #2563eb; font-size: 32px; letter-spacing: 8px; margin: 0;">{code}</h3>
  </div>
</div>
"""


def verification_code_email(
    *,
    to: str,
    name: str,
    code: str,
    expires_minutes: int,
    brand: str,
    resend: bool = False,
) -> OutgoingEmail:
    if resend:
        subject = f"New Verification Code - {brand}"
        heading = "New Verification Code"
        intro = "We received a request to resend the verification code."
        text = f"Your new verification code is: {code}"
    else:
        subject = f"Verify Your Email - {brand}"
        heading = "Verify Your Email"
        intro = "Thank you for registering!"
        text = f"Your verification code is: {code}"

    body = (
        f'<h2 style="color: #2563eb;">{heading}</h2>'
        f"<p>Hello {escape(name)},</p>"
        f"<p>{intro} Please use the following 6-digit code to verify your email address:</p>"
        + _CODE_BLOCK.format(code=code)
        + "<p>Enter this code on the verification page to complete your registration.</p>"
        f"<p><strong>This code will expire in {expires_minutes} minutes.</strong></p>"
        "<p>If you didn't create an account, please ignore this email.</p>"
    )
    text += f"\nThis code will expire in {expires_minutes} minutes."
    return OutgoingEmail(to=to, subject=subject, text=text, html=_WRAPPER.format(body=body))


def password_reset_email(
    *,
    to: str,
    name: str,
    reset_url: str,
    expires_minutes: int,
    brand: str,
) -> OutgoingEmail:
    link = escape(reset_url, quote=True)
    body = (
        '<h2 style="color: #2563eb;">Reset Your Password</h2>'
        f"<p>Hello {escape(name)},</p>"
        "<p>You requested to reset your password. Click the button below to reset it:</p>"
        '<div style="text-align: center; margin: 30px 0;">'
        f'<a href="{link}" style="background-color: #2563eb; color: white; padding: 12px 24px; '
        'text-decoration: none; border-radius: 5px; font-weight: bold;">Reset Password</a>'
        "</div>"
        "<p>Or copy and paste this link:</p>"
        f'<p style="background-color: #f3f4f6; padding: 10px; border-radius: 5px; word-break: break-all;">{link}</p>'
        f"<p>This link will expire in {expires_minutes} minutes.</p>"
        "<p>If you didn't request this, please ignore this email.</p>"
    )
    return OutgoingEmail(
        to=to,
        subject=f"Password Reset Request - {brand}",
        text=f"Reset your password: {reset_url}\nThis link will expire in {expires_minutes} minutes.",
        html=_WRAPPER.format(body=body),
    )


def password_reset_confirmation_email(*, to: str, name: str, brand: str) -> OutgoingEmail:
    body = (
        '<h2 style="color: #10b981;">Password Reset Successful</h2>'
        f"<p>Hello {escape(name)},</p>"
        "<p>Your password has been successfully reset.</p>"
        "<p>If you did not make this change, please contact our support immediately.</p>"
    )
    return OutgoingEmail(
        to=to,
        subject=f"Password Reset Successful - {brand}",
        text="Your password has been reset successfully.",
        html=_WRAPPER.format(body=body),
    )
