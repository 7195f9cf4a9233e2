"""
Email notifications for the account lifecycle.
"""

from jobportal.notifications.email_sender import (
    DeliveryReceipt,
    EmailSender,
    LoggingEmailSender,
    OutgoingEmail,
    SmtpEmailSender,
    UnconfiguredEmailSender,
    build_email_sender,
)

__all__ = [
    "DeliveryReceipt",
    "EmailSender",
    "LoggingEmailSender",
    "OutgoingEmail",
    "SmtpEmailSender",
    "UnconfiguredEmailSender",
    "build_email_sender",
]
