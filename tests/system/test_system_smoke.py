"""
System smoke test: the whole account lifecycle in-process over HTTP.

register -> verify -> login -> me -> forgot -> reset -> login with the new
password, with the clock moved past every expiry on the way.
"""

import pytest
from httpx import AsyncClient

EMAIL = "smoke@example.com"


@pytest.mark.asyncio
async def test_account_lifecycle(client: AsyncClient, mailer, clock):
    health = await client.get("/health")
    assert health.status_code == 200

    # Register
    response = await client.post(
        "/api/auth/register",
        json={"name": "Smoke Test", "email": EMAIL, "password": "Secret123", "role": "employer"},
    )
    assert response.status_code == 201
    first_code = mailer.last_code(EMAIL)

    # Login is refused until the address is verified
    response = await client.post("/api/auth/login", json={"email": EMAIL, "password": "Secret123"})
    assert response.status_code == 403

    # The first code expires; a resend issues a working one
    clock.advance(minutes=11)
    response = await client.post("/api/auth/verify-email", json={"email": EMAIL, "token": first_code})
    assert response.status_code == 400
    assert response.json()["error"] == "token_expired"

    response = await client.post("/api/auth/resend-verification", json={"email": EMAIL})
    assert response.status_code == 200

    response = await client.post(
        "/api/auth/verify-email",
        json={"email": EMAIL, "token": mailer.last_code(EMAIL)},
    )
    assert response.status_code == 200
    session = response.json()["data"]
    assert session["user"]["role"] == "employer"

    # The verification session works for /me
    headers = {"Authorization": f"Bearer {session['token']}"}
    response = await client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["isEmailVerified"] is True

    # Login
    response = await client.post("/api/auth/login", json={"email": EMAIL, "password": "Secret123"})
    assert response.status_code == 200

    # Password reset
    response = await client.post("/api/auth/forgot-password", json={"email": EMAIL})
    assert response.status_code == 200
    token = mailer.last_reset_token(EMAIL)

    response = await client.put(f"/api/auth/reset-password/{token}", json={"password": "Changed456"})
    assert response.status_code == 200
    assert mailer.sent[-1].subject.startswith("Password Reset Successful")

    response = await client.put(f"/api/auth/reset-password/{token}", json={"password": "Again789"})
    assert response.status_code == 400

    response = await client.post("/api/auth/login", json={"email": EMAIL, "password": "Secret123"})
    assert response.status_code == 401
    response = await client.post("/api/auth/login", json={"email": EMAIL, "password": "Changed456"})
    assert response.status_code == 200

    # Sessions last seven days
    clock.advance(days=7)
    response = await client.get("/api/auth/me", headers=headers)
    assert response.status_code == 401

    response = await client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200
