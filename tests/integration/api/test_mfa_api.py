import pyotp
import pytest
from httpx import AsyncClient

from tests.utils.http import bearer


async def _login(client: AsyncClient, user: dict):
    return await client.post(
        "/api/auth/login", json={"email": user["email"], "password": user["password"]}
    )


@pytest.mark.asyncio
async def test_totp_enrollment_and_login(client: AsyncClient, signed_up):
    """TOTP MFA

    Given a signed-up user enables TOTP and confirms it with a valid code
    When they log in with the correct password
    Then they get an MFA challenge instead of a token
    And a valid TOTP code completes the login
    """
    token, user_id, user = await signed_up("alice")

    enabled = await client.post("/api/auth/enable-mfa", json={"type": "totp"}, headers=bearer(token))
    assert enabled.status_code == 200
    secret = enabled.json()["secret"]
    assert enabled.json()["otpauthUrl"].startswith("otpauth://totp/")

    confirmed = await client.post(
        "/api/auth/confirm-mfa", json={"code": pyotp.TOTP(secret).now()}, headers=bearer(token)
    )
    assert confirmed.status_code == 200
    assert len(confirmed.json()["backupCodes"]) == 10

    challenge = await _login(client, user)
    assert challenge.status_code == 200
    assert challenge.json() == {
        "message": "MFA required",
        "requiresMFA": True,
        "userId": user_id,
        "mfaType": "totp",
        "availableMfaTypes": ["totp", "backup"],
    }

    verified = await client.post(
        "/api/auth/verify-mfa",
        json={"userId": user_id, "code": pyotp.TOTP(secret).now(), "type": "totp"},
    )
    assert verified.status_code == 200
    assert verified.json()["token"]

    profile = await client.get("/api/auth/profile", headers=bearer(verified.json()["token"]))
    assert profile.json()["mfaEnabled"] is True
    assert profile.json()["mfaType"] == "totp"


@pytest.mark.asyncio
async def test_backup_code_works_once(client: AsyncClient, signed_up):
    token, user_id, user = await signed_up("alice")
    secret = (
        await client.post("/api/auth/enable-mfa", json={"type": "totp"}, headers=bearer(token))
    ).json()["secret"]
    backup_codes = (
        await client.post(
            "/api/auth/confirm-mfa", json={"code": pyotp.TOTP(secret).now()}, headers=bearer(token)
        )
    ).json()["backupCodes"]

    await _login(client, user)
    first = await client.post(
        "/api/auth/verify-mfa", json={"userId": user_id, "code": backup_codes[0], "type": "backup"}
    )
    await _login(client, user)
    second = await client.post(
        "/api/auth/verify-mfa", json={"userId": user_id, "code": backup_codes[0], "type": "backup"}
    )

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "INVALID_MFA_CODE"


@pytest.mark.asyncio
async def test_verify_without_login_challenge(client: AsyncClient, signed_up):
    token, user_id, _ = await signed_up("alice")
    secret = (
        await client.post("/api/auth/enable-mfa", json={"type": "totp"}, headers=bearer(token))
    ).json()["secret"]
    await client.post(
        "/api/auth/confirm-mfa", json={"code": pyotp.TOTP(secret).now()}, headers=bearer(token)
    )

    response = await client.post(
        "/api/auth/verify-mfa",
        json={"userId": user_id, "code": pyotp.TOTP(secret).now(), "type": "totp"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_MFA_CODE"


@pytest.mark.asyncio
async def test_email_mfa_code_is_single_use(client: AsyncClient, signed_up, outbox):
    """Email MFA

    Given a user with email MFA enabled and an open login challenge
    When the emailed code is submitted twice
    Then the first attempt logs in and the second is rejected
    """
    token, user_id, user = await signed_up("bob")

    enabled = await client.post("/api/auth/enable-mfa", json={"type": "email"}, headers=bearer(token))
    assert enabled.status_code == 200
    assert "secret" not in enabled.json()
    confirmed = await client.post(
        "/api/auth/confirm-mfa", json={"code": outbox.last_code()}, headers=bearer(token)
    )
    assert confirmed.status_code == 200

    challenge = await _login(client, user)
    assert challenge.json()["mfaType"] == "email"

    sent = await client.post("/api/auth/send-login-mfa-code", json={"userId": user_id})
    assert sent.status_code == 200
    code = outbox.last_code()

    first = await client.post(
        "/api/auth/verify-mfa", json={"userId": user_id, "code": code, "type": "email"}
    )
    await _login(client, user)
    second = await client.post(
        "/api/auth/verify-mfa", json={"userId": user_id, "code": code, "type": "email"}
    )

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "INVALID_MFA_CODE"


@pytest.mark.asyncio
async def test_login_code_needs_open_challenge(client: AsyncClient, signed_up, outbox):
    _, user_id, _ = await signed_up("bob")

    response = await client.post("/api/auth/send-login-mfa-code", json={"userId": user_id})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_MFA_REQUEST"
    assert outbox.sent == []


@pytest.mark.asyncio
async def test_disable_mfa_restores_password_login(client: AsyncClient, signed_up):
    token, _, user = await signed_up("alice")
    secret = (
        await client.post("/api/auth/enable-mfa", json={"type": "totp"}, headers=bearer(token))
    ).json()["secret"]
    await client.post(
        "/api/auth/confirm-mfa", json={"code": pyotp.TOTP(secret).now()}, headers=bearer(token)
    )

    refused = await client.post(
        "/api/auth/disable-mfa", json={"password": "Mango#Rivet58"}, headers=bearer(token)
    )
    disabled = await client.post(
        "/api/auth/disable-mfa", json={"password": user["password"]}, headers=bearer(token)
    )
    login = await _login(client, user)

    assert refused.status_code == 400
    assert disabled.status_code == 200
    assert login.json()["token"]


@pytest.mark.asyncio
async def test_confirm_without_enable(client: AsyncClient, signed_up):
    token, _, _ = await signed_up("alice")

    response = await client.post("/api/auth/confirm-mfa", json={"code": "123456"}, headers=bearer(token))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MFA_ENROLLMENT_NOT_FOUND"
