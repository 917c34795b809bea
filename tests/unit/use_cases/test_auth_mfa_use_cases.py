from datetime import datetime, timedelta

import pyotp
import pytest

from src.app.services.mfa_service import MfaService, hash_code
from src.app.use_cases.auth import SendLoginMfaCodeUseCase, VerifyMfaUseCase
from src.domain.entities import MfaType, MfaVerificationType
from tests.utils.fakes import FakeEmailSender, fast_code_hash, recorded_actions, recorded_entries

SECRET = "JBSWY3DPEHPK3PXP"


def _open_challenge(user):
    user.mfa_challenge_expires = datetime.utcnow() + timedelta(minutes=10)


def _stored_code_consumer(user):
    """Mimics the conditional clear done by the repository"""

    def consume(user_id, expected_hash):
        if user.email_mfa_code_hash != expected_hash:
            return False
        user.email_mfa_code_hash = None
        user.email_mfa_code_expires = None
        return True

    return consume


@pytest.fixture
def totp_user(make_user):
    user = make_user(mfa_enabled=True, mfa_type=MfaType.totp, mfa_secret=SECRET)
    _open_challenge(user)
    return user


@pytest.fixture
def email_user(make_user):
    user = make_user(mfa_enabled=True, mfa_type=MfaType.email)
    _open_challenge(user)
    return user


@pytest.mark.asyncio
async def test_valid_totp_code_issues_token(mock_uow, totp_user):
    mock_uow.users.get_by_id.return_value = totp_user
    code = pyotp.TOTP(SECRET).now()

    result = await VerifyMfaUseCase(mock_uow).execute(totp_user.id, code, MfaVerificationType.totp)

    assert result.is_ok()
    assert result.value.token
    assert totp_user.mfa_challenge_expires is None
    assert recorded_actions(mock_uow) == ["LOGIN_SUCCESS"]
    assert recorded_entries(mock_uow, "LOGIN_SUCCESS")[0].details["method"] == "MFA"


@pytest.mark.asyncio
async def test_invalid_totp_code_is_audited(mock_uow, totp_user):
    mock_uow.users.get_by_id.return_value = totp_user
    wrong = "000000" if pyotp.TOTP(SECRET).now() != "000000" else "111111"

    result = await VerifyMfaUseCase(mock_uow).execute(totp_user.id, wrong, MfaVerificationType.totp)

    assert result.error.code == "INVALID_MFA_CODE"
    assert recorded_actions(mock_uow) == ["LOGIN_FAILED"]
    assert totp_user.mfa_challenge_expires is not None


@pytest.mark.asyncio
async def test_email_code_cannot_be_used_twice(mock_uow, email_user):
    """Given email MFA code 482913 was issued
    When it is submitted once and then again
    Then the first succeeds and the second fails with INVALID_MFA_CODE
    """
    email_user.email_mfa_code_hash = hash_code("482913")
    email_user.email_mfa_code_expires = datetime.utcnow() + timedelta(minutes=10)
    mock_uow.users.get_by_id.return_value = email_user
    mock_uow.users.consume_email_mfa_code.side_effect = _stored_code_consumer(email_user)

    first = await VerifyMfaUseCase(mock_uow).execute(email_user.id, "482913", MfaVerificationType.email)
    _open_challenge(email_user)
    second = await VerifyMfaUseCase(mock_uow).execute(email_user.id, "482913", MfaVerificationType.email)

    assert first.is_ok()
    assert second.is_err()
    assert second.error.code == "INVALID_MFA_CODE"


@pytest.mark.asyncio
async def test_wrong_email_code_burns_the_stored_code(mock_uow, email_user):
    email_user.email_mfa_code_hash = hash_code("482913")
    email_user.email_mfa_code_expires = datetime.utcnow() + timedelta(minutes=10)
    mock_uow.users.get_by_id.return_value = email_user
    mock_uow.users.consume_email_mfa_code.side_effect = _stored_code_consumer(email_user)

    wrong = await VerifyMfaUseCase(mock_uow).execute(email_user.id, "111111", MfaVerificationType.email)
    right = await VerifyMfaUseCase(mock_uow).execute(email_user.id, "482913", MfaVerificationType.email)

    assert wrong.error.code == "INVALID_MFA_CODE"
    assert right.error.code == "INVALID_MFA_CODE"


@pytest.mark.asyncio
async def test_type_must_match_configured_method(mock_uow, totp_user):
    mock_uow.users.get_by_id.return_value = totp_user

    result = await VerifyMfaUseCase(mock_uow).execute(
        totp_user.id, pyotp.TOTP(SECRET).now(), MfaVerificationType.email
    )

    assert result.error.code == "INVALID_MFA_CODE"


@pytest.mark.asyncio
async def test_backup_code_is_consumed(mock_uow, totp_user):
    totp_user.mfa_backup_codes = [fast_code_hash("ABCD2345"), fast_code_hash("WXYZ6789")]
    mock_uow.users.get_by_id.return_value = totp_user

    result = await VerifyMfaUseCase(mock_uow).execute(totp_user.id, "abcd2345", MfaVerificationType.backup)

    assert result.is_ok()
    assert len(totp_user.mfa_backup_codes) == 1
    assert recorded_actions(mock_uow) == ["BACKUP_CODE_USED", "LOGIN_SUCCESS"]
    assert recorded_entries(mock_uow, "BACKUP_CODE_USED")[0].details["remaining"] == 1


@pytest.mark.asyncio
async def test_backup_code_used_by_concurrent_request_is_refused(mock_uow, totp_user):
    totp_user.mfa_backup_codes = [fast_code_hash("ABCD2345"), fast_code_hash("WXYZ6789")]
    mock_uow.users.get_by_id.return_value = totp_user
    mock_uow.users.consume_backup_code.return_value = False

    result = await VerifyMfaUseCase(mock_uow).execute(totp_user.id, "ABCD2345", MfaVerificationType.backup)

    assert result.error.code == "INVALID_MFA_CODE"
    assert len(totp_user.mfa_backup_codes) == 2
    assert recorded_actions(mock_uow) == ["LOGIN_FAILED"]


@pytest.mark.asyncio
async def test_verification_requires_open_challenge(mock_uow, totp_user):
    totp_user.mfa_challenge_expires = datetime.utcnow() - timedelta(seconds=1)
    mock_uow.users.get_by_id.return_value = totp_user

    result = await VerifyMfaUseCase(mock_uow).execute(
        totp_user.id, pyotp.TOTP(SECRET).now(), MfaVerificationType.totp
    )

    assert result.error.code == "INVALID_MFA_CODE"
    assert recorded_actions(mock_uow) == ["LOGIN_FAILED"]


@pytest.mark.asyncio
async def test_locked_account_cannot_finish_challenge(mock_uow, totp_user):
    totp_user.lock_until = datetime.utcnow() + timedelta(hours=1)
    totp_user.is_locked = True
    mock_uow.users.get_by_id.return_value = totp_user

    result = await VerifyMfaUseCase(mock_uow).execute(
        totp_user.id, pyotp.TOTP(SECRET).now(), MfaVerificationType.totp
    )

    assert result.error.code == "ACCOUNT_LOCKED"


@pytest.mark.asyncio
async def test_send_login_code_replaces_previous_code(mock_uow, email_user, email_sender):
    email_user.email_mfa_code_hash = hash_code("482913")
    mock_uow.users.get_by_id.return_value = email_user

    result = await SendLoginMfaCodeUseCase(mock_uow, email_sender).execute(email_user.id)

    assert result.is_ok()
    code = email_sender.last_code()
    assert email_user.email_mfa_code_hash == hash_code(code)
    assert email_user.email_mfa_code_expires > datetime.utcnow()
    assert recorded_entries(mock_uow, "MFA_CODE_SENT")[0].details["delivered"] is True


@pytest.mark.asyncio
async def test_send_login_code_reports_delivery_failure(mock_uow, email_user):
    mock_uow.users.get_by_id.return_value = email_user

    result = await SendLoginMfaCodeUseCase(mock_uow, FakeEmailSender(success=False)).execute(email_user.id)

    assert result.error.code == "EMAIL_DELIVERY_FAILED"
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_login_code_needs_email_mfa_and_challenge(mock_uow, totp_user, email_sender):
    mock_uow.users.get_by_id.return_value = totp_user

    result = await SendLoginMfaCodeUseCase(mock_uow, email_sender).execute(totp_user.id)

    assert result.error.code == "INVALID_MFA_REQUEST"
    assert email_sender.sent == []


def test_default_service_uses_two_step_window():
    assert MfaService().valid_window == 2
