from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pyotp
import pytest

from src.app.services.mfa_service import MfaService, hash_code
from src.domain.entities import User

# Fixed instant aligned to nothing in particular; pyotp takes unix seconds
GENERATED_AT = 1_700_000_007


@pytest.fixture
def mfa():
    return MfaService(
        valid_window=2,
        email_code_ttl=timedelta(minutes=10),
        issuer="SecureBidz",
        backup_code_count=4,
        backup_code_rounds=4,
    )


@pytest.fixture
def uow():
    uow = MagicMock()
    uow.users = MagicMock()
    uow.users.consume_email_mfa_code = AsyncMock(return_value=True)
    uow.users.consume_backup_code = AsyncMock(return_value=True)
    return uow


def _user():
    return User(name="Alice", email="alice@example.com", password_hash="x")


@pytest.mark.parametrize("drift", [0, 30, -30, 60, -60])
def test_totp_code_accepted_within_sixty_seconds(mfa, drift):
    secret = mfa.generate_totp_secret()
    code = pyotp.TOTP(secret).at(GENERATED_AT)

    assert mfa.verify_totp(secret, code, for_time=GENERATED_AT + drift) is True


@pytest.mark.parametrize("drift", [90, -90, 300])
def test_totp_code_rejected_outside_window(mfa, drift):
    secret = mfa.generate_totp_secret()
    code = pyotp.TOTP(secret).at(GENERATED_AT)

    assert mfa.verify_totp(secret, code, for_time=GENERATED_AT + drift) is False


def test_totp_without_secret_fails(mfa):
    assert mfa.verify_totp(None, "123456") is False
    assert mfa.verify_totp("JBSWY3DPEHPK3PXP", "") is False


def test_provisioning_uri_names_issuer_and_account(mfa):
    uri = mfa.provisioning_uri("JBSWY3DPEHPK3PXP", "alice@example.com")

    assert uri.startswith("otpauth://totp/")
    assert "issuer=SecureBidz" in uri
    assert "alice%40example.com" in uri


def test_email_code_is_six_digits(mfa):
    for _ in range(20):
        code = mfa.generate_email_code()
        assert len(code) == 6
        assert code.isdigit()


def test_issue_email_code_stores_only_hash(mfa):
    user = _user()
    now = datetime(2024, 5, 1, 12, 0, 0)

    code = mfa.issue_email_code(user, now)

    assert user.email_mfa_code_hash == hash_code(code)
    assert user.email_mfa_code_hash != code
    assert user.email_mfa_code_expires == now + timedelta(minutes=10)


def test_new_email_code_replaces_previous(mfa):
    user = _user()
    now = datetime(2024, 5, 1, 12, 0, 0)

    first = mfa.issue_email_code(user, now)
    second = mfa.issue_email_code(user, now)

    assert user.email_mfa_code_hash == hash_code(second)
    if first != second:
        assert user.email_mfa_code_hash != hash_code(first)


@pytest.mark.asyncio
async def test_email_code_verifies_once(mfa, uow):
    user = _user()
    now = datetime(2024, 5, 1, 12, 0, 0)
    user.email_mfa_code_hash = hash_code("482913")
    user.email_mfa_code_expires = now + timedelta(minutes=10)

    assert await mfa.verify_email_code(uow, user, "482913", now) is True
    uow.users.consume_email_mfa_code.assert_awaited_once_with(user.id, hash_code("482913"))

    # The conditional clear already happened; a second caller loses
    uow.users.consume_email_mfa_code.return_value = False
    assert await mfa.verify_email_code(uow, user, "482913", now) is False


@pytest.mark.asyncio
async def test_wrong_email_code_still_consumes(mfa, uow):
    user = _user()
    now = datetime(2024, 5, 1, 12, 0, 0)
    user.email_mfa_code_hash = hash_code("482913")
    user.email_mfa_code_expires = now + timedelta(minutes=10)

    assert await mfa.verify_email_code(uow, user, "000000", now) is False
    uow.users.consume_email_mfa_code.assert_awaited_once()


@pytest.mark.asyncio
async def test_expired_email_code_rejected(mfa, uow):
    user = _user()
    now = datetime(2024, 5, 1, 12, 0, 0)
    user.email_mfa_code_hash = hash_code("482913")
    user.email_mfa_code_expires = now - timedelta(seconds=1)

    assert await mfa.verify_email_code(uow, user, "482913", now) is False


@pytest.mark.asyncio
async def test_no_email_code_issued(mfa, uow):
    assert await mfa.verify_email_code(uow, _user(), "482913", datetime.utcnow()) is False
    uow.users.consume_email_mfa_code.assert_not_awaited()


@pytest.mark.asyncio
async def test_backup_codes_are_hashed_and_single_use(mfa, uow):
    codes, hashes = mfa.generate_backup_codes()
    user = _user()
    user.mfa_backup_codes = hashes

    assert len(codes) == 4
    assert all(len(code) == 8 and code.isalnum() and code.upper() == code for code in codes)
    assert not set(codes) & set(hashes)

    assert await mfa.consume_backup_code(uow, user, codes[1].lower()) is True
    assert len(user.mfa_backup_codes) == 3
    uow.users.consume_backup_code.assert_awaited_once_with(
        user.id, hashes, [hashes[0], hashes[2], hashes[3]]
    )
    assert await mfa.consume_backup_code(uow, user, codes[1]) is False
    assert await mfa.consume_backup_code(uow, user, "") is False


@pytest.mark.asyncio
async def test_backup_code_rejected_when_list_changed_concurrently(mfa, uow):
    codes, hashes = mfa.generate_backup_codes()
    user = _user()
    user.mfa_backup_codes = hashes
    uow.users.consume_backup_code.return_value = False

    assert await mfa.consume_backup_code(uow, user, codes[0]) is False
    assert user.mfa_backup_codes == hashes
