from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.domain.entities import User
from tests.utils.fakes import FakeEmailSender, fast_hash


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.register_failed_login = AsyncMock()
    uow.users.reset_login_attempts = AsyncMock()
    uow.users.clear_expired_lock = AsyncMock(return_value=True)
    uow.users.claim_lockout_notification = AsyncMock(return_value=True)
    uow.users.consume_email_mfa_code = AsyncMock(return_value=True)
    uow.users.consume_backup_code = AsyncMock(return_value=True)
    uow.users.adjust_wallet = AsyncMock()
    uow.users.add_inventory_item = AsyncMock(return_value=True)
    uow.users.get_inventory = AsyncMock(return_value=[])

    uow.items = MagicMock()
    uow.items.get_by_id = AsyncMock(return_value=None)
    uow.items.list_all = AsyncMock(return_value=[])
    uow.items.create = AsyncMock(side_effect=lambda item: item)
    uow.items.get_bids = AsyncMock(return_value=[])
    uow.items.try_raise_current_bid = AsyncMock(return_value=True)
    uow.items.add_bid = AsyncMock(side_effect=lambda bid: bid)
    uow.items.get_expired_active = AsyncMock(return_value=[])
    uow.items.mark_sold = AsyncMock(return_value=True)

    uow.audit_logs = MagicMock()
    uow.audit_logs.create = AsyncMock(side_effect=lambda entry: entry)
    uow.audit_logs.count_by_user_action_since = AsyncMock(return_value=0)
    uow.audit_logs.get_latest_by_user_action = AsyncMock(return_value=None)
    uow.audit_logs.get_by_user_paginated = AsyncMock(return_value=([], None))

    return uow


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def make_user():
    def _make(password: str = "Zebra!Tusk79", **overrides) -> User:
        password_hash = fast_hash(password)
        fields = dict(
            name="Alice",
            email="alice@example.com",
            password_hash=password_hash,
            password_history=[
                {"hash": password_hash, "changed_at": datetime.utcnow().isoformat()}
            ],
            wallet=0.0,
        )
        fields.update(overrides)
        return User(**fields)

    return _make
