"""
Account Lockout Guard

Unlocked -> (threshold failed attempts) -> Locked (fixed duration)
-> (expiry) -> Unlocked. Counter updates are delegated to atomic
repository operations.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from config import ApplicationConfig
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User

logger = logging.getLogger(__name__)


class LockoutGuard:
    def __init__(self, threshold: int = None, lock_duration: Optional[timedelta] = None):
        self.threshold = threshold or ApplicationConfig.LOCKOUT_THRESHOLD
        self.lock_duration = lock_duration or timedelta(
            minutes=ApplicationConfig.LOCKOUT_DURATION_MINUTES
        )

    @staticmethod
    def is_locked(user: User, now: datetime) -> bool:
        return user.lock_until is not None and user.lock_until > now

    @staticmethod
    def lock_expired(user: User, now: datetime) -> bool:
        return user.lock_until is not None and user.lock_until <= now

    async def release_expired(self, uow: UnitOfWork, user: User, now: datetime) -> bool:
        """Clear a lock whose period has elapsed. True if one was cleared."""
        if not self.lock_expired(user, now):
            return False
        return await uow.users.clear_expired_lock(user.id, now)

    async def register_failure(self, uow: UnitOfWork, user: User, now: datetime) -> User:
        """Count a failed password check; returns the refreshed user."""
        updated = await uow.users.register_failed_login(
            user.id, now, self.threshold, now + self.lock_duration
        )
        return updated or user

    async def register_success(self, uow: UnitOfWork, user: User, now: datetime) -> None:
        await uow.users.reset_login_attempts(user.id, now)
