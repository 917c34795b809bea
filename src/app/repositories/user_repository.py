from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import InventoryItem, User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def register_failed_login(
        self, user_id: UUID, now: datetime, threshold: int, lock_until: datetime
    ) -> Optional[User]:
        """
        Atomically count a failed password check.

        Increments login_attempts in a single conditional UPDATE. When an
        expired lock is still present the counter restarts at 1. When the
        incremented counter reaches threshold and the account is not
        already locked, is_locked/lock_until are set.

        Returns the refreshed user.
        """
        pass

    @abstractmethod
    async def reset_login_attempts(self, user_id: UUID, now: datetime) -> None:
        """Clear attempts and lock fields, set last_login=now"""
        pass

    @abstractmethod
    async def clear_expired_lock(self, user_id: UUID, now: datetime) -> bool:
        """Clear lock fields if lock_until <= now. True if a lock was cleared."""
        pass

    @abstractmethod
    async def claim_lockout_notification(self, user_id: UUID, lock_until: datetime) -> bool:
        """True exactly once per lock period (identified by lock_until)"""
        pass

    @abstractmethod
    async def consume_email_mfa_code(self, user_id: UUID, expected_hash: str) -> bool:
        """
        Clear the stored email code if it still equals expected_hash.

        True only for the single caller that cleared it.
        """
        pass

    @abstractmethod
    async def consume_backup_code(
        self, user_id: UUID, expected_codes: List[str], remaining: List[str]
    ) -> bool:
        """
        Replace the stored backup codes with remaining, but only if they
        still equal expected_codes. True only for the caller that wrote them.
        """
        pass

    @abstractmethod
    async def adjust_wallet(self, user_id: UUID, delta: float) -> Optional[float]:
        """
        Atomically add delta to the wallet, refusing to go below zero.

        Returns the new balance, or None if the update was refused.
        """
        pass

    @abstractmethod
    async def add_inventory_item(self, entry: InventoryItem) -> bool:
        """Add a won item. False if the (user, item) record already exists."""
        pass

    @abstractmethod
    async def get_inventory(self, user_id: UUID) -> List[InventoryItem]:
        """Won items for a user, oldest first"""
        pass
