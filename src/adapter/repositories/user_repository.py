import json
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import String, and_, case, cast, func, null
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import InventoryItem, User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _reload(self, user_id: UUID) -> Optional[User]:
        stmt = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        stmt = (
            select(User)
            .where(User.email == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        return await self._reload(user_id)

    async def create(self, user: User) -> User:
        """Create a new user"""
        user.email = user.email.strip().lower()
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def register_failed_login(
        self, user_id: UUID, now: datetime, threshold: int, lock_until: datetime
    ) -> Optional[User]:
        # SET expressions all see the pre-update row, so this is one atomic step
        expired = and_(User.lock_until.is_not(None), User.lock_until <= now)
        reaches_threshold = User.login_attempts + 1 >= threshold
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                login_attempts=case((expired, 1), else_=User.login_attempts + 1),
                is_locked=case(
                    (expired, False),
                    (reaches_threshold, True),
                    else_=User.is_locked,
                ),
                lock_until=case(
                    (expired, null()),
                    (and_(reaches_threshold, User.is_locked == False), lock_until),  # noqa: E712
                    else_=User.lock_until,
                ),
                last_login_attempt=now,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return await self._reload(user_id)

    async def reset_login_attempts(self, user_id: UUID, now: datetime) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                login_attempts=0,
                is_locked=False,
                lock_until=None,
                last_login_attempt=None,
                last_login=now,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self._reload(user_id)

    async def clear_expired_lock(self, user_id: UUID, now: datetime) -> bool:
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.lock_until.is_not(None),
                User.lock_until <= now,
            )
            .values(login_attempts=0, is_locked=False, lock_until=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self._reload(user_id)
        return result.rowcount == 1

    async def claim_lockout_notification(self, user_id: UUID, lock_until: datetime) -> bool:
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.lock_until == lock_until,
                (User.lockout_notified_for.is_(None))
                | (User.lockout_notified_for != lock_until),
            )
            .values(lockout_notified_for=lock_until)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def consume_email_mfa_code(self, user_id: UUID, expected_hash: str) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id, User.email_mfa_code_hash == expected_hash)
            .values(email_mfa_code_hash=None, email_mfa_code_expires=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self._reload(user_id)
        return result.rowcount == 1

    async def consume_backup_code(
        self, user_id: UUID, expected_codes: List[str], remaining: List[str]
    ) -> bool:
        # JSON has no equality operator on every backend; compare the serialized text
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                cast(User.mfa_backup_codes, String) == json.dumps(expected_codes),
            )
            .values(mfa_backup_codes=remaining)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self._reload(user_id)
        return result.rowcount == 1

    async def adjust_wallet(self, user_id: UUID, delta: float) -> Optional[float]:
        stmt = (
            update(User)
            .where(User.id == user_id, User.wallet + delta >= 0)
            .values(wallet=func.round(User.wallet + delta, 2))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        user = await self._reload(user_id)
        return user.wallet

    async def add_inventory_item(self, entry: InventoryItem) -> bool:
        stmt = select(InventoryItem).where(
            InventoryItem.user_id == entry.user_id,
            InventoryItem.item_id == entry.item_id,
        )
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return False
        self.session.add(entry)
        await self.session.flush()
        return True

    async def get_inventory(self, user_id: UUID) -> List[InventoryItem]:
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.user_id == user_id)
            .order_by(InventoryItem.won_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
