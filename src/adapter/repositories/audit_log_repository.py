import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_log_repository import IAuditLogRepository
from src.domain.entities import AuditLog


class AuditLogRepository(IAuditLogRepository):
    """AuditLog repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_log: AuditLog) -> AuditLog:
        """Append a new audit entry (immutable)"""
        # Savepoint so a failed append cannot poison the caller's transaction
        async with self.session.begin_nested():
            self.session.add(audit_log)
            await self.session.flush()
        return audit_log

    async def count_by_user_action_since(
        self, user_id: UUID, action: str, since: datetime
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(AuditLog)
            .where(
                AuditLog.user_id == user_id,
                AuditLog.action == action,
                AuditLog.created_at >= since,
            )
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get_latest_by_user_action(
        self, user_id: UUID, action: str
    ) -> Optional[AuditLog]:
        stmt = (
            select(AuditLog)
            .where(AuditLog.user_id == user_id, AuditLog.action == action)
            .order_by(AuditLog.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_user_paginated(
        self, user_id: UUID, limit: int = 50, cursor: Optional[str] = None
    ) -> Tuple[List[AuditLog], Optional[str]]:
        """
        Get a user's audit entries with cursor-based pagination.

        Cursor format: base64-encoded ISO timestamp of created_at
        """
        stmt = select(AuditLog).where(AuditLog.user_id == user_id)

        if cursor:
            try:
                cursor_timestamp_str = base64.b64decode(cursor).decode("utf-8")
                cursor_timestamp = datetime.fromisoformat(cursor_timestamp_str)
                stmt = stmt.where(AuditLog.created_at < cursor_timestamp)
            except (ValueError, TypeError):
                # Invalid cursor, ignore and return from beginning
                pass

        stmt = stmt.order_by(AuditLog.created_at.desc()).limit(limit + 1)

        result = await self.session.execute(stmt)
        entries = list(result.scalars().all())

        has_more = len(entries) > limit
        if has_more:
            entries = entries[:limit]

        next_cursor = None
        if has_more and entries:
            cursor_timestamp_str = entries[-1].created_at.isoformat()
            next_cursor = base64.b64encode(cursor_timestamp_str.encode("utf-8")).decode("utf-8")

        return entries, next_cursor
