from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import AuditLog


class IAuditLogRepository(ABC):
    """AuditLog repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_log: AuditLog) -> AuditLog:
        """Append a new audit entry (immutable)"""
        pass

    @abstractmethod
    async def count_by_user_action_since(
        self, user_id: UUID, action: str, since: datetime
    ) -> int:
        """Count a user's entries for an action created at or after since"""
        pass

    @abstractmethod
    async def get_latest_by_user_action(
        self, user_id: UUID, action: str
    ) -> Optional[AuditLog]:
        """Most recent entry of an action for a user"""
        pass

    @abstractmethod
    async def get_by_user_paginated(
        self, user_id: UUID, limit: int = 50, cursor: Optional[str] = None
    ) -> Tuple[List[AuditLog], Optional[str]]:
        """
        Get a user's audit entries with cursor-based pagination.

        Returns:
            Tuple of (entries list, next_cursor)
            - entries: ordered by created_at DESC
            - next_cursor: Cursor for next page, None if no more entries
        """
        pass
