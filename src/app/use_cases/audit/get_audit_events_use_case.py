"""
Get Audit Events Use Case

Retrieves the caller's own security events with pagination.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

MAX_PAGE_SIZE = 100


class GetAuditEventsUseCase:
    """
    Use case for retrieving a user's audit trail.

    Business Rules:
    - Only the caller's own entries are returned (user_id from JWT)
    - Results ordered by newest first
    - Supports cursor-based pagination, 1 <= limit <= 100
    - Each event includes action, timestamp, ip_address, risk_score, details
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        """
        Execute get audit events use case.

        Args:
            user_id: User UUID from JWT
            limit: Maximum number of events to return
            cursor: Pagination cursor (optional)

        Returns:
            Result with events list and next_cursor, or Error
        """
        if limit < 1 or limit > MAX_PAGE_SIZE:
            return Return.err(
                Error("VALIDATION_ERROR", f"limit must be between 1 and {MAX_PAGE_SIZE}")
            )

        async with self.uow:
            entries, next_cursor = await self.uow.audit_logs.get_by_user_paginated(
                user_id, limit=limit, cursor=cursor
            )

            events = [
                {
                    "action": entry.action,
                    "timestamp": entry.created_at.isoformat() + "Z",
                    "ip_address": entry.ip_address,
                    "user_agent": entry.user_agent,
                    "location": entry.location,
                    "risk_score": entry.risk_score,
                    "details": entry.details or {},
                }
                for entry in entries
            ]

            return Return.ok({"events": events, "next_cursor": next_cursor})
