"""
Audit API Routes

Lets a user review their own security events.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import GetAuditEventsUseCase
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/audit", tags=["Audit"])


class AuditEventResponse(BaseModel):
    """Single audit event in response"""

    action: str
    timestamp: str
    ip_address: Optional[str]
    user_agent: Optional[str]
    location: Optional[Dict[str, Any]]
    risk_score: int
    details: Dict[str, Any]


class AuditEventsResponse(BaseModel):
    """GET /audit/events response payload"""

    events: List[AuditEventResponse]
    next_cursor: Optional[str]


@router.get(
    "/events",
    status_code=status.HTTP_200_OK,
    response_model=AuditEventsResponse,
)
async def get_audit_events(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of events to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
):
    """
    Get Own Audit Events

    Query Parameters:
        - limit: Maximum number of events to return (1-100, default 50)
        - cursor: Pagination cursor for fetching next page

    Returns:
        - events: List of audit events ordered by newest first
        - next_cursor: Cursor for next page (null if no more events)

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
    """
    user_id = UUID(current_user["user_id"])

    use_case = GetAuditEventsUseCase(uow)
    result = await use_case.execute(user_id=user_id, limit=limit, cursor=cursor)

    if result.is_err():
        error = result.error
        if error.code == "VALIDATION_ERROR":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value
