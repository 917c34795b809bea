from typing import Optional
from uuid import UUID

from src.libs.result import Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction
from .dtos import MessageResponse


class LogoutUseCase:
    """Tokens are stateless; logout only leaves an audit trail."""

    def __init__(self, uow: UnitOfWork, context: Optional[RequestContext] = None):
        self.uow = uow
        self.context = context

    async def execute(self, user_id: UUID) -> Result[MessageResponse]:
        async with self.uow:
            await AuditTrail(self.uow, self.context).record(AuditAction.logout, user_id=user_id)
            await self.uow.commit()
            return Return.ok(MessageResponse(message="Logged out successfully"))
