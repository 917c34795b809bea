"""
Send Login MFA Code Use Case

Emails a fresh 6-digit code for an open login challenge. Any earlier
unconsumed code is replaced.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.email_sender import IEmailSender
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, MfaType
from .dtos import MessageResponse
from .verify_mfa_use_case import challenge_open

logger = logging.getLogger(__name__)


class SendLoginMfaCodeUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        email_sender: IEmailSender,
        context: Optional[RequestContext] = None,
        mfa_service: Optional[MfaService] = None,
    ):
        self.uow = uow
        self.email_sender = email_sender
        self.context = context
        self.mfa_service = mfa_service or MfaService()

    async def execute(self, user_id: UUID) -> Result[MessageResponse]:
        async with self.uow:
            now = datetime.utcnow()
            user = await self.uow.users.get_by_id(user_id)
            if not challenge_open(user, now) or user.mfa_type != MfaType.email:
                return Return.err(Error("INVALID_MFA_REQUEST", "Invalid MFA request"))

            code = self.mfa_service.issue_email_code(user, now)
            await self.uow.users.update(user)

            delivery = await self.email_sender.send_mfa_code(user.email, code)
            await AuditTrail(self.uow, self.context).record(
                AuditAction.mfa_code_sent,
                user_id=user.id,
                details={"purpose": "login", "delivered": delivery.success},
            )
            await self.uow.commit()

            if not delivery.success:
                return Return.err(
                    Error("EMAIL_DELIVERY_FAILED", "Could not send verification code")
                )
            return Return.ok(MessageResponse(message="MFA code sent to your email"))
