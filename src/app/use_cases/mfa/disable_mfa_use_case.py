from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.credentials import verify_password
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction
from src.app.use_cases.auth.dtos import MessageResponse


class DisableMfaUseCase:
    """
    Business Rules:
    - Current password must be re-confirmed (INVALID_PASSWORD)
    - Clears secret, pending enrollment, email code, open challenge and backup codes
    """

    def __init__(self, uow: UnitOfWork, context: Optional[RequestContext] = None):
        self.uow = uow
        self.context = context

    async def execute(self, user_id: UUID, password: str) -> Result[MessageResponse]:
        async with self.uow:
            audit = AuditTrail(self.uow, self.context)

            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if not verify_password(password, user.password_hash):
                await audit.record(
                    AuditAction.mfa_disabled,
                    user_id=user.id,
                    details={"success": False, "reason": "Invalid password"},
                    risk_score=25,
                )
                await self.uow.commit()
                return Return.err(Error("INVALID_PASSWORD", "Invalid password"))

            if not user.mfa_enabled:
                return Return.err(Error("MFA_NOT_ENABLED", "MFA is not enabled"))

            user.mfa_enabled = False
            user.mfa_secret = None
            user.mfa_pending_type = None
            user.mfa_pending_secret = None
            user.email_mfa_code_hash = None
            user.email_mfa_code_expires = None
            user.mfa_challenge_expires = None
            user.mfa_backup_codes = []
            await self.uow.users.update(user)

            await audit.record(
                AuditAction.mfa_disabled,
                user_id=user.id,
                details={"success": True},
                risk_score=10,
            )
            await self.uow.commit()
            return Return.ok(MessageResponse(message="MFA disabled successfully"))
