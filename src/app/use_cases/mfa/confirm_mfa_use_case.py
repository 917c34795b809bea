"""
Confirm MFA Use Case

Completes enrollment: one valid code against the pending configuration
switches MFA on and produces the backup codes.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, MfaType
from .dtos import ConfirmMfaResponse


class ConfirmMfaUseCase:
    """
    Business Rules:
    - A pending enrollment must exist (MFA_ENROLLMENT_NOT_FOUND)
    - The code is checked against the pending secret (TOTP) or the emailed code
    - On success: mfa_enabled=True, mfa_type set, mfa_secret set only for TOTP,
      pending fields cleared, fresh backup codes stored as hashes
    - Invalid code -> INVALID_MFA_CODE and an MFA_ENABLED entry with success=False
    """

    def __init__(
        self,
        uow: UnitOfWork,
        context: Optional[RequestContext] = None,
        mfa_service: Optional[MfaService] = None,
    ):
        self.uow = uow
        self.context = context
        self.mfa_service = mfa_service or MfaService()

    async def execute(self, user_id: UUID, code: str) -> Result[ConfirmMfaResponse]:
        async with self.uow:
            audit = AuditTrail(self.uow, self.context)
            now = datetime.utcnow()

            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            if user.mfa_enabled:
                return Return.err(Error("MFA_ALREADY_ENABLED", "MFA is already enabled"))
            if user.mfa_pending_type is None:
                return Return.err(
                    Error("MFA_ENROLLMENT_NOT_FOUND", "No MFA enrollment found. Please enable MFA first.")
                )

            pending_type = MfaType(user.mfa_pending_type)
            if pending_type == MfaType.totp:
                valid = self.mfa_service.verify_totp(user.mfa_pending_secret, code)
            else:
                valid = await self.mfa_service.verify_email_code(self.uow, user, code, now)

            if not valid:
                await audit.record(
                    AuditAction.mfa_enabled,
                    user_id=user.id,
                    details={"success": False, "type": pending_type.value, "reason": "Invalid MFA code"},
                    risk_score=20,
                )
                await self.uow.commit()
                return Return.err(Error("INVALID_MFA_CODE", "Invalid MFA code"))

            codes, hashes = self.mfa_service.generate_backup_codes()
            user.mfa_enabled = True
            user.mfa_type = pending_type
            user.mfa_secret = user.mfa_pending_secret if pending_type == MfaType.totp else None
            user.mfa_pending_type = None
            user.mfa_pending_secret = None
            user.mfa_backup_codes = hashes
            await self.uow.users.update(user)

            await audit.record(
                AuditAction.mfa_enabled,
                user_id=user.id,
                details={"success": True, "type": pending_type.value, "backup_codes": len(codes)},
            )
            await self.uow.commit()

            return Return.ok(
                ConfirmMfaResponse(
                    message="MFA enabled successfully",
                    type=pending_type.value,
                    backup_codes=codes,
                )
            )
