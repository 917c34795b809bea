"""
Verify MFA Use Case

Answers an open login challenge with a TOTP code, an emailed code or a
backup code, then issues a JWT.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.api.utils.jwt import generate_jwt
from src.app.services.audit_trail import AuditTrail, RequestContext, RiskEngine
from src.app.services.lockout_guard import LockoutGuard
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, MfaVerificationType, User
from .dtos import LoginResponse, UserInfo
from .login_use_case import ACCOUNT_LOCKED

INVALID_MFA_CODE = Error("INVALID_MFA_CODE", "Invalid MFA code")


def challenge_open(user: Optional[User], now: datetime) -> bool:
    return (
        user is not None
        and user.mfa_enabled
        and user.mfa_challenge_expires is not None
        and user.mfa_challenge_expires > now
    )


class VerifyMfaUseCase:
    """
    Business Rules:
    - Requires a challenge opened by a password-verified login
    - type selects the strategy: totp, email or backup
    - totp/email must match the account's configured mfa_type
    - Email codes are cleared on any attempt; backup codes on use
    - Invalid code -> INVALID_MFA_CODE plus a LOGIN_FAILED audit entry
    - Success closes the challenge, records LOGIN_SUCCESS and issues a token
    """

    def __init__(
        self,
        uow: UnitOfWork,
        context: Optional[RequestContext] = None,
        risk_engine: Optional[RiskEngine] = None,
        mfa_service: Optional[MfaService] = None,
    ):
        self.uow = uow
        self.context = context
        self.risk_engine = risk_engine
        self.mfa_service = mfa_service or MfaService()

    async def execute(
        self, user_id: UUID, code: str, mfa_type: MfaVerificationType
    ) -> Result[LoginResponse]:
        async with self.uow:
            audit = AuditTrail(self.uow, self.context, self.risk_engine)
            now = datetime.utcnow()

            user = await self.uow.users.get_by_id(user_id)
            if not challenge_open(user, now):
                await audit.record(
                    AuditAction.login_failed,
                    user_id=user.id if user else None,
                    details={"reason": "No open MFA challenge", "method": mfa_type.value},
                    risk_score=40,
                )
                await self.uow.commit()
                return Return.err(INVALID_MFA_CODE)

            if LockoutGuard.is_locked(user, now):
                await audit.record(
                    AuditAction.login_failed,
                    user_id=user.id,
                    details={"reason": "Account locked", "method": mfa_type.value},
                    risk_score=80,
                )
                await self.uow.commit()
                return Return.err(ACCOUNT_LOCKED)

            valid = await self._verify(user, code, mfa_type, now)
            if not valid:
                await audit.record(
                    AuditAction.login_failed,
                    user_id=user.id,
                    details={"reason": "Invalid MFA code", "method": mfa_type.value},
                    risk_score=40,
                )
                await self.uow.commit()
                return Return.err(INVALID_MFA_CODE)

            user.mfa_challenge_expires = None
            await self.uow.users.update(user)

            if mfa_type == MfaVerificationType.backup:
                await audit.record(
                    AuditAction.backup_code_used,
                    user_id=user.id,
                    details={"remaining": len(user.mfa_backup_codes or [])},
                )
            await audit.record_assessed(
                AuditAction.login_success,
                user.id,
                details={"email": user.email, "method": "MFA", "mfa_type": mfa_type.value},
            )
            await self.uow.commit()

            return Return.ok(
                LoginResponse(
                    message="MFA verification successful",
                    token=generate_jwt(user.id, user.email),
                    user=UserInfo(id=str(user.id), name=user.name, email=user.email),
                )
            )

    async def _verify(
        self, user: User, code: str, mfa_type: MfaVerificationType, now: datetime
    ) -> bool:
        if mfa_type == MfaVerificationType.backup:
            return await self.mfa_service.consume_backup_code(self.uow, user, code)
        if mfa_type.value != user.mfa_type.value:
            return False
        if mfa_type == MfaVerificationType.totp:
            return self.mfa_service.verify_totp(user.mfa_secret, code)
        return await self.mfa_service.verify_email_code(self.uow, user, code, now)
