"""
Login Use Case

Credential check -> lockout guard -> audit/risk -> (MFA challenge) -> token.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from config import ApplicationConfig
from src.libs.result import Error, Result, Return
from src.api.utils.jwt import generate_jwt
from src.app.services.audit_trail import AuditTrail, RequestContext, RiskEngine
from src.app.services.credentials import burn_password_check, verify_password
from src.app.services.email_sender import IEmailSender
from src.app.services.lockout_guard import LockoutGuard
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, MfaVerificationType, User
from .dtos import LoginResponse, UserInfo

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid credentials")
ACCOUNT_LOCKED = Error(
    "ACCOUNT_LOCKED",
    "Account temporarily locked due to multiple failed login attempts. Try again later.",
)


async def notify_lockout(
    uow: UnitOfWork, email_sender: IEmailSender, user: User
) -> Optional[bool]:
    """
    Send the lockout alert once per lock period.

    Returns None when the alert was already sent for this period,
    otherwise whether delivery succeeded.
    """
    if user.lock_until is None:
        return None
    claimed = await uow.users.claim_lockout_notification(user.id, user.lock_until)
    if not claimed:
        return None
    result = await email_sender.send_account_lockout_notification(user.email, user.lock_until)
    if not result.success:
        logger.warning("Lockout notification for user %s was not delivered", user.id)
    return result.success


class LoginUseCase:
    """
    Use case for user login and JWT issuance.

    Business Rules:
    - Same INVALID_CREDENTIALS error for unknown email and wrong password
    - Constant-time password comparison even when the user does not exist
    - Locked accounts are rejected (ACCOUNT_LOCKED) without consuming an attempt
    - Each failed password check increments login_attempts atomically;
      reaching the threshold locks the account for 2 hours
    - A success clears attempts and lock and sets last_login
    - With MFA enabled a challenge is opened instead of issuing a token
    - Every failure and every lock produces an audit entry
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_sender: IEmailSender,
        context: Optional[RequestContext] = None,
        risk_engine: Optional[RiskEngine] = None,
        lockout_guard: Optional[LockoutGuard] = None,
    ):
        self.uow = uow
        self.email_sender = email_sender
        self.context = context
        self.risk_engine = risk_engine
        self.lockout_guard = lockout_guard or LockoutGuard()

    async def execute(self, email: str, password: str) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            email: User email
            password: Plain text password

        Returns:
            Result with LoginResponse (token, or MFA challenge), or Error
        """
        email = email.strip().lower()

        async with self.uow:
            audit = AuditTrail(self.uow, self.context, self.risk_engine)
            now = datetime.utcnow()

            user = await self.uow.users.get_by_email(email)
            if user is None:
                burn_password_check(password)
                await audit.record(
                    AuditAction.login_failed,
                    details={"email": email, "reason": "User not found"},
                    risk_score=20,
                )
                await self.uow.commit()
                return Return.err(INVALID_CREDENTIALS)

            if await self.lockout_guard.release_expired(self.uow, user, now):
                await audit.record(
                    AuditAction.account_unlocked,
                    user_id=user.id,
                    details={"reason": "Lock period elapsed"},
                )

            if self.lockout_guard.is_locked(user, now):
                await audit.record(
                    AuditAction.login_failed,
                    user_id=user.id,
                    details={"email": email, "reason": "Account locked"},
                    risk_score=80,
                )
                await notify_lockout(self.uow, self.email_sender, user)
                await self.uow.commit()
                return Return.err(ACCOUNT_LOCKED)

            if not verify_password(password, user.password_hash):
                updated = await self.lockout_guard.register_failure(self.uow, user, now)
                await audit.record(
                    AuditAction.login_failed,
                    user_id=user.id,
                    details={
                        "email": email,
                        "reason": "Invalid password",
                        "attempts": updated.login_attempts,
                    },
                    risk_score=30,
                )
                if self.lockout_guard.is_locked(updated, now):
                    notified = await notify_lockout(self.uow, self.email_sender, updated)
                    if notified is not None:
                        # First observer of this lock period records it
                        await audit.record(
                            AuditAction.account_locked,
                            user_id=user.id,
                            details={
                                "lock_until": updated.lock_until.isoformat(),
                                "attempts": updated.login_attempts,
                                "notification_sent": notified,
                            },
                            risk_score=80,
                        )
                await self.uow.commit()
                return Return.err(INVALID_CREDENTIALS)

            await self.lockout_guard.register_success(self.uow, user, now)

            if user.mfa_enabled:
                user.mfa_challenge_expires = now + timedelta(
                    minutes=ApplicationConfig.MFA_CHALLENGE_TTL_MINUTES
                )
                await self.uow.users.update(user)
                await audit.record(
                    AuditAction.mfa_challenge,
                    user_id=user.id,
                    details={"email": email, "mfa_type": user.mfa_type.value},
                )
                await self.uow.commit()

                available = [user.mfa_type.value]
                if user.mfa_backup_codes:
                    available.append(MfaVerificationType.backup.value)
                return Return.ok(
                    LoginResponse(
                        message="MFA required",
                        requires_mfa=True,
                        user_id=str(user.id),
                        mfa_type=user.mfa_type.value,
                        available_mfa_types=available,
                    )
                )

            await audit.record_assessed(
                AuditAction.login_success, user.id, details={"email": email}
            )
            await self.uow.commit()

            return Return.ok(
                LoginResponse(
                    message="Login successful",
                    token=generate_jwt(user.id, user.email),
                    user=UserInfo(id=str(user.id), name=user.name, email=user.email),
                )
            )
