"""
Enable MFA Use Case

Starts a two-phase enrollment. Nothing is switched on here; the pending
secret (TOTP) or emailed code (email) must be confirmed first.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.email_sender import IEmailSender
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, MfaType
from .dtos import EnableMfaResponse


class EnableMfaUseCase:
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

    async def execute(self, user_id: UUID, mfa_type: MfaType) -> Result[EnableMfaResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            if user.mfa_enabled:
                return Return.err(Error("MFA_ALREADY_ENABLED", "MFA is already enabled"))

            now = datetime.utcnow()
            user.mfa_pending_type = mfa_type
            secret = None
            otpauth_url = None
            code = None

            if mfa_type == MfaType.totp:
                secret = self.mfa_service.generate_totp_secret()
                otpauth_url = self.mfa_service.provisioning_uri(secret, user.email)
                user.mfa_pending_secret = secret
            else:
                user.mfa_pending_secret = None
                code = self.mfa_service.issue_email_code(user, now)

            await self.uow.users.update(user)

            delivered = None
            if code is not None:
                delivered = (await self.email_sender.send_mfa_code(user.email, code)).success

            await AuditTrail(self.uow, self.context).record(
                AuditAction.mfa_enrollment_started,
                user_id=user.id,
                details={"type": mfa_type.value, "code_delivered": delivered},
            )
            await self.uow.commit()

            if delivered is False:
                return Return.err(
                    Error("EMAIL_DELIVERY_FAILED", "Could not send verification code")
                )

            message = (
                "Scan the QR code with your authenticator app, then confirm with a code"
                if mfa_type == MfaType.totp
                else "A verification code was sent to your email, confirm it to enable MFA"
            )
            return Return.ok(
                EnableMfaResponse(
                    message=message,
                    type=mfa_type.value,
                    secret=secret,
                    otpauth_url=otpauth_url,
                )
            )
