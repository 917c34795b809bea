"""
Change Password Use Case

Re-authenticates with the current password, applies the password policy
and history check, and records the new hash in the history.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.credentials import hash_password, verify_password
from src.app.services.email_sender import IEmailSender
from src.app.services.password_policy import PasswordPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction
from .dtos import MessageResponse

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Business Rules:
    - Current password must verify (INVALID_PASSWORD)
    - New password must pass the policy (WEAK_PASSWORD)
    - New password must not match any of the last 5 hashes (PASSWORD_REUSED)
    - Every attempt, successful or not, produces one PASSWORD_CHANGE entry
    - A notification email is sent after commit; delivery failure is only logged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_sender: IEmailSender,
        context: Optional[RequestContext] = None,
        password_policy: Optional[PasswordPolicy] = None,
    ):
        self.uow = uow
        self.email_sender = email_sender
        self.context = context
        self.password_policy = password_policy or PasswordPolicy()

    async def execute(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> Result[MessageResponse]:
        async with self.uow:
            audit = AuditTrail(self.uow, self.context)

            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            failure = None
            if not verify_password(current_password, user.password_hash):
                failure = Error("INVALID_PASSWORD", "Current password is incorrect")
                risk_score = 25
            else:
                validation = self.password_policy.validate(new_password)
                risk_score = 0
                if not validation.valid:
                    failure = Error(
                        "WEAK_PASSWORD",
                        validation.violations[0],
                        {"violations": validation.violations},
                    )
                elif not self.password_policy.check_history(user, new_password):
                    failure = Error(
                        "PASSWORD_REUSED",
                        "Password was used recently. Please choose a different password.",
                    )

            if failure is not None:
                await audit.record(
                    AuditAction.password_change,
                    user_id=user.id,
                    details={"success": False, "reason": failure.code},
                    risk_score=risk_score,
                )
                await self.uow.commit()
                return Return.err(failure)

            now = datetime.utcnow()
            new_hash = hash_password(new_password)
            user.password_hash = new_hash
            user.last_password_change = now
            self.password_policy.push_history(user, new_hash, now)
            await self.uow.users.update(user)

            await audit.record(
                AuditAction.password_change, user_id=user.id, details={"success": True}
            )
            await self.uow.commit()

            delivery = await self.email_sender.send_password_change_notification(user.email, now)
            if not delivery.success:
                logger.warning("Password change notice for user %s was not delivered", user.id)

            return Return.ok(MessageResponse(message="Password changed successfully"))
