import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from src.libs.result import Error, Result, Return
from src.api.utils.jwt import generate_jwt
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.credentials import hash_password
from src.app.services.password_policy import PasswordPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, User
from .dtos import SignupCommand, SignupResponse, UserInfo

logger = logging.getLogger(__name__)


class SignupUseCase:
    """
    Signup Use Case

    Command/Response Pattern:
    - Input: SignupCommand (validated business intent)
    - Output: Result[SignupResponse] (structured response)

    Business Logic:
    1. Validate password strength (WEAK_PASSWORD)
    2. Check if email already exists, case-insensitively (EMAIL_ALREADY_EXISTS)
    3. Hash password with bcrypt cost factor 12
    4. Create User with wallet=0, login_attempts=0, history seeded with the hash
    5. Record SIGNUP audit entry
    6. Commit and issue a JWT
    """

    def __init__(
        self,
        uow: UnitOfWork,
        context: Optional[RequestContext] = None,
        password_policy: Optional[PasswordPolicy] = None,
    ):
        self.uow = uow
        self.context = context
        self.password_policy = password_policy or PasswordPolicy()

    async def execute(self, command: SignupCommand) -> Result[SignupResponse]:
        email = command.email.strip().lower()

        validation = self.password_policy.validate(command.password)
        if not validation.valid:
            return Return.err(
                Error(
                    "WEAK_PASSWORD",
                    validation.violations[0],
                    {"violations": validation.violations, "strength": validation.strength},
                )
            )

        async with self.uow:
            audit = AuditTrail(self.uow, self.context)

            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                await audit.record(
                    AuditAction.signup,
                    details={"email": email, "success": False, "reason": "User already exists"},
                    risk_score=10,
                )
                await self.uow.commit()
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "User already exists"))

            now = datetime.utcnow()
            password_hash = hash_password(command.password)
            user = User(
                name=command.name.strip(),
                email=email,
                password_hash=password_hash,
                last_password_change=now,
            )
            self.password_policy.push_history(user, password_hash, now)

            try:
                user = await self.uow.users.create(user)
            except IntegrityError:
                # Lost a race with a concurrent signup for the same email
                await self.uow.rollback()
                return Return.err(Error("EMAIL_ALREADY_EXISTS", "User already exists"))

            await audit.record(
                AuditAction.signup,
                user_id=user.id,
                details={"email": email, "name": user.name, "success": True},
            )

            await self.uow.commit()
            logger.info("User %s signed up", user.id)

            return Return.ok(
                SignupResponse(
                    user=UserInfo(id=str(user.id), name=user.name, email=user.email),
                    token=generate_jwt(user.id, user.email),
                )
            )
