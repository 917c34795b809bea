"""
Authentication API Routes

Signup, login, MFA verification, password change and logout.
Credential-bearing routes are throttled per client IP.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.rate_limit import limiter
from src.app.services.audit_trail import RequestContext, RiskEngine
from src.app.services.email_sender import IEmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    ChangePasswordUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutUseCase,
    MessageResponse,
    SendLoginMfaCodeUseCase,
    SignupCommand,
    SignupResponse,
    SignupUseCase,
    VerifyMfaUseCase,
)
from src.depends import (
    get_current_user,
    get_email_sender,
    get_request_context,
    get_risk_engine,
    get_unit_of_work,
)
from src.domain.entities import MfaType, MfaVerificationType
from src.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])


class SignupRequest(BaseModel):
    """
    Signup HTTP request payload

    Validates incoming HTTP request before converting to SignupCommand.
    Password strength rules are enforced by the use case so the caller
    gets every violation at once.
    """

    name: str = Field(..., min_length=1, max_length=50, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=128, description="User password")


@router.post(
    "/signup", status_code=status.HTTP_201_CREATED, response_model=SignupResponse
)
@limiter.limit(ApplicationConfig.AUTH_RATE_LIMIT)
async def signup(
    request: Request,
    payload: SignupRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
):
    """
    User Signup

    Creates an account with an empty wallet and returns a JWT.

    Raises:
        - 400 Bad Request: WEAK_PASSWORD (with violations) or EMAIL_ALREADY_EXISTS
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
        - 429 Too Many Requests: RATE_LIMITED
    """
    command = SignupCommand(
        name=payload.name, email=payload.email, password=payload.password
    )

    use_case = SignupUseCase(uow, context)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code in ("WEAK_PASSWORD", "EMAIL_ALREADY_EXISTS"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    response_model_exclude_none=True,
)
@limiter.limit(ApplicationConfig.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: IEmailSender = Depends(get_email_sender),
    context: RequestContext = Depends(get_request_context),
    risk_engine: RiskEngine = Depends(get_risk_engine),
):
    """
    User Login

    Returns a JWT, or {requiresMFA, userId, mfaType, availableMfaTypes}
    when the account has MFA enabled.

    Raises:
        - 400 Bad Request: INVALID_CREDENTIALS (same for unknown email and wrong password)
        - 423 Locked: ACCOUNT_LOCKED
        - 429 Too Many Requests: RATE_LIMITED
    """
    use_case = LoginUseCase(uow, email_sender, context, risk_engine)
    result = await use_case.execute(payload.email, payload.password)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "ACCOUNT_LOCKED":
            raise ClientError(error, status_code=status.HTTP_423_LOCKED)
        raise ServerError(error)

    return result.value


class VerifyMfaRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="userId")
    code: str = Field(..., min_length=1, max_length=32)
    type: MfaVerificationType = Field(MfaVerificationType.totp)


@router.post(
    "/verify-mfa",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    response_model_exclude_none=True,
)
@limiter.limit(ApplicationConfig.AUTH_RATE_LIMIT)
async def verify_mfa(
    request: Request,
    payload: VerifyMfaRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
    risk_engine: RiskEngine = Depends(get_risk_engine),
):
    """
    Complete an MFA login challenge with a TOTP, emailed or backup code.

    Raises:
        - 400 Bad Request: INVALID_MFA_CODE
        - 423 Locked: ACCOUNT_LOCKED
    """
    use_case = VerifyMfaUseCase(uow, context, risk_engine)
    result = await use_case.execute(payload.user_id, payload.code.strip(), payload.type)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_MFA_CODE":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "ACCOUNT_LOCKED":
            raise ClientError(error, status_code=status.HTTP_423_LOCKED)
        raise ServerError(error)

    return result.value


class SendLoginMfaCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="userId")
    type: MfaType = Field(MfaType.email)


@router.post(
    "/send-login-mfa-code",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
)
@limiter.limit(ApplicationConfig.AUTH_RATE_LIMIT)
async def send_login_mfa_code(
    request: Request,
    payload: SendLoginMfaCodeRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: IEmailSender = Depends(get_email_sender),
    context: RequestContext = Depends(get_request_context),
):
    """
    Email a fresh login code; any earlier unused code stops working.

    Raises:
        - 400 Bad Request: INVALID_MFA_REQUEST (no open challenge or not an email-MFA account)
        - 503 Service Unavailable: EMAIL_DELIVERY_FAILED
    """
    if payload.type != MfaType.email:
        raise ClientError(
            Error("INVALID_MFA_REQUEST", "Invalid MFA request"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    use_case = SendLoginMfaCodeUseCase(uow, email_sender, context)
    result = await use_case.execute(payload.user_id)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_MFA_REQUEST":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "EMAIL_DELIVERY_FAILED":
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=1, max_length=128, alias="newPassword")


@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
)
@limiter.limit(ApplicationConfig.AUTH_RATE_LIMIT)
async def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: IEmailSender = Depends(get_email_sender),
    context: RequestContext = Depends(get_request_context),
):
    """
    Change password after re-confirming the current one.

    Raises:
        - 400 Bad Request: INVALID_PASSWORD, WEAK_PASSWORD or PASSWORD_REUSED
        - 401 Unauthorized: missing, invalid or expired token
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = ChangePasswordUseCase(uow, email_sender, context)
    result = await use_case.execute(
        UUID(current_user["user_id"]), payload.current_password, payload.new_password
    )

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_PASSWORD", "WEAK_PASSWORD", "PASSWORD_REUSED"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
):
    """Record the logout. Tokens are stateless, the client discards its copy."""
    use_case = LogoutUseCase(uow, context)
    result = await use_case.execute(UUID(current_user["user_id"]))

    if result.is_err():
        raise ServerError(result.error)

    return result.value
