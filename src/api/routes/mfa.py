"""
MFA API Routes

Enrollment is two-step: enable-mfa starts it, confirm-mfa proves the
user can produce a code and only then switches MFA on.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.audit_trail import RequestContext
from src.app.services.email_sender import IEmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import MessageResponse
from src.app.use_cases.mfa import (
    ConfirmMfaResponse,
    ConfirmMfaUseCase,
    DisableMfaUseCase,
    EnableMfaResponse,
    EnableMfaUseCase,
)
from src.depends import (
    get_current_user,
    get_email_sender,
    get_request_context,
    get_unit_of_work,
)
from src.domain.entities import MfaType

router = APIRouter(prefix="/auth", tags=["MFA"])


class EnableMfaRequest(BaseModel):
    type: MfaType = Field(MfaType.totp, description="totp or email")


@router.post(
    "/enable-mfa",
    status_code=status.HTTP_200_OK,
    response_model=EnableMfaResponse,
    response_model_exclude_none=True,
)
async def enable_mfa(
    payload: EnableMfaRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: IEmailSender = Depends(get_email_sender),
    context: RequestContext = Depends(get_request_context),
):
    """
    Start MFA enrollment.

    TOTP returns the secret and otpauth URL for the authenticator app;
    email sends a confirmation code.

    Raises:
        - 400 Bad Request: MFA_ALREADY_ENABLED
        - 404 Not Found: USER_NOT_FOUND
        - 503 Service Unavailable: EMAIL_DELIVERY_FAILED
    """
    use_case = EnableMfaUseCase(uow, email_sender, context)
    result = await use_case.execute(UUID(current_user["user_id"]), payload.type)

    if result.is_err():
        error = result.error
        if error.code == "MFA_ALREADY_ENABLED":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "EMAIL_DELIVERY_FAILED":
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


class ConfirmMfaRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=16)


@router.post(
    "/confirm-mfa",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmMfaResponse,
)
async def confirm_mfa(
    payload: ConfirmMfaRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
):
    """
    Finish MFA enrollment and return the one-time backup codes.

    Raises:
        - 400 Bad Request: INVALID_MFA_CODE, MFA_ENROLLMENT_NOT_FOUND, MFA_ALREADY_ENABLED
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = ConfirmMfaUseCase(uow, context)
    result = await use_case.execute(UUID(current_user["user_id"]), payload.code.strip())

    if result.is_err():
        error = result.error
        if error.code in (
            "INVALID_MFA_CODE",
            "MFA_ENROLLMENT_NOT_FOUND",
            "MFA_ALREADY_ENABLED",
        ):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class DisableMfaRequest(BaseModel):
    password: str = Field(..., min_length=1)


@router.post(
    "/disable-mfa",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
)
async def disable_mfa(
    payload: DisableMfaRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
):
    """
    Raises:
        - 400 Bad Request: INVALID_PASSWORD or MFA_NOT_ENABLED
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = DisableMfaUseCase(uow, context)
    result = await use_case.execute(UUID(current_user["user_id"]), payload.password)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_PASSWORD", "MFA_NOT_ENABLED"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
