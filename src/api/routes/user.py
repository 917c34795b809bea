from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    GetProfileUseCase,
    ProfileResponse,
    UpdateProfileResponse,
    UpdateProfileUseCase,
)
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/auth", tags=["User"])


@router.get("/profile", status_code=status.HTTP_200_OK, response_model=ProfileResponse)
async def get_profile(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Load Current User Profile

    Returns the account behind the bearer token.

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 404 Not Found: USER_NOT_FOUND
    """
    user_id = UUID(current_user["user_id"])

    use_case = GetProfileUseCase(uow)
    result = await use_case.execute(user_id)

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=50)


@router.put(
    "/profile", status_code=status.HTTP_200_OK, response_model=UpdateProfileResponse
)
async def update_profile(
    payload: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = UpdateProfileUseCase(uow)
    result = await use_case.execute(UUID(current_user["user_id"]), payload.name)

    if result.is_err():
        error = result.error
        if error.code == "VALIDATION_ERROR":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
