from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.api.error import ClientError, ServerError
from src.app.services.audit_trail import RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.wallet import (
    DepositResponse,
    DepositUseCase,
    GetWalletUseCase,
    WalletResponse,
)
from src.depends import get_current_user, get_request_context, get_unit_of_work

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get("", status_code=status.HTTP_200_OK, response_model=WalletResponse)
async def get_wallet(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Balance and won items"""
    result = await GetWalletUseCase(uow).execute(UUID(current_user["user_id"]))

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class DepositRequest(BaseModel):
    amount: float


@router.post("/deposit", status_code=status.HTTP_200_OK, response_model=DepositResponse)
async def deposit(
    payload: DepositRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
):
    """
    Raises:
        - 400 Bad Request: INVALID_AMOUNT
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = DepositUseCase(uow, context)
    result = await use_case.execute(UUID(current_user["user_id"]), payload.amount)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_AMOUNT":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
