"""
Auction API Routes

Listing is public; creating items and bidding require a bearer token.
Bids are throttled per bidder.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.rate_limit import bidder_key, limiter
from src.app.services.audit_trail import RequestContext, RiskEngine
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.items import (
    CreateItemCommand,
    CreateItemUseCase,
    GetItemUseCase,
    ItemResponse,
    ListItemsUseCase,
    PlaceBidResponse,
    PlaceBidUseCase,
)
from src.depends import (
    get_current_user,
    get_request_context,
    get_risk_engine,
    get_unit_of_work,
)

router = APIRouter(prefix="/items", tags=["Items"])


@router.get("", status_code=status.HTTP_200_OK, response_model=List[ItemResponse])
async def list_items(uow: UnitOfWork = Depends(get_unit_of_work)):
    """All items, newest first"""
    result = await ListItemsUseCase(uow).execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/{item_id}",
    status_code=status.HTTP_200_OK,
    response_model=ItemResponse,
)
async def get_item(item_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Item details with bid history.

    Raises:
        - 404 Not Found: ITEM_NOT_FOUND
    """
    result = await GetItemUseCase(uow).execute(item_id)

    if result.is_err():
        error = result.error
        if error.code == "ITEM_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class CreateItemRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    start_price: float = Field(..., ge=0)
    category: str = Field("General", max_length=100)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ItemResponse)
async def create_item(
    payload: CreateItemRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
):
    """
    List a new item. Bidding closes 24 hours after creation.

    Raises:
        - 400 Bad Request: VALIDATION_ERROR or INVALID_AMOUNT
        - 401 Unauthorized: missing, invalid or expired token
    """
    command = CreateItemCommand(
        title=payload.title,
        description=payload.description,
        start_price=payload.start_price,
        category=payload.category,
    )
    use_case = CreateItemUseCase(uow, context)
    result = await use_case.execute(UUID(current_user["user_id"]), command)

    if result.is_err():
        error = result.error
        if error.code in ("VALIDATION_ERROR", "INVALID_AMOUNT"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


class PlaceBidRequest(BaseModel):
    amount: float


@router.post(
    "/{item_id}/bid",
    status_code=status.HTTP_200_OK,
    response_model=PlaceBidResponse,
)
@limiter.limit(ApplicationConfig.BID_RATE_LIMIT, key_func=bidder_key)
async def place_bid(
    request: Request,
    item_id: UUID,
    payload: PlaceBidRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    context: RequestContext = Depends(get_request_context),
    risk_engine: RiskEngine = Depends(get_risk_engine),
):
    """
    Place a bid. Funds are checked, not reserved.

    Raises:
        - 400 Bad Request: INVALID_AMOUNT, AUCTION_ENDED, BID_TOO_LOW, INSUFFICIENT_FUNDS
        - 401 Unauthorized: missing, invalid or expired token
        - 404 Not Found: ITEM_NOT_FOUND or USER_NOT_FOUND
        - 429 Too Many Requests: RATE_LIMITED
    """
    use_case = PlaceBidUseCase(uow, context, risk_engine)
    result = await use_case.execute(UUID(current_user["user_id"]), item_id, payload.amount)

    if result.is_err():
        error = result.error
        if error.code in (
            "INVALID_AMOUNT",
            "AUCTION_ENDED",
            "BID_TOO_LOW",
            "INSUFFICIENT_FUNDS",
        ):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code in ("ITEM_NOT_FOUND", "USER_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
