"""
Admin API Routes - System Administration Endpoints

These endpoints are for internal integrations (e.g., the scheduler that
closes auctions every minute). Authentication is via Admin API Key, not
user JWTs.
"""

from fastapi import APIRouter, Depends, status

from src.api.error import ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.items import CloseAuctionsResponse, CloseExpiredAuctionsUseCase
from src.depends import get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/auctions/close-expired",
    status_code=status.HTTP_200_OK,
    response_model=CloseAuctionsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def close_expired_auctions(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Close Expired Auctions

    Marks every active item past its end_time as sold and settles the
    winning bid. Safe to call repeatedly.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 500 Internal Server Error: Server error
    """
    use_case = CloseExpiredAuctionsUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
