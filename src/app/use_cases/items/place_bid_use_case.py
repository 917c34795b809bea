"""
Place Bid Use Case

Validates a bid against the item's state and the bidder's wallet, then
records it with a compare-and-swap on current_bid.
"""

import math
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext, RiskEngine
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, Bid, Item, ItemStatus
from .dtos import PlaceBidResponse

AUCTION_ENDED = Error("AUCTION_ENDED", "Auction has ended")
BID_TOO_LOW = Error("BID_TOO_LOW", "Bid must be higher than current bid")
INSUFFICIENT_FUNDS = Error("INSUFFICIENT_FUNDS", "Insufficient wallet balance")


def auction_open(item: Item, now: datetime) -> bool:
    return item.status == ItemStatus.active and now < item.end_time


class PlaceBidUseCase:
    """
    Business Rules:
    - amount must be a positive number (INVALID_AMOUNT)
    - The item must be active and before end_time (AUCTION_ENDED)
    - amount must be strictly greater than current_bid (BID_TOO_LOW)
    - amount must not exceed the bidder's wallet (INSUFFICIENT_FUNDS);
      funds are checked only, settlement happens when the auction closes
    - current_bid is raised atomically; losing the race re-reports
      AUCTION_ENDED or BID_TOO_LOW against the stored state
    - Rejections are audited as BID_REJECTED, accepted bids are risk-assessed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        context: Optional[RequestContext] = None,
        risk_engine: Optional[RiskEngine] = None,
    ):
        self.uow = uow
        self.context = context
        self.risk_engine = risk_engine

    async def execute(
        self, user_id: UUID, item_id: UUID, amount: float
    ) -> Result[PlaceBidResponse]:
        if amount is None or not math.isfinite(amount) or amount <= 0:
            return Return.err(Error("INVALID_AMOUNT", "Valid bid amount required"))
        amount = round(amount, 2)

        async with self.uow:
            audit = AuditTrail(self.uow, self.context, self.risk_engine)
            now = datetime.utcnow()

            item = await self.uow.items.get_by_id(item_id)
            if item is None:
                return Return.err(Error("ITEM_NOT_FOUND", "Item not found"))

            if not auction_open(item, now):
                return await self._reject(audit, user_id, item, amount, AUCTION_ENDED)

            if amount <= item.current_bid:
                return await self._reject(audit, user_id, item, amount, BID_TOO_LOW)

            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if amount > user.wallet:
                return await self._reject(audit, user_id, item, amount, INSUFFICIENT_FUNDS)

            if not await self.uow.items.try_raise_current_bid(item_id, amount, now):
                # Another bid or the closing sweep got there first
                current = await self.uow.items.get_by_id(item_id)
                error = AUCTION_ENDED if not auction_open(current, now) else BID_TOO_LOW
                return await self._reject(audit, user_id, current, amount, error)

            await self.uow.items.add_bid(
                Bid(item_id=item_id, user_id=user_id, amount=amount, created_at=now)
            )
            await audit.record_assessed(
                AuditAction.bid_placed,
                user_id,
                details={"item_id": str(item_id), "amount": amount},
            )
            await self.uow.commit()

            return Return.ok(PlaceBidResponse(current_bid=amount))

    async def _reject(
        self, audit: AuditTrail, user_id: UUID, item: Item, amount: float, error: Error
    ) -> Result[PlaceBidResponse]:
        await audit.record(
            AuditAction.bid_rejected,
            user_id=user_id,
            details={
                "item_id": str(item.id),
                "amount": amount,
                "current_bid": item.current_bid,
                "reason": error.code,
            },
        )
        await self.uow.commit()
        return Return.err(error)
