"""
Close Expired Auctions Use Case

Invoked on a fixed cadence by an external scheduler through the operator
endpoint. Each expired item is closed in its own transaction.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.libs.result import Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, Bid, InventoryItem
from .dtos import ClosedAuction, CloseAuctionsResponse

logger = logging.getLogger(__name__)

SYSTEM_CONTEXT = RequestContext(ip_address=None, user_agent="auction-closer")


def select_winner(bids: List[Bid]) -> Optional[Bid]:
    """Highest amount wins; equal amounts go to the earliest bid."""
    if not bids:
        return None
    return sorted(bids, key=lambda bid: (-bid.amount, bid.created_at))[0]


class CloseExpiredAuctionsUseCase:
    """
    Business Rules:
    - Only active items with end_time <= now are closed
    - active -> sold happens once; a concurrent or repeated run skips the item
    - The winner's wallet is debited the winning amount and the item is
      credited to their inventory (one record per user and item)
    - A winner who can no longer cover the amount gets nothing; the item
      still closes and AUCTION_SETTLEMENT_FAILED is audited
    - Items without bids close with no inventory effect
    """

    def __init__(self, uow: UnitOfWork, context: Optional[RequestContext] = None):
        self.uow = uow
        self.context = context or SYSTEM_CONTEXT

    async def execute(self, now: Optional[datetime] = None) -> Result[CloseAuctionsResponse]:
        now = now or datetime.utcnow()

        async with self.uow:
            # Snapshot before the session is rolled back and the rows expire
            expired = [
                (item.id, item.title) for item in await self.uow.items.get_expired_active(now)
            ]

        closed = []
        for item_id, title in expired:
            outcome = await self._close(item_id, title, now)
            if outcome is not None:
                closed.append(outcome)

        if closed:
            logger.info("Closed %d expired auction(s)", len(closed))
        return Return.ok(CloseAuctionsResponse(closed=len(closed), auctions=closed))

    async def _close(self, item_id: UUID, title: str, now: datetime) -> Optional[ClosedAuction]:
        async with self.uow:
            audit = AuditTrail(self.uow, self.context)

            if not await self.uow.items.mark_sold(item_id, now):
                return None

            winner = select_winner(await self.uow.items.get_bids(item_id))
            if winner is None:
                await audit.record(
                    AuditAction.auction_closed,
                    details={"item_id": str(item_id), "winner_id": None},
                )
                await self.uow.commit()
                return ClosedAuction(item_id=str(item_id), settled=True)

            details = {
                "item_id": str(item_id),
                "winner_id": str(winner.user_id),
                "price": winner.amount,
            }

            balance = await self.uow.users.adjust_wallet(winner.user_id, -winner.amount)
            if balance is None:
                logger.warning(
                    "Settlement failed for item %s: winner %s cannot cover %.2f",
                    item_id,
                    winner.user_id,
                    winner.amount,
                )
                await audit.record(
                    AuditAction.auction_settlement_failed,
                    user_id=winner.user_id,
                    details={**details, "reason": "INSUFFICIENT_FUNDS"},
                    risk_score=40,
                )
                await self.uow.commit()
                return ClosedAuction(
                    item_id=str(item_id),
                    winner_id=str(winner.user_id),
                    price=winner.amount,
                    settled=False,
                )

            added = await self.uow.users.add_inventory_item(
                InventoryItem(
                    user_id=winner.user_id,
                    item_id=item_id,
                    title=title,
                    price_paid=winner.amount,
                    won_at=now,
                )
            )
            if not added:
                # Already credited: undo the debit
                await self.uow.users.adjust_wallet(winner.user_id, winner.amount)
                logger.warning("Item %s already in inventory of %s", item_id, winner.user_id)

            await audit.record(AuditAction.auction_closed, user_id=winner.user_id, details=details)
            await self.uow.commit()
            return ClosedAuction(
                item_id=str(item_id),
                winner_id=str(winner.user_id),
                price=winner.amount,
                settled=True,
            )
