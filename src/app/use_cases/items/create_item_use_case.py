"""
Create Item Use Case

Lists a new item for auction.
"""

import math
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from config import ApplicationConfig
from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, Item, ItemStatus
from .dtos import CreateItemCommand, ItemResponse


class CreateItemUseCase:
    """
    Business Rules:
    - title and description are required, start_price >= 0
    - current_bid starts at start_price
    - end_time is fixed at creation: now + AUCTION_DURATION_HOURS
    """

    def __init__(self, uow: UnitOfWork, context: Optional[RequestContext] = None):
        self.uow = uow
        self.context = context

    async def execute(self, user_id: UUID, command: CreateItemCommand) -> Result[ItemResponse]:
        title = command.title.strip()
        description = command.description.strip()
        if not title or not description:
            return Return.err(
                Error("VALIDATION_ERROR", "Title, description, and start_price are required")
            )
        if not math.isfinite(command.start_price) or command.start_price < 0:
            return Return.err(Error("INVALID_AMOUNT", "start_price must be a non-negative amount"))

        start_price = round(command.start_price, 2)
        now = datetime.utcnow()

        async with self.uow:
            item = Item(
                title=title,
                description=description,
                category=command.category.strip() or "General",
                start_price=start_price,
                current_bid=start_price,
                created_by=user_id,
                status=ItemStatus.active,
                created_at=now,
                end_time=now + timedelta(hours=ApplicationConfig.AUCTION_DURATION_HOURS),
            )
            item = await self.uow.items.create(item)

            await AuditTrail(self.uow, self.context).record(
                AuditAction.item_created,
                user_id=user_id,
                details={"item_id": str(item.id), "title": title, "start_price": start_price},
            )
            await self.uow.commit()

            return Return.ok(ItemResponse.from_entity(item, bids=[]))
