from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import ItemResponse


class GetItemUseCase:
    """Item details including its bid history, oldest bid first"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, item_id: UUID) -> Result[ItemResponse]:
        async with self.uow:
            item = await self.uow.items.get_by_id(item_id)
            if item is None:
                return Return.err(Error("ITEM_NOT_FOUND", "Item not found"))

            bids = await self.uow.items.get_bids(item_id)
            return Return.ok(ItemResponse.from_entity(item, bids=bids))
