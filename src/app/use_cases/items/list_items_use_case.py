from typing import List

from src.libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import ItemResponse


class ListItemsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[List[ItemResponse]]:
        async with self.uow:
            items = await self.uow.items.list_all()
            return Return.ok([ItemResponse.from_entity(item) for item in items])
