from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import InventoryEntry, WalletResponse


class GetWalletUseCase:
    """Balance plus the items won at auction"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[WalletResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            inventory = await self.uow.users.get_inventory(user_id)
            return Return.ok(
                WalletResponse(
                    wallet=round(user.wallet, 2),
                    inventory=[
                        InventoryEntry(
                            item_id=str(entry.item_id),
                            title=entry.title,
                            price_paid=entry.price_paid,
                            won_at=entry.won_at,
                        )
                        for entry in inventory
                    ],
                )
            )
