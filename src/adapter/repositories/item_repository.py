from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.item_repository import IItemRepository
from src.domain.entities import Bid, Item, ItemStatus


class ItemRepository(IItemRepository):
    """Item repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, item_id: UUID) -> Optional[Item]:
        """Get item by ID"""
        stmt = (
            select(Item)
            .where(Item.id == item_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Item]:
        stmt = select(Item).order_by(Item.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, item: Item) -> Item:
        """Create a new item"""
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def get_bids(self, item_id: UUID) -> List[Bid]:
        stmt = select(Bid).where(Bid.item_id == item_id).order_by(Bid.created_at, Bid.amount)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def try_raise_current_bid(
        self, item_id: UUID, amount: float, now: datetime
    ) -> bool:
        stmt = (
            update(Item)
            .where(
                Item.id == item_id,
                Item.status == ItemStatus.active,
                Item.end_time > now,
                Item.current_bid < amount,
            )
            .values(current_bid=amount)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def add_bid(self, bid: Bid) -> Bid:
        self.session.add(bid)
        await self.session.flush()
        await self.session.refresh(bid)
        return bid

    async def get_expired_active(self, now: datetime) -> List[Item]:
        stmt = (
            select(Item)
            .where(Item.status == ItemStatus.active, Item.end_time <= now)
            .order_by(Item.end_time)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_sold(self, item_id: UUID, now: datetime) -> bool:
        stmt = (
            update(Item)
            .where(Item.id == item_id, Item.status == ItemStatus.active)
            .values(status=ItemStatus.sold, closed_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
