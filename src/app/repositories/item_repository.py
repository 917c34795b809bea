from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Bid, Item


class IItemRepository(ABC):
    """Item repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, item_id: UUID) -> Optional[Item]:
        """Get item by ID"""
        pass

    @abstractmethod
    async def list_all(self) -> List[Item]:
        """All items, newest first"""
        pass

    @abstractmethod
    async def create(self, item: Item) -> Item:
        """Create a new item"""
        pass

    @abstractmethod
    async def get_bids(self, item_id: UUID) -> List[Bid]:
        """Bids on an item in chronological order"""
        pass

    @abstractmethod
    async def try_raise_current_bid(
        self, item_id: UUID, amount: float, now: datetime
    ) -> bool:
        """
        Compare-and-swap the current bid.

        Sets current_bid=amount only where status is active, end_time is
        after now and the stored current_bid is strictly below amount.
        True if the row was updated.
        """
        pass

    @abstractmethod
    async def add_bid(self, bid: Bid) -> Bid:
        """Append a bid record"""
        pass

    @abstractmethod
    async def get_expired_active(self, now: datetime) -> List[Item]:
        """Active items whose end_time <= now"""
        pass

    @abstractmethod
    async def mark_sold(self, item_id: UUID, now: datetime) -> bool:
        """Transition active -> sold. True only for the call that performed it."""
        pass
