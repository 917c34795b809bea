"""
Auction Use Case DTOs

Item payloads keep the snake_case field names listing clients already use
(start_price, current_bid, end_time).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import Bid, Item


class CreateItemCommand(BaseModel):
    title: str
    description: str
    start_price: float
    category: str = "General"


class BidInfo(BaseModel):
    user_id: str
    amount: float
    timestamp: datetime


class ItemResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    start_price: float
    current_bid: float
    created_by: str
    status: str
    created_at: datetime
    end_time: datetime
    bids: Optional[List[BidInfo]] = None

    @classmethod
    def from_entity(cls, item: Item, bids: Optional[List[Bid]] = None) -> "ItemResponse":
        return cls(
            id=str(item.id),
            title=item.title,
            description=item.description,
            category=item.category,
            start_price=item.start_price,
            current_bid=item.current_bid,
            created_by=str(item.created_by),
            status=item.status.value,
            created_at=item.created_at,
            end_time=item.end_time,
            bids=None
            if bids is None
            else [
                BidInfo(user_id=str(bid.user_id), amount=bid.amount, timestamp=bid.created_at)
                for bid in bids
            ],
        )


class PlaceBidResponse(BaseModel):
    message: str = "Bid placed successfully"
    current_bid: float


class ClosedAuction(BaseModel):
    item_id: str
    winner_id: Optional[str] = None
    price: Optional[float] = None
    settled: bool


class CloseAuctionsResponse(BaseModel):
    closed: int
    auctions: List[ClosedAuction]
