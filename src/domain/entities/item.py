"""
Item Entity

An auction listing.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import ItemStatus


class Item(SQLModel, table=True):
    """
    Item entity - an auction listing.

    Business Rules:
    - current_bid starts at start_price and only ever increases
    - end_time is fixed at creation (creation + 24h)
    - status moves active -> sold exactly once, via the closing sweep
    - No bids are accepted once sold or once end_time has passed
    """

    __tablename__ = "items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=200)
    description: str
    category: str = Field(default="General", max_length=100)

    start_price: float = Field(ge=0)
    current_bid: float = Field(ge=0)

    created_by: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    status: ItemStatus = Field(default=ItemStatus.active)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    end_time: datetime = Field(sa_column=Column(DateTime, nullable=False))
    closed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_item_status_end_time", "status", "end_time"),)
