"""
Bid Entity

One accepted bid on an item. Bids on an item are chronological and
strictly increasing in amount.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel


class Bid(SQLModel, table=True):
    __tablename__ = "bids"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    item_id: UUID = Field(foreign_key="items.id", nullable=False, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    amount: float = Field(gt=0)

    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    __table_args__ = (Index("idx_bid_item_amount", "item_id", "amount"),)
