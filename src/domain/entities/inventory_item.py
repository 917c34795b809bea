"""
InventoryItem Entity

An item won at auction, credited to the winner when the auction closes.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel, UniqueConstraint


class InventoryItem(SQLModel, table=True):
    """
    Business Rules:
    - One record per (user, item); re-running auction closure never duplicates it
    - price_paid is the winning bid amount
    """

    __tablename__ = "inventory_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    item_id: UUID = Field(foreign_key="items.id", nullable=False)
    title: str = Field(max_length=200)
    price_paid: float = Field(ge=0)
    won_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_inventory_user_item"),
    )
