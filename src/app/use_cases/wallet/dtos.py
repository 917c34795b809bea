from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class InventoryEntry(BaseModel):
    item_id: str = Field(serialization_alias="itemId")
    title: str
    price_paid: float = Field(serialization_alias="pricePaid")
    won_at: datetime = Field(serialization_alias="wonAt")


class WalletResponse(BaseModel):
    wallet: float
    inventory: List[InventoryEntry]


class DepositResponse(BaseModel):
    message: str = "Deposit successful"
    new_balance: float = Field(serialization_alias="newBalance")
