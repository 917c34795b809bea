"""
Wallet Use Cases
"""

from .get_wallet_use_case import GetWalletUseCase
from .deposit_use_case import DepositUseCase
from .dtos import DepositResponse, InventoryEntry, WalletResponse

__all__ = [
    "GetWalletUseCase",
    "DepositUseCase",
    "WalletResponse",
    "InventoryEntry",
    "DepositResponse",
]
