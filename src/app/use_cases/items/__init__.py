"""
Auction Use Cases

Listing, bidding and closing of auctions.
"""

from .create_item_use_case import CreateItemUseCase
from .list_items_use_case import ListItemsUseCase
from .get_item_use_case import GetItemUseCase
from .place_bid_use_case import PlaceBidUseCase
from .close_expired_auctions_use_case import CloseExpiredAuctionsUseCase, select_winner
from .dtos import (
    BidInfo,
    CloseAuctionsResponse,
    ClosedAuction,
    CreateItemCommand,
    ItemResponse,
    PlaceBidResponse,
)

__all__ = [
    "CreateItemUseCase",
    "ListItemsUseCase",
    "GetItemUseCase",
    "PlaceBidUseCase",
    "CloseExpiredAuctionsUseCase",
    "select_winner",
    "CreateItemCommand",
    "ItemResponse",
    "BidInfo",
    "PlaceBidResponse",
    "ClosedAuction",
    "CloseAuctionsResponse",
]
