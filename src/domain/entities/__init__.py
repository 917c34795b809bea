"""
SecureBidz Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AuditAction,
    ItemStatus,
    MfaType,
    MfaVerificationType,
)

# Export all entities
from .user import User
from .item import Item
from .bid import Bid
from .inventory_item import InventoryItem
from .audit_log import AuditLog

__all__ = [
    # Enums
    "AuditAction",
    "ItemStatus",
    "MfaType",
    "MfaVerificationType",
    # Entities
    "User",
    "Item",
    "Bid",
    "InventoryItem",
    "AuditLog",
]
