"""
SecureBidz Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class MfaType(str, Enum):
    """Second factor configured on an account"""

    totp = "totp"
    email = "email"


class MfaVerificationType(str, Enum):
    """Method a caller may use to answer an MFA challenge"""

    totp = "totp"
    email = "email"
    backup = "backup"


class ItemStatus(str, Enum):
    """Auction status. Transitions active -> sold exactly once."""

    active = "active"
    sold = "sold"


class AuditAction(str, Enum):
    """Security-relevant events recorded in the audit log"""

    signup = "SIGNUP"
    login_success = "LOGIN_SUCCESS"
    login_failed = "LOGIN_FAILED"
    mfa_challenge = "MFA_CHALLENGE"
    logout = "LOGOUT"
    password_change = "PASSWORD_CHANGE"
    mfa_enrollment_started = "MFA_ENROLLMENT_STARTED"
    mfa_enabled = "MFA_ENABLED"
    mfa_disabled = "MFA_DISABLED"
    mfa_code_sent = "MFA_CODE_SENT"
    backup_code_used = "BACKUP_CODE_USED"
    item_created = "ITEM_CREATED"
    bid_placed = "BID_PLACED"
    bid_rejected = "BID_REJECTED"
    wallet_deposit = "WALLET_DEPOSIT"
    account_locked = "ACCOUNT_LOCKED"
    account_unlocked = "ACCOUNT_UNLOCKED"
    suspicious_activity = "SUSPICIOUS_ACTIVITY"
    auction_closed = "AUCTION_CLOSED"
    auction_settlement_failed = "AUCTION_SETTLEMENT_FAILED"
