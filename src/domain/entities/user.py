"""
User Entity

Credential record: identity, password hash, lockout state, MFA
configuration, password history and wallet balance.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from .enums import MfaType


class User(SQLModel, table=True):
    """
    User entity - a bidder/seller account.

    Business Rules:
    - Email is unique and stored lower-cased (case-insensitive uniqueness)
    - Password stored as bcrypt hash (cost factor >= 12), never plaintext
    - is_locked is True only while lock_until is in the future
    - mfa_secret is set only when mfa_type=totp and MFA is enabled
    - email_mfa_code_hash is single-use and expires within 10 minutes
    - password_history keeps the 5 most recent hashes
    - wallet never goes negative
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Lockout state
    login_attempts: int = Field(default=0)
    is_locked: bool = Field(default=False)
    lock_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    lockout_notified_for: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    last_login_attempt: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    last_login: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # MFA state
    mfa_enabled: bool = Field(default=False)
    mfa_type: MfaType = Field(default=MfaType.totp)
    mfa_secret: Optional[str] = Field(default=None, max_length=64)
    mfa_pending_type: Optional[MfaType] = Field(default=None)
    mfa_pending_secret: Optional[str] = Field(default=None, max_length=64)
    email_mfa_code_hash: Optional[str] = Field(default=None, max_length=64)
    email_mfa_code_expires: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    mfa_challenge_expires: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    mfa_backup_codes: list = Field(default_factory=list, sa_column=Column(JSON))

    # Password history: [{"hash": str, "changed_at": iso str}], oldest first
    password_history: list = Field(default_factory=list, sa_column=Column(JSON))
    last_password_change: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Wallet
    wallet: float = Field(default=0.0, ge=0)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    __table_args__ = (Index("idx_user_lock_until", "lock_until"),)
