"""
AuditLog Entity

Immutable log of all security-relevant events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel


class AuditLog(SQLModel, table=True):
    """
    AuditLog entity - append-only security event record.

    Business Rules:
    - Immutable (never updated or deleted)
    - user_id nullable for anonymous failures (unknown email at login)
    - risk_score in [0, 100]
    - details holds action-specific context; never raw passwords or codes
    """

    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)
    action: str = Field(max_length=50)
    details: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    location: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    risk_score: int = Field(default=0, ge=0, le=100)

    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_user_action_created", "user_id", "action", "created_at"),
        Index("idx_audit_ip_created", "ip_address", "created_at"),
        Index("idx_audit_risk_created", "risk_score", "created_at"),
    )
