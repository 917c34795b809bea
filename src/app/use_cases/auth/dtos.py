"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
Field aliases carry the camelCase names clients see on the wire.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Command DTOs
# ============================================================================


class SignupCommand(BaseModel):
    """
    Signup command - represents validated signup intent

    Created by API layer after request validation passes.
    Contains only business-relevant data (no HTTP concerns).
    """

    name: str
    email: str
    password: str


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: str
    name: str
    email: str


class SignupResponse(BaseModel):
    """Response for signup use case"""

    message: str = "User created successfully"
    user: UserInfo
    token: str


class LoginResponse(BaseModel):
    """
    Response for login and MFA verification.

    Either token/user are set (authenticated) or requires_mfa is True and
    the client must answer a challenge via verify-mfa.
    """

    message: str
    token: Optional[str] = None
    user: Optional[UserInfo] = None
    requires_mfa: Optional[bool] = Field(default=None, serialization_alias="requiresMFA")
    user_id: Optional[str] = Field(default=None, serialization_alias="userId")
    mfa_type: Optional[str] = Field(default=None, serialization_alias="mfaType")
    available_mfa_types: Optional[List[str]] = Field(
        default=None, serialization_alias="availableMfaTypes"
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    message: str
