from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.domain.entities import User


class ProfileResponse(BaseModel):
    """Public view of the account; never carries hashes or MFA secrets"""

    id: str
    name: str
    email: str
    wallet: float
    mfa_enabled: bool = Field(serialization_alias="mfaEnabled")
    mfa_type: Optional[str] = Field(default=None, serialization_alias="mfaType")
    created_at: datetime = Field(serialization_alias="createdAt")
    last_login: Optional[datetime] = Field(default=None, serialization_alias="lastLogin")

    @classmethod
    def from_entity(cls, user: User) -> "ProfileResponse":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            wallet=round(user.wallet, 2),
            mfa_enabled=user.mfa_enabled,
            mfa_type=user.mfa_type.value if user.mfa_enabled else None,
            created_at=user.created_at,
            last_login=user.last_login,
        )


class UpdateProfileResponse(BaseModel):
    message: str = "Profile updated successfully"
    user: ProfileResponse
