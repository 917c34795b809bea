"""
MFA Use Case DTOs
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class EnableMfaResponse(BaseModel):
    """
    Pending enrollment details.

    For TOTP the secret and otpauth URL are returned so the client can
    enroll an authenticator app; MFA stays disabled until confirm-mfa.
    """

    message: str
    type: str
    secret: Optional[str] = None
    otpauth_url: Optional[str] = Field(default=None, serialization_alias="otpauthUrl")


class ConfirmMfaResponse(BaseModel):
    """Backup codes are shown exactly once"""

    message: str
    type: str
    backup_codes: List[str] = Field(serialization_alias="backupCodes")
