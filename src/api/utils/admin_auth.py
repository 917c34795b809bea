"""
Admin API Key Authentication

Validates operator API keys for system endpoints such as the auction
closing sweep, which an external scheduler invokes.
"""

import hmac

from fastapi import Header, status

from config import ApplicationConfig
from src.api.error import ClientError
from src.libs.result import Error


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Raises:
        ClientError: 401 if key is missing or invalid

    Returns:
        True if valid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    valid_admin_key = getattr(ApplicationConfig, "ADMIN_API_KEY", "")

    if not valid_admin_key or not hmac.compare_digest(x_admin_api_key, valid_admin_key):
        raise ClientError(
            Error("UNAUTHORIZED", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
