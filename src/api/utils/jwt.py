from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from config import ApplicationConfig
from src.libs.result import Error, Result, Return


def generate_jwt(
    user_id: UUID, email: str, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Generate JWT access token

    Args:
        user_id: User UUID
        email: User email
        expires_delta: Token lifetime (defaults to JWT_EXPIRE_DAYS)

    Returns:
        JWT token string (HS256, 7-day expiry by default)
    """
    now = datetime.now(UTC)
    expires_delta = expires_delta or timedelta(days=ApplicationConfig.JWT_EXPIRE_DAYS)
    payload = {
        "user_id": str(user_id),
        "email": email,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(
        payload, ApplicationConfig.JWT_SECRET, algorithm=ApplicationConfig.JWT_ALGORITHM
    )


def verify_jwt(token: str) -> Result[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Result with {"user_id", "email"} or Error(TOKEN_EXPIRED / INVALID_TOKEN)
    """
    try:
        payload = jwt.decode(
            token,
            ApplicationConfig.JWT_SECRET,
            algorithms=[ApplicationConfig.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))
    except JWTError:
        return Return.err(Error("INVALID_TOKEN", "Invalid token"))

    if not payload.get("user_id") or not payload.get("email"):
        return Return.err(Error("INVALID_TOKEN", "Invalid token"))
    return Return.ok({"user_id": payload["user_id"], "email": payload["email"]})
