"""
Request throttling

Authentication routes are limited per client IP. Bidding is limited per
bidder, identified from the bearer token when one is present.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import ApplicationConfig
from src.api.utils.jwt import verify_jwt


def bidder_key(request: Request) -> str:
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        claims = verify_jwt(token)
        if claims.is_ok():
            return f"user:{claims.value['user_id']}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[ApplicationConfig.DEFAULT_RATE_LIMIT],
    enabled=ApplicationConfig.RATE_LIMIT_ENABLED,
)
