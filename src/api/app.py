from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlmodel import SQLModel
from .error import ClientError, ServerError
from .utils.rate_limit import limiter
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.warning("Client error: %s %s", exc.base_error.code, exc.base_error.message)
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error("Server error: %s", exc.base_error.code)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded):
    # Must stay sync: SlowAPIMiddleware returns the handler result without awaiting it
    retry_after = exc.limit.limit.get_expiry()
    logger.warning(
        "Rate limit exceeded: %s %s (%s)", request.method, request.url.path, exc.detail
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": "Too many requests, please try again later.",
            }
        },
        headers={"Retry-After": str(retry_after)},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.depends import engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    await engine.dispose()


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="SecureBidz API", version="0.1.0", lifespan=lifespan)

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, audit, auth, health_check, items, mfa, user, wallet

    prefix = ApplicationConfig.API_PREFIX
    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, prefix=prefix, tags=["Authentication"])
    app.include_router(mfa.router, prefix=prefix, tags=["MFA"])
    app.include_router(user.router, prefix=prefix, tags=["User"])
    app.include_router(items.router, prefix=prefix, tags=["Items"])
    app.include_router(wallet.router, prefix=prefix, tags=["Wallet"])
    app.include_router(audit.router, prefix=prefix, tags=["Audit"])
    app.include_router(admin.router, prefix=prefix, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
