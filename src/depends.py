from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.email_sender import build_email_sender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import verify_jwt
from src.app.services.audit_trail import RequestContext, RiskEngine
from src.app.services.email_sender import IEmailSender
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# auto_error=False so a missing header yields 401 rather than 403
security = HTTPBearer(auto_error=False)

email_sender = build_email_sender(ApplicationConfig)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_email_sender() -> IEmailSender:
    return email_sender


def get_risk_engine() -> RiskEngine:
    return RiskEngine()


def get_request_context(request: Request) -> RequestContext:
    """IP and user agent of the caller, honouring X-Forwarded-For."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return RequestContext(
        ip_address=ip_address, user_agent=request.headers.get("User-Agent")
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Dependency to extract and verify JWT token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT payload containing user_id and email

    Raises:
        ClientError: 401 if token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Access token required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = verify_jwt(credentials.credentials)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)

    return result.value
