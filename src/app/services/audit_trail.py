"""
Audit & Risk Engine

AuditTrail appends immutable entries on behalf of a request. Appends are
best-effort: a failure is logged and never reaches the caller. When a
RiskEngine is attached, assessed actions are scored before being written
and suspicious results produce an extra SUSPICIOUS_ACTIVITY entry. The
score is advisory only; nothing in the authentication flow reads it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from config import ApplicationConfig
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction, AuditLog

logger = logging.getLogger(__name__)


class RequestContext(BaseModel):
    """Caller metadata attached to every audit entry"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class RiskAssessment:
    risk_score: int = 0
    reasons: List[str] = field(default_factory=list)
    is_suspicious: bool = False


class IGeoLocator(ABC):
    """Resolves an IP address to {"country", "region", "city"} when possible"""

    @abstractmethod
    async def locate(self, ip_address: Optional[str]) -> Optional[Dict[str, str]]:
        pass


class NullGeoLocator(IGeoLocator):
    async def locate(self, ip_address: Optional[str]) -> Optional[Dict[str, str]]:
        return None


class RiskEngine:
    """
    Additive heuristic over a trailing window (default 1 hour):

    - +30 if >= 3 failed logins for the user in the window
    - +20 if the IP differs from the user's last successful login
    - +25 if the action is bid-related and the user placed >= 10 bids in the window
    - +15 if both locations are known and the country differs

    Capped at 100; suspicious at >= 50.
    """

    def __init__(
        self,
        geo_locator: Optional[IGeoLocator] = None,
        window: Optional[timedelta] = None,
        suspicious_threshold: int = None,
        failed_login_threshold: int = None,
        bid_frequency_threshold: int = None,
    ):
        self.geo_locator = geo_locator or NullGeoLocator()
        self.window = window or timedelta(minutes=ApplicationConfig.RISK_WINDOW_MINUTES)
        self.suspicious_threshold = (
            suspicious_threshold or ApplicationConfig.SUSPICIOUS_THRESHOLD
        )
        self.failed_login_threshold = (
            failed_login_threshold or ApplicationConfig.FAILED_LOGIN_THRESHOLD
        )
        self.bid_frequency_threshold = (
            bid_frequency_threshold or ApplicationConfig.BID_FREQUENCY_THRESHOLD
        )

    async def assess(
        self,
        uow: UnitOfWork,
        user_id: UUID,
        current_ip: Optional[str],
        current_action: str,
        current_location: Optional[Dict[str, str]] = None,
        now: Optional[datetime] = None,
    ) -> RiskAssessment:
        try:
            return await self._assess(
                uow, user_id, current_ip, current_action, current_location, now
            )
        except Exception:
            logger.exception("Risk assessment failed for user %s", user_id)
            return RiskAssessment()

    async def _assess(
        self,
        uow: UnitOfWork,
        user_id: UUID,
        current_ip: Optional[str],
        current_action: str,
        current_location: Optional[Dict[str, str]],
        now: Optional[datetime],
    ) -> RiskAssessment:
        since = (now or datetime.utcnow()) - self.window
        score = 0
        reasons = []

        failed_logins = await uow.audit_logs.count_by_user_action_since(
            user_id, AuditAction.login_failed.value, since
        )
        if failed_logins >= self.failed_login_threshold:
            score += 30
            reasons.append("Multiple failed login attempts")

        last_login = await uow.audit_logs.get_latest_by_user_action(
            user_id, AuditAction.login_success.value
        )
        if last_login is not None and last_login.ip_address != current_ip:
            score += 20
            reasons.append("Login from different IP address")

        if "BID" in current_action.upper():
            recent_bids = await uow.audit_logs.count_by_user_action_since(
                user_id, AuditAction.bid_placed.value, since
            )
            if recent_bids >= self.bid_frequency_threshold:
                score += 25
                reasons.append("Unusual bidding frequency")

        previous_location = last_login.location if last_login is not None else None
        if (
            previous_location
            and current_location
            and previous_location.get("country") != current_location.get("country")
        ):
            score += 15
            reasons.append("Login from unusual location")

        score = min(100, score)
        return RiskAssessment(
            risk_score=score,
            reasons=reasons,
            is_suspicious=score >= self.suspicious_threshold,
        )


class AuditTrail:
    def __init__(
        self,
        uow: UnitOfWork,
        context: Optional[RequestContext] = None,
        risk_engine: Optional[RiskEngine] = None,
    ):
        self.uow = uow
        self.context = context or RequestContext()
        self.risk_engine = risk_engine

    async def record(
        self,
        action: AuditAction,
        user_id: Optional[UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        risk_score: int = 0,
        location: Optional[Dict[str, str]] = None,
    ) -> Optional[AuditLog]:
        entry = AuditLog(
            user_id=user_id,
            action=action.value,
            details=details or {},
            ip_address=self.context.ip_address,
            user_agent=self.context.user_agent,
            location=location,
            risk_score=max(0, min(100, risk_score)),
        )
        try:
            return await self.uow.audit_logs.create(entry)
        except Exception:
            logger.exception("Failed to append audit entry %s", action.value)
            return None

    async def record_assessed(
        self,
        action: AuditAction,
        user_id: UUID,
        details: Optional[Dict[str, Any]] = None,
    ) -> RiskAssessment:
        """Score the action, flag it if suspicious, then append it."""
        if self.risk_engine is None:
            await self.record(action, user_id=user_id, details=details)
            return RiskAssessment()

        location = await self._locate()
        assessment = await self.risk_engine.assess(
            self.uow,
            user_id,
            self.context.ip_address,
            action.value,
            current_location=location,
        )
        if assessment.is_suspicious:
            logger.warning(
                "Suspicious %s for user %s (score %s)",
                action.value,
                user_id,
                assessment.risk_score,
            )
            await self.record(
                AuditAction.suspicious_activity,
                user_id=user_id,
                details={
                    "trigger": action.value,
                    "reasons": assessment.reasons,
                    "risk_score": assessment.risk_score,
                },
                risk_score=assessment.risk_score,
                location=location,
            )
        await self.record(
            action,
            user_id=user_id,
            details=details,
            risk_score=assessment.risk_score,
            location=location,
        )
        return assessment

    async def _locate(self) -> Optional[Dict[str, str]]:
        try:
            return await self.risk_engine.geo_locator.locate(self.context.ip_address)
        except Exception:
            logger.exception("Geo lookup failed")
            return None
