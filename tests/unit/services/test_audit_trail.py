from datetime import datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.app.services.audit_trail import AuditTrail, RequestContext, RiskEngine
from src.domain.entities import AuditAction, AuditLog
from tests.utils.fakes import StaticGeoLocator, recorded_actions


def _counts(failed_logins=0, bids=0):
    def count(user_id, action, since):
        return {
            AuditAction.login_failed.value: failed_logins,
            AuditAction.bid_placed.value: bids,
        }.get(action, 0)

    return count


def _last_login(ip_address="10.0.0.1", location=None):
    return AuditLog(
        user_id=uuid4(),
        action=AuditAction.login_success.value,
        ip_address=ip_address,
        location=location,
    )


@pytest.mark.asyncio
async def test_clean_history_scores_zero(mock_uow):
    engine = RiskEngine()

    assessment = await engine.assess(mock_uow, uuid4(), "10.0.0.1", "LOGIN_SUCCESS")

    assert assessment.risk_score == 0
    assert assessment.reasons == []
    assert assessment.is_suspicious is False


@pytest.mark.asyncio
async def test_failed_logins_and_new_ip_are_suspicious(mock_uow):
    mock_uow.audit_logs.count_by_user_action_since.side_effect = _counts(failed_logins=3)
    mock_uow.audit_logs.get_latest_by_user_action.return_value = _last_login("10.0.0.1")

    assessment = await RiskEngine().assess(mock_uow, uuid4(), "192.168.1.5", "LOGIN_SUCCESS")

    assert assessment.risk_score == 50
    assert assessment.is_suspicious is True
    assert "Multiple failed login attempts" in assessment.reasons
    assert "Login from different IP address" in assessment.reasons


@pytest.mark.asyncio
async def test_two_failed_logins_do_not_count(mock_uow):
    mock_uow.audit_logs.count_by_user_action_since.side_effect = _counts(failed_logins=2)

    assessment = await RiskEngine().assess(mock_uow, uuid4(), "10.0.0.1", "LOGIN_SUCCESS")

    assert assessment.risk_score == 0


@pytest.mark.asyncio
async def test_bid_frequency_only_applies_to_bid_actions(mock_uow):
    mock_uow.audit_logs.count_by_user_action_since.side_effect = _counts(bids=10)
    engine = RiskEngine()

    on_bid = await engine.assess(mock_uow, uuid4(), "10.0.0.1", "BID_PLACED")
    on_login = await engine.assess(mock_uow, uuid4(), "10.0.0.1", "LOGIN_SUCCESS")

    assert on_bid.risk_score == 25
    assert "Unusual bidding frequency" in on_bid.reasons
    assert on_login.risk_score == 0


@pytest.mark.asyncio
async def test_country_change_adds_location_signal(mock_uow):
    mock_uow.audit_logs.get_latest_by_user_action.return_value = _last_login(
        "10.0.0.1", location={"country": "US"}
    )

    assessment = await RiskEngine().assess(
        mock_uow, uuid4(), "10.0.0.1", "LOGIN_SUCCESS", current_location={"country": "FR"}
    )

    assert assessment.risk_score == 15
    assert assessment.reasons == ["Login from unusual location"]


@pytest.mark.asyncio
async def test_unknown_location_contributes_nothing(mock_uow):
    mock_uow.audit_logs.get_latest_by_user_action.return_value = _last_login("10.0.0.1")

    assessment = await RiskEngine().assess(
        mock_uow, uuid4(), "10.0.0.1", "LOGIN_SUCCESS", current_location={"country": "FR"}
    )

    assert assessment.risk_score == 0


@pytest.mark.asyncio
async def test_all_signals_add_up(mock_uow):
    mock_uow.audit_logs.count_by_user_action_since.side_effect = _counts(
        failed_logins=9, bids=40
    )
    mock_uow.audit_logs.get_latest_by_user_action.return_value = _last_login(
        "10.0.0.1", location={"country": "US"}
    )

    assessment = await RiskEngine().assess(
        mock_uow, uuid4(), "172.16.0.9", "BID_PLACED", current_location={"country": "BR"}
    )

    assert assessment.risk_score == 90
    assert len(assessment.reasons) == 4
    assert assessment.is_suspicious is True


@pytest.mark.asyncio
async def test_assessment_failure_degrades_to_zero(mock_uow):
    mock_uow.audit_logs.count_by_user_action_since.side_effect = RuntimeError("db down")

    assessment = await RiskEngine().assess(mock_uow, uuid4(), "10.0.0.1", "LOGIN_SUCCESS")

    assert assessment.risk_score == 0
    assert assessment.is_suspicious is False


@pytest.mark.asyncio
async def test_record_failure_is_swallowed(mock_uow):
    mock_uow.audit_logs.create = AsyncMock(side_effect=RuntimeError("disk full"))
    trail = AuditTrail(mock_uow, RequestContext(ip_address="10.0.0.1"))

    entry = await trail.record(AuditAction.logout, user_id=uuid4())

    assert entry is None


@pytest.mark.asyncio
async def test_record_carries_request_context(mock_uow):
    trail = AuditTrail(mock_uow, RequestContext(ip_address="10.0.0.1", user_agent="pytest"))

    entry = await trail.record(
        AuditAction.logout, user_id=uuid4(), details={"k": "v"}, risk_score=150
    )

    assert entry.ip_address == "10.0.0.1"
    assert entry.user_agent == "pytest"
    assert entry.details == {"k": "v"}
    assert entry.risk_score == 100
    assert entry.created_at <= datetime.utcnow()


@pytest.mark.asyncio
async def test_suspicious_action_recorded_with_flag(mock_uow):
    mock_uow.audit_logs.count_by_user_action_since.side_effect = _counts(failed_logins=4)
    mock_uow.audit_logs.get_latest_by_user_action.return_value = _last_login(
        "10.0.0.1", location={"country": "US"}
    )
    trail = AuditTrail(
        mock_uow,
        RequestContext(ip_address="192.168.1.5"),
        RiskEngine(geo_locator=StaticGeoLocator({"country": "DE"})),
    )

    assessment = await trail.record_assessed(AuditAction.login_success, uuid4())

    assert assessment.risk_score == 65
    assert recorded_actions(mock_uow) == ["SUSPICIOUS_ACTIVITY", "LOGIN_SUCCESS"]
    login_entry = mock_uow.audit_logs.create.call_args_list[-1].args[0]
    assert login_entry.risk_score == 65
    assert login_entry.location == {"country": "DE"}


@pytest.mark.asyncio
async def test_unassessed_trail_records_plain_entry(mock_uow):
    trail = AuditTrail(mock_uow, RequestContext(ip_address="10.0.0.1"))

    assessment = await trail.record_assessed(AuditAction.bid_placed, uuid4())

    assert assessment.risk_score == 0
    assert recorded_actions(mock_uow) == ["BID_PLACED"]
