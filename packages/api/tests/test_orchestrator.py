# This project was developed with assistance from AI tools.
"""Tests for the underwriting fan-out orchestrator."""

import asyncio
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from loan_db.enums import ApplicationStatus, UnderwritingDecision

from loan_orchestrator.exceptions import NotFoundError
from loan_orchestrator.services.orchestrator import gather_snapshot, start_underwriting

from tests.factories import add_application, make_property


async def test_underwriting_clean_application(db_session, gateways, clock, cfg):
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)

    result = await start_underwriting(db_session, gateways, clock, cfg, app.id)

    assert result.status == ApplicationStatus.UNDERWRITING
    assert result.underwriting_started_at is not None
    assert result.dti == Decimal("21.07")
    assert result.ltv == Decimal("75.00")
    uw = result.underwriting
    assert uw.decision == UnderwritingDecision.APPROVED
    assert uw.credit_score == 700
    assert uw.estimated_monthly_payment == Decimal("1896.20")
    assert uw.underwriter_name == "Automated System"
    assert uw.title_clear is True

    history = result.status_history
    assert len(history) == 1
    assert history[0].from_status == ApplicationStatus.SUBMITTED
    assert history[0].to_status == ApplicationStatus.UNDERWRITING
    assert history[0].changed_by == "System"


async def test_all_six_reads_issued(db_session, gateways, clock, cfg):
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)

    await start_underwriting(db_session, gateways, clock, cfg, app.id)

    gateways.customer.get_customer.assert_awaited_once_with(app.customer_id)
    gateways.customer.get_credit_report.assert_awaited_once_with(app.customer_id)
    gateways.customer.get_employments.assert_awaited_once_with(app.customer_id)
    gateways.property.get_property.assert_awaited_once_with(app.property_id)
    gateways.property.get_appraisal.assert_awaited_once_with(app.property_id)
    gateways.property.get_title_search.assert_awaited_once_with(app.property_id)


async def test_every_dependency_absent_still_transitions(db_session, gateways, clock, cfg):
    """A run always produces a decision, even from an empty snapshot."""
    for read in (
        gateways.customer.get_customer,
        gateways.customer.get_credit_report,
        gateways.customer.get_employments,
        gateways.property.get_property,
        gateways.property.get_appraisal,
        gateways.property.get_title_search,
    ):
        read.return_value = None
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)

    result = await start_underwriting(db_session, gateways, clock, cfg, app.id)

    assert result.status == ApplicationStatus.UNDERWRITING
    assert result.ltv is None
    assert result.dti is None
    assert result.underwriting.decision == UnderwritingDecision.APPROVED_WITH_CONDITIONS


async def test_raising_read_is_treated_as_absent(db_session, gateways, clock, cfg):
    gateways.property.get_title_search = AsyncMock(side_effect=RuntimeError("boom"))
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)

    result = await start_underwriting(db_session, gateways, clock, cfg, app.id)

    assert result.underwriting.title_clear is False
    assert result.underwriting.decision == UnderwritingDecision.APPROVED_WITH_CONDITIONS


async def test_reads_run_concurrently(gateways):
    """The slow read does not delay the others: all six start before any finishes."""
    started: list[str] = []
    release = asyncio.Event()

    def _gate(name, value):
        async def _call(*_args):
            started.append(name)
            await release.wait()
            return value

        return _call

    gateways.customer.get_customer = _gate("customer", None)
    gateways.customer.get_credit_report = _gate("credit", None)
    gateways.customer.get_employments = _gate("employments", None)
    gateways.property.get_property = _gate("property", make_property())
    gateways.property.get_appraisal = _gate("appraisal", None)
    gateways.property.get_title_search = _gate("title", None)

    app = MagicMock(
        customer_id=uuid.uuid4(),
        property_id=uuid.uuid4(),
        application_number="APP-2026-000099",
    )
    task = asyncio.create_task(gather_snapshot(gateways, app))
    for _ in range(10):
        await asyncio.sleep(0)
    assert sorted(started) == sorted(
        ["customer", "credit", "employments", "property", "appraisal", "title"]
    )
    assert not task.done()

    release.set()
    snapshot = await task
    assert snapshot.property is not None
    assert "credit" in snapshot.absent_fields()


async def test_reevaluation_updates_single_underwriting_record(db_session, gateways, clock, cfg):
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)
    first = await start_underwriting(db_session, gateways, clock, cfg, app.id)
    first_uw_id = first.underwriting.id
    first_started = first.underwriting_started_at

    gateways.property.get_title_search = AsyncMock(return_value=None)
    second = await start_underwriting(db_session, gateways, clock, cfg, app.id)

    assert second.underwriting.id == first_uw_id
    assert second.underwriting.decision == UnderwritingDecision.APPROVED_WITH_CONDITIONS
    assert second.underwriting_started_at == first_started
    assert len(second.status_history) == 2


async def test_unknown_application_not_found(db_session, gateways, clock, cfg):
    with pytest.raises(NotFoundError):
        await start_underwriting(db_session, gateways, clock, cfg, uuid.uuid4())
    gateways.customer.get_customer.assert_not_awaited()


async def test_extreme_ltv_is_recorded(db_session, gateways, clock, cfg):
    """A placeholder property value yields a huge LTV that is still persisted."""
    gateways.property.get_appraisal = AsyncMock(return_value=None)
    gateways.property.get_property = AsyncMock(return_value=make_property("100"))
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)

    result = await start_underwriting(db_session, gateways, clock, cfg, app.id)

    assert result.ltv == Decimal("300000.00")
    assert result.underwriting.calculated_ltv == Decimal("300000.00")
    assert result.underwriting.decision == UnderwritingDecision.APPROVED_WITH_CONDITIONS
