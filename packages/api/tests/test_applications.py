# This project was developed with assistance from AI tools.
"""Tests for application bookkeeping: numbering, create, submit, withdraw, lookups."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from loan_db import (
    ApplicationNumberSequence,
    ApplicationStatusHistory,
    build_session_factory,
)
from loan_db.enums import ApplicationStatus, DocumentStatus, DocumentType
from sqlalchemy import func, select

from loan_orchestrator.exceptions import InvalidStateError, NotFoundError
from loan_orchestrator.schemas.application import ApplicationCreate
from loan_orchestrator.services import application as app_service

from tests.factories import (
    CUSTOMER_ID,
    LOAN_ID,
    PROPERTY_ID,
    START,
    SteppingClock,
    add_application,
)


def _create_body(**kwargs) -> ApplicationCreate:
    data = {
        "customer_id": CUSTOMER_ID,
        "property_id": PROPERTY_ID,
        "requested_loan_amount": Decimal("300000"),
        "down_payment_amount": Decimal("100000"),
        "requested_term_months": 360,
    }
    data.update(kwargs)
    return ApplicationCreate(**data)


# ---------------------------------------------------------------------------
# Numbering
# ---------------------------------------------------------------------------


async def test_application_numbers_are_sequential_per_year(db_session):
    first = await app_service.next_application_number(db_session, 2026)
    second = await app_service.next_application_number(db_session, 2026)
    other_year = await app_service.next_application_number(db_session, 2027)

    assert first == "APP-2026-000001"
    assert second == "APP-2026-000002"
    assert other_year == "APP-2027-000001"


async def test_sequence_row_insert_tolerates_existing_row(db_session):
    """A year row created by another creator first is reused, not re-inserted."""
    await db_session.execute(app_service._insert_if_absent(db_session, 2026))
    await db_session.execute(app_service._insert_if_absent(db_session, 2026))
    await db_session.commit()

    number = await app_service.next_application_number(db_session, 2026)

    assert number == "APP-2026-000001"
    rows = await db_session.execute(
        select(func.count()).select_from(ApplicationNumberSequence)
    )
    assert rows.scalar() == 1


async def test_numbering_continues_from_committed_sequence(db_engine, db_session):
    other = build_session_factory(db_engine)
    async with other() as session:
        session.add(ApplicationNumberSequence(year=2026, last_value=41))
        await session.commit()

    assert await app_service.next_application_number(db_session, 2026) == "APP-2026-000042"


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def test_create_application(db_session, gateways, clock):
    app = await app_service.create_application(db_session, gateways, clock, _create_body())

    assert app.application_number == "APP-2026-000001"
    assert app.status == ApplicationStatus.DRAFT
    assert app.ltv is None
    assert app.dti is None
    assert app.approved_loan_amount is None
    assert app.offered_interest_rate is None
    assert app.status_history == []
    assert {d.document_type for d in app.documents} == {
        DocumentType.DRIVERS_LICENSE,
        DocumentType.PAY_STUBS,
        DocumentType.W2_FORMS,
        DocumentType.BANK_STATEMENTS,
        DocumentType.TAX_RETURNS,
    }
    assert all(d.status == DocumentStatus.REQUIRED for d in app.documents)


async def test_create_numbers_successive_applications(db_session, gateways, clock):
    await app_service.create_application(db_session, gateways, clock, _create_body())
    second = await app_service.create_application(db_session, gateways, clock, _create_body())
    assert second.application_number == "APP-2026-000002"


async def test_create_unknown_customer(db_session, gateways, clock):
    gateways.customer.customer_exists.return_value = False

    with pytest.raises(NotFoundError, match="Customer"):
        await app_service.create_application(db_session, gateways, clock, _create_body())


async def test_create_unknown_property(db_session, gateways, clock):
    gateways.property.property_exists.return_value = False

    with pytest.raises(NotFoundError, match="Property"):
        await app_service.create_application(db_session, gateways, clock, _create_body())


# ---------------------------------------------------------------------------
# Submit / withdraw
# ---------------------------------------------------------------------------


async def test_submit_draft(db_session, clock):
    app = await add_application(db_session)

    result = await app_service.submit_application(db_session, clock, app.id, notes="First home")

    assert result.status == ApplicationStatus.SUBMITTED
    assert result.submitted_at is not None
    assert result.notes == "First home"
    entry = result.status_history[0]
    assert (entry.from_status, entry.to_status) == (
        ApplicationStatus.DRAFT,
        ApplicationStatus.SUBMITTED,
    )
    assert entry.changed_by == "Borrower"


async def test_submit_requires_draft(db_session, clock):
    app = await add_application(db_session, status=ApplicationStatus.SUBMITTED)

    with pytest.raises(InvalidStateError):
        await app_service.submit_application(db_session, clock, app.id)


async def test_withdraw_in_flight_application(db_session, clock):
    app = await add_application(db_session, status=ApplicationStatus.UNDERWRITING)

    result = await app_service.withdraw_application(db_session, clock, app.id)

    assert result.status == ApplicationStatus.WITHDRAWN
    assert result.status_history[-1].reason == "Withdrawn by borrower"


async def test_withdraw_terminal_application_rejected(db_session, clock):
    app = await add_application(db_session, status=ApplicationStatus.FUNDED)

    with pytest.raises(InvalidStateError):
        await app_service.withdraw_application(db_session, clock, app.id, "Changed my mind")


async def test_workflow_on_unknown_id(db_session, clock):
    with pytest.raises(NotFoundError):
        await app_service.submit_application(db_session, clock, uuid.uuid4())


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def test_get_unknown_returns_none(db_session):
    assert await app_service.get_application(db_session, uuid.uuid4()) is None
    assert await app_service.get_status_history(db_session, uuid.uuid4()) is None


async def test_list_filters_by_status(db_session):
    await add_application(db_session, number="APP-2026-000001")
    await add_application(
        db_session, number="APP-2026-000002", status=ApplicationStatus.SUBMITTED
    )

    all_apps, total = await app_service.list_applications(db_session)
    submitted, submitted_total = await app_service.list_applications(
        db_session, status=ApplicationStatus.SUBMITTED
    )
    none, none_total = await app_service.list_applications(db_session, customer_id=uuid.uuid4())

    assert total == 2 and len(all_apps) == 2
    assert submitted_total == 1
    assert submitted[0].application_number == "APP-2026-000002"
    assert none_total == 0 and none == []


async def test_history_in_order(db_session, clock):
    app = await add_application(db_session)
    await app_service.submit_application(db_session, clock, app.id)
    await app_service.withdraw_application(db_session, clock, app.id)

    history = await app_service.get_status_history(db_session, app.id)

    assert [h.to_status for h in history] == [
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.WITHDRAWN,
    ]


async def test_history_entries_carry_insertion_position(db_session):
    frozen = SteppingClock(step=timedelta(0))
    app = await add_application(db_session)
    await app_service.submit_application(db_session, frozen, app.id)
    await app_service.withdraw_application(db_session, frozen, app.id)

    history = await app_service.get_status_history(db_session, app.id)

    assert history[0].changed_at == history[1].changed_at
    assert [h.position for h in history] == [1, 2]
    assert [h.to_status for h in history] == [
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.WITHDRAWN,
    ]


async def test_same_timestamp_history_ordered_by_position(db_session):
    app = await add_application(db_session)
    db_session.add_all([
        ApplicationStatusHistory(
            application_id=app.id,
            from_status=ApplicationStatus.SUBMITTED,
            to_status=ApplicationStatus.UNDERWRITING,
            position=2,
            changed_at=START,
        ),
        ApplicationStatusHistory(
            application_id=app.id,
            from_status=ApplicationStatus.DRAFT,
            to_status=ApplicationStatus.SUBMITTED,
            position=1,
            changed_at=START,
        ),
    ])
    await db_session.commit()

    history = await app_service.get_status_history(db_session, app.id)
    loaded = await app_service.get_application(db_session, app.id)

    expected = [ApplicationStatus.SUBMITTED, ApplicationStatus.UNDERWRITING]
    assert [h.to_status for h in history] == expected
    assert [h.to_status for h in loaded.status_history] == expected


async def test_related_records_skip_loan_until_funded(db_session, gateways):
    app = await add_application(db_session)

    customer, prop, loan = await app_service.fetch_related_records(gateways, app)

    assert customer.id == CUSTOMER_ID
    assert prop.id == PROPERTY_ID
    assert loan is None
    gateways.loan.get_loan.assert_not_awaited()

    app.loan_id = LOAN_ID
    _, _, loan = await app_service.fetch_related_records(gateways, app)
    assert loan.id == LOAN_ID
