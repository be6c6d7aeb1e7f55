# This project was developed with assistance from AI tools.
"""Schema and model tests against in-memory SQLite."""

import uuid
from decimal import Decimal

import pytest
import pytest_asyncio
from loan_db import (
    Application,
    ApplicationStatusHistory,
    Underwriting,
    build_engine,
    build_session_factory,
    init_db,
)
from loan_db.enums import ApplicationStatus, LoanPurpose, UnderwritingDecision
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError


@pytest_asyncio.fixture
async def engine():
    eng = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(eng)
    yield eng
    await eng.dispose()


def _application(number="APP-2026-000001") -> Application:
    return Application(
        application_number=number,
        customer_id=uuid.uuid4(),
        property_id=uuid.uuid4(),
        requested_loan_amount=Decimal("250000"),
        requested_term_months=360,
        loan_purpose=LoanPurpose.REFINANCE,
    )


async def test_database_connection(engine):
    async with engine.begin() as conn:
        result = await conn.execute(text("SELECT 1"))
        assert result.scalar() == 1


async def test_all_tables_created(engine):
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    assert set(tables) >= {
        "applications",
        "underwritings",
        "application_status_history",
        "application_documents",
        "application_conditions",
        "application_number_sequences",
    }


async def test_application_defaults_and_children(engine):
    factory = build_session_factory(engine)
    async with factory() as session:
        app = _application()
        app.underwriting = Underwriting(decision=UnderwritingDecision.APPROVED)
        app.status_history.append(
            ApplicationStatusHistory(
                from_status=ApplicationStatus.DRAFT,
                to_status=ApplicationStatus.SUBMITTED,
                changed_by="Borrower",
            )
        )
        session.add(app)
        await session.commit()

        await session.refresh(app)
        await session.refresh(app, ["underwriting", "status_history"])
        assert app.status == ApplicationStatus.DRAFT
        assert app.ltv is None and app.dti is None
        assert app.underwriting.credit_approved is False
        assert app.status_history[0].to_status == ApplicationStatus.SUBMITTED
        assert app.created_at is not None


async def test_application_number_unique(engine):
    factory = build_session_factory(engine)
    async with factory() as session:
        session.add_all([_application(), _application()])
        with pytest.raises(IntegrityError):
            await session.commit()


async def test_one_underwriting_per_application(engine):
    factory = build_session_factory(engine)
    async with factory() as session:
        app = _application()
        session.add(app)
        await session.flush()
        session.add_all([Underwriting(application_id=app.id), Underwriting(application_id=app.id)])
        with pytest.raises(IntegrityError):
            await session.commit()


@pytest.mark.parametrize(
    "column",
    [
        Application.__table__.c.ltv,
        Application.__table__.c.dti,
        Underwriting.__table__.c.calculated_ltv,
        Underwriting.__table__.c.calculated_dti,
    ],
    ids=lambda c: f"{c.table.name}.{c.name}",
)
def test_ratio_columns_match_money_width(column):
    """Uncapped ratios (e.g. LTV against a placeholder value) must fit."""
    money = Application.__table__.c.requested_loan_amount.type
    assert (column.type.precision, column.type.scale) == (money.precision, money.scale)
