# This project was developed with assistance from AI tools.
"""Application bookkeeping: numbering, create/submit/withdraw, lookups.

Lookups return None for unknown ids (the route maps that to 404); workflow
operations raise ``NotFoundError`` via ``require_application``.
"""

import asyncio
import logging
from uuid import UUID

from loan_db import (
    Application,
    ApplicationDocument,
    ApplicationNumberSequence,
    ApplicationStatusHistory,
)
from loan_db.enums import ApplicationStatus, DocumentStatus, DocumentType
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..clients import Gateways
from ..core.clock import Clock
from ..exceptions import NotFoundError
from ..schemas.application import ApplicationCreate
from ..schemas.gateway import CustomerProfile, LoanRecord, PropertyRecord
from .status import ensure_active, ensure_status, transition

logger = logging.getLogger(__name__)

BORROWER_ACTOR = "Borrower"

REQUIRED_DOCUMENTS: tuple[tuple[str, DocumentType], ...] = (
    ("Government ID", DocumentType.DRIVERS_LICENSE),
    ("Recent Pay Stubs (2 months)", DocumentType.PAY_STUBS),
    ("W-2 Forms (2 years)", DocumentType.W2_FORMS),
    ("Bank Statements (2 months)", DocumentType.BANK_STATEMENTS),
    ("Tax Returns (2 years)", DocumentType.TAX_RETURNS),
)


async def get_application(session: AsyncSession, application_id: UUID) -> Application | None:
    """Load an application with every owned collection eagerly loaded."""
    stmt = (
        select(Application)
        .options(
            selectinload(Application.underwriting),
            selectinload(Application.status_history),
            selectinload(Application.documents),
            selectinload(Application.conditions),
        )
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def require_application(session: AsyncSession, application_id: UUID) -> Application:
    application = await get_application(session, application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    return application


async def list_applications(
    session: AsyncSession,
    *,
    customer_id: UUID | None = None,
    status: ApplicationStatus | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Application], int]:
    """Return a page of applications, newest first, plus the total count."""
    count_stmt = _apply_filters(select(func.count(Application.id)), customer_id, status)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = _apply_filters(select(Application), customer_id, status)
    stmt = stmt.order_by(Application.created_at.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


def _apply_filters(stmt, customer_id, status):
    if customer_id is not None:
        stmt = stmt.where(Application.customer_id == customer_id)
    if status is not None:
        stmt = stmt.where(Application.status == status)
    return stmt


async def get_status_history(
    session: AsyncSession,
    application_id: UUID,
) -> list[ApplicationStatusHistory] | None:
    """Status history in chronological order, or None for an unknown id."""
    if await session.get(Application, application_id) is None:
        return None
    stmt = (
        select(ApplicationStatusHistory)
        .where(ApplicationStatusHistory.application_id == application_id)
        .order_by(ApplicationStatusHistory.changed_at, ApplicationStatusHistory.position)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


def _insert_if_absent(session: AsyncSession, year: int):
    """``INSERT ... ON CONFLICT DO NOTHING`` for the year's sequence row."""
    dialect = session.get_bind().dialect.name
    insert = pg_insert if dialect == "postgresql" else sqlite_insert
    return (
        insert(ApplicationNumberSequence.__table__)
        .values(year=year, last_value=0)
        .on_conflict_do_nothing(index_elements=["year"])
    )


async def next_application_number(session: AsyncSession, year: int) -> str:
    """Draw the next ``APP-<year>-<seq>`` number from the per-year sequence.

    The year's row is created if absent (a concurrent creator's insert wins
    silently), then locked for the rest of the transaction, so creators
    serialize on it even for the first application of a year.
    """
    await session.execute(_insert_if_absent(session, year))
    stmt = (
        select(ApplicationNumberSequence)
        .where(ApplicationNumberSequence.year == year)
        .with_for_update()
    )
    sequence = (await session.execute(stmt)).scalar_one()
    sequence.last_value += 1
    return f"APP-{year}-{sequence.last_value:06d}"


async def create_application(
    session: AsyncSession,
    gateways: Gateways,
    clock: Clock,
    data: ApplicationCreate,
) -> Application:
    """Create a Draft application for an existing customer and property."""
    customer_ok, property_ok = await asyncio.gather(
        gateways.customer.customer_exists(data.customer_id),
        gateways.property.property_exists(data.property_id),
    )
    if not customer_ok:
        raise NotFoundError(f"Customer {data.customer_id} not found")
    if not property_ok:
        raise NotFoundError(f"Property {data.property_id} not found")

    now = clock.now()
    application = Application(
        application_number=await next_application_number(session, now.year),
        customer_id=data.customer_id,
        property_id=data.property_id,
        requested_loan_amount=data.requested_loan_amount,
        down_payment_amount=data.down_payment_amount,
        requested_term_months=data.requested_term_months,
        loan_purpose=data.loan_purpose,
        application_type=data.application_type,
        status=ApplicationStatus.initial(),
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    application.documents = [
        ApplicationDocument(
            document_name=name,
            document_type=doc_type,
            status=DocumentStatus.REQUIRED,
            requested_at=now,
            created_at=now,
        )
        for name, doc_type in REQUIRED_DOCUMENTS
    ]
    session.add(application)
    await session.flush()
    app_id = application.id  # capture before commit
    await session.commit()

    logger.info(
        "Application %s created for customer %s",
        application.application_number,
        data.customer_id,
    )
    return await get_application(session, app_id)


async def submit_application(
    session: AsyncSession,
    clock: Clock,
    application_id: UUID,
    notes: str | None = None,
) -> Application:
    """Draft -> Submitted."""
    application = await require_application(session, application_id)
    ensure_status(application, {ApplicationStatus.DRAFT}, "submit")

    if notes:
        application.notes = notes
    transition(
        application,
        ApplicationStatus.SUBMITTED,
        reason="Application submitted by borrower",
        actor=BORROWER_ACTOR,
        now=clock.now(),
    )
    await session.commit()
    return await get_application(session, application_id)


async def withdraw_application(
    session: AsyncSession,
    clock: Clock,
    application_id: UUID,
    reason: str | None = None,
) -> Application:
    """Any non-terminal status -> Withdrawn."""
    application = await require_application(session, application_id)
    ensure_active(application, "withdraw")

    transition(
        application,
        ApplicationStatus.WITHDRAWN,
        reason=reason or "Withdrawn by borrower",
        actor=BORROWER_ACTOR,
        now=clock.now(),
    )
    await session.commit()
    return await get_application(session, application_id)


async def fetch_related_records(
    gateways: Gateways,
    application: Application,
) -> tuple[CustomerProfile | None, PropertyRecord | None, LoanRecord | None]:
    """Customer, property and (if funded) loan for display; any may be None."""

    async def _no_loan() -> None:
        return None

    return await asyncio.gather(
        gateways.customer.get_customer(application.customer_id),
        gateways.property.get_property(application.property_id),
        gateways.loan.get_loan(application.loan_id) if application.loan_id else _no_loan(),
    )
