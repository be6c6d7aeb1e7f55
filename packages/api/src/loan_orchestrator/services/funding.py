# This project was developed with assistance from AI tools.
"""Funding pipeline: create loan -> fund loan -> create payment schedule.

Only loan creation is fatal. Once the loan exists the application is marked
Funded; a failed funding confirmation or payment schedule is logged and
reported in ``degraded_steps`` instead of aborting.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from loan_db import Application
from loan_db.enums import ApplicationStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import Gateways
from ..core.clock import Clock
from ..core.config import Settings
from ..exceptions import DependencyFailureError
from ..schemas.gateway import (
    CreateLoanRequest,
    CreateScheduleRequest,
    FundLoanRequest,
    LoanRecord,
    PaymentSchedule,
)
from .application import get_application, require_application
from .status import ensure_status, transition

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"
CONVENTIONAL_LOAN_TYPE = 1
PAYMENT_DAY_OF_MONTH = 1

STEP_FUND_LOAN = "fund_loan"
STEP_PAYMENT_SCHEDULE = "create_payment_schedule"


@dataclass
class FundingResult:
    application: Application
    loan: LoanRecord
    funding_confirmed: bool
    payment_schedule: PaymentSchedule | None = None
    degraded_steps: list[str] = field(default_factory=list)


def first_payment_date(funding_date: datetime) -> datetime:
    """First day of the month two months after ``funding_date``."""
    month_index = funding_date.month - 1 + 2
    return datetime(
        funding_date.year + month_index // 12,
        month_index % 12 + 1,
        1,
        tzinfo=funding_date.tzinfo,
    )


async def fund_application(
    session: AsyncSession,
    gateways: Gateways,
    clock: Clock,
    cfg: Settings,
    application_id: UUID,
) -> FundingResult:
    """Run the funding saga for an approved application.

    Raises:
        NotFoundError: the application id does not resolve.
        InvalidStateError: status is not Approved or ClearToClose; nothing written.
        DependencyFailureError: loan creation failed; nothing written.
    """
    application = await require_application(session, application_id)
    ensure_status(application, ApplicationStatus.fundable_statuses(), "fund")

    principal = application.approved_loan_amount
    if principal is None:
        principal = application.requested_loan_amount
    rate = application.offered_interest_rate
    if rate is None:
        rate = cfg.REFERENCE_INTEREST_RATE

    # Step 1 -- create loan (fatal)
    loan = await gateways.loan.create_loan(
        CreateLoanRequest(
            customer_id=application.customer_id,
            property_id=application.property_id,
            principal_amount=principal,
            interest_rate=rate,
            term_months=application.requested_term_months,
            loan_type=CONVENTIONAL_LOAN_TYPE,
            down_payment=application.down_payment_amount,
        )
    )
    if loan is None:
        logger.error(
            "Loan creation failed for application %s; funding aborted",
            application.application_number,
        )
        raise DependencyFailureError(
            f"Failed to create loan for application {application.application_number}"
        )
    logger.info(
        "Created loan %s (%s) for application %s",
        loan.loan_number,
        loan.id,
        application.application_number,
    )

    degraded: list[str] = []
    now = clock.now()

    # Step 2 -- fund loan (non-fatal)
    funded = await gateways.loan.fund_loan(
        loan.id,
        FundLoanRequest(funding_date=now, first_payment_date=first_payment_date(now)),
    )
    if not funded:
        logger.warning("Failed to fund loan %s; continuing", loan.id)
        degraded.append(STEP_FUND_LOAN)

    # Step 3 -- payment schedule (non-fatal)
    schedule = await gateways.payment.create_schedule(
        CreateScheduleRequest(
            loan_id=loan.id,
            customer_id=application.customer_id,
            is_auto_pay=True,
            payment_day_of_month=PAYMENT_DAY_OF_MONTH,
            regular_payment_amount=loan.monthly_payment,
        )
    )
    if schedule is None:
        logger.warning("Failed to create payment schedule for loan %s; continuing", loan.id)
        degraded.append(STEP_PAYMENT_SCHEDULE)

    application.loan_id = loan.id
    transition(
        application,
        ApplicationStatus.FUNDED,
        reason=f"Loan {loan.loan_number} created and funded",
        actor=SYSTEM_ACTOR,
        now=now,
    )
    try:
        await session.commit()
    except Exception:
        # The remote loan exists but the application does not reference it.
        logger.error(
            "Persisting funded application %s failed after loan %s was created",
            application.application_number,
            loan.id,
            exc_info=True,
        )
        raise

    logger.info(
        "Application %s funded with loan %s (degraded steps: %s)",
        application.application_number,
        loan.loan_number,
        ", ".join(degraded) or "none",
    )
    return FundingResult(
        application=await get_application(session, application_id),
        loan=loan,
        funding_confirmed=funded,
        payment_schedule=schedule,
        degraded_steps=degraded,
    )
