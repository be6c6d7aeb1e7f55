# This project was developed with assistance from AI tools.
"""Fan-out orchestrator for automated underwriting.

Issues the six underwriting-time reads concurrently, joins all of them, and
feeds the (possibly partial) snapshot to the decision engine. A run always
ends with the application in Underwriting and an evaluation recorded, even
when every dependency was unavailable.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from loan_db import Application, Underwriting
from loan_db.enums import ApplicationStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import Gateways
from ..core.clock import Clock
from ..core.config import Settings
from ..schemas.underwriting import (
    RequestedTerms,
    UnderwritingEvaluation,
    UnderwritingPolicy,
    UnderwritingSnapshot,
)
from .application import get_application, require_application
from .status import transition
from .underwriting import evaluate_underwriting

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"

T = TypeVar("T")


async def _settle(name: str, call: Awaitable[T]) -> T | None:
    """Await one gateway read, turning any escaped failure into absence."""
    try:
        return await call
    except Exception:
        logger.warning("Underwriting read '%s' failed; treating as absent", name, exc_info=True)
        return None


async def gather_snapshot(gateways: Gateways, application: Application) -> UnderwritingSnapshot:
    """Run all six reads concurrently and wait for every one to settle."""
    customer_id = application.customer_id
    property_id = application.property_id

    customer, credit, employments, prop, appraisal, title = await asyncio.gather(
        _settle("customer", gateways.customer.get_customer(customer_id)),
        _settle("credit", gateways.customer.get_credit_report(customer_id)),
        _settle("employments", gateways.customer.get_employments(customer_id)),
        _settle("property", gateways.property.get_property(property_id)),
        _settle("appraisal", gateways.property.get_appraisal(property_id)),
        _settle("title", gateways.property.get_title_search(property_id)),
    )
    snapshot = UnderwritingSnapshot(
        customer=customer,
        credit=credit,
        employments=employments,
        property=prop,
        appraisal=appraisal,
        title=title,
    )
    absent = snapshot.absent_fields()
    if absent:
        logger.warning(
            "Application %s underwriting snapshot incomplete; absent: %s",
            application.application_number,
            ", ".join(absent),
        )
    return snapshot


def policy_from_settings(cfg: Settings) -> UnderwritingPolicy:
    return UnderwritingPolicy(
        reference_rate=cfg.REFERENCE_INTEREST_RATE,
        min_credit_score=cfg.MIN_CREDIT_SCORE,
        max_dti=cfg.MAX_DTI,
        max_ltv=cfg.MAX_LTV,
    )


def _apply_evaluation(
    application: Application,
    evaluation: UnderwritingEvaluation,
    underwriter_name: str,
) -> Underwriting:
    record = application.underwriting
    if record is None:
        record = Underwriting()
        application.underwriting = record

    record.credit_score = evaluation.credit_score
    record.credit_rating = evaluation.credit_rating
    record.credit_approved = evaluation.credit_approved
    record.gross_monthly_income = evaluation.gross_monthly_income
    record.estimated_monthly_payment = evaluation.estimated_monthly_payment
    record.calculated_dti = evaluation.calculated_dti
    record.income_verified = evaluation.income_verified
    record.employment_verified = evaluation.employment_verified
    record.years_employed = evaluation.years_employed
    record.appraised_value = evaluation.appraised_value
    record.calculated_ltv = evaluation.calculated_ltv
    record.property_approved = evaluation.property_approved
    record.title_clear = evaluation.title_clear
    record.decision = evaluation.decision
    record.decision_notes = evaluation.notes
    record.underwriter_name = underwriter_name

    application.ltv = evaluation.calculated_ltv
    application.dti = evaluation.calculated_dti
    return record


async def start_underwriting(
    session: AsyncSession,
    gateways: Gateways,
    clock: Clock,
    cfg: Settings,
    application_id: UUID,
) -> Application:
    """Gather dependency data, evaluate, and move the application to Underwriting.

    Raises:
        NotFoundError: the application id does not resolve.
    """
    application = await require_application(session, application_id)
    logger.info("Starting underwriting for application %s", application.application_number)

    snapshot = await gather_snapshot(gateways, application)
    evaluation = evaluate_underwriting(
        RequestedTerms(
            requested_loan_amount=application.requested_loan_amount,
            requested_term_months=application.requested_term_months,
        ),
        snapshot,
        policy_from_settings(cfg),
    )

    now = clock.now()
    record = _apply_evaluation(application, evaluation, cfg.AUTOMATED_UNDERWRITER_NAME)
    if record.created_at is None:
        record.created_at = now
    transition(
        application,
        ApplicationStatus.UNDERWRITING,
        reason=f"Automated underwriting: {evaluation.decision.value}",
        actor=SYSTEM_ACTOR,
        now=now,
    )
    await session.commit()

    logger.info(
        "Underwriting completed for application %s: %s (%d issues, DTI=%s, LTV=%s)",
        application.application_number,
        evaluation.decision.value,
        evaluation.issue_count,
        evaluation.calculated_dti,
        evaluation.calculated_ltv,
    )
    return await get_application(session, application_id)
