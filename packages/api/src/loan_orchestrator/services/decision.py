# This project was developed with assistance from AI tools.
"""Decision recording.

Maps an approve/deny decision onto the application status, the offered
terms, the underwriting classification and any prior-to-closing conditions,
all in one commit.
"""

import logging
from uuid import UUID

from loan_db import Application, ApplicationCondition
from loan_db.enums import (
    ApplicationStatus,
    ConditionStatus,
    ConditionType,
    UnderwritingDecision,
)
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock
from ..schemas.application import DecisionRequest
from .application import get_application, require_application
from .status import transition

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"


def resolve_outcome(
    approved: bool,
    conditions: list[str],
) -> tuple[ApplicationStatus, UnderwritingDecision]:
    """Application status and underwriting classification for a decision."""
    if approved and conditions:
        return ApplicationStatus.CONDITIONAL_APPROVAL, UnderwritingDecision.APPROVED_WITH_CONDITIONS
    if approved:
        return ApplicationStatus.APPROVED, UnderwritingDecision.APPROVED
    return ApplicationStatus.REJECTED, UnderwritingDecision.DENIED


async def record_decision(
    session: AsyncSession,
    clock: Clock,
    application_id: UUID,
    decision: DecisionRequest,
) -> Application:
    """Record an underwriting decision.

    Raises:
        NotFoundError: the application id does not resolve.
    """
    application = await require_application(session, application_id)
    # Conditions only attach to an approval.
    conditions = (
        [c.strip() for c in decision.conditions if c and c.strip()] if decision.approved else []
    )
    to_status, classification = resolve_outcome(decision.approved, conditions)
    now = clock.now()
    actor = decision.decided_by or SYSTEM_ACTOR

    if decision.approved:
        application.approved_loan_amount = (
            decision.approved_amount
            if decision.approved_amount is not None
            else application.requested_loan_amount
        )
        application.offered_interest_rate = decision.interest_rate
    application.decision_reason = decision.reason

    for name in conditions:
        application.conditions.append(
            ApplicationCondition(
                condition_name=name,
                condition_type=ConditionType.PRIOR_TO_CLOSING,
                status=ConditionStatus.PENDING,
                created_at=now,
            )
        )

    if application.underwriting is not None:
        application.underwriting.decision = classification
        application.underwriting.decision_notes = decision.reason
        application.underwriting.completed_at = now

    transition(
        application,
        to_status,
        reason=decision.reason or f"Decision: {to_status.value}",
        actor=actor,
        now=now,
    )
    await session.commit()

    logger.info(
        "Decision recorded for application %s: %s (%d conditions) by %s",
        application.application_number,
        to_status.value,
        len(conditions),
        actor,
    )
    return await get_application(session, application_id)
