# This project was developed with assistance from AI tools.
"""Underwriting condition bookkeeping for an application."""

import logging
from uuid import UUID

from loan_db import ApplicationCondition
from loan_db.enums import ConditionStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock
from ..schemas.application import ConditionCreate, ConditionStatusUpdate
from .application import require_application

logger = logging.getLogger(__name__)


async def add_condition(
    session: AsyncSession,
    clock: Clock,
    application_id: UUID,
    data: ConditionCreate,
) -> ApplicationCondition:
    """Attach a pending condition to an application."""
    application = await require_application(session, application_id)
    condition = ApplicationCondition(
        application_id=application.id,
        condition_name=data.condition_name,
        description=data.description,
        condition_type=data.condition_type,
        status=ConditionStatus.PENDING,
        due_date=data.due_date,
        created_at=clock.now(),
    )
    session.add(condition)
    await session.commit()
    await session.refresh(condition)
    logger.info(
        "Condition '%s' added to application %s",
        data.condition_name,
        application.application_number,
    )
    return condition


async def update_condition_status(
    session: AsyncSession,
    clock: Clock,
    condition_id: UUID,
    data: ConditionStatusUpdate,
) -> ApplicationCondition | None:
    """Set a condition's status; returns None for an unknown id."""
    condition = await session.get(ApplicationCondition, condition_id)
    if condition is None:
        return None

    condition.status = data.status
    if data.status == ConditionStatus.SATISFIED and condition.satisfied_at is None:
        condition.satisfied_at = clock.now()
    if data.notes is not None:
        condition.notes = data.notes

    await session.commit()
    await session.refresh(condition)
    return condition
