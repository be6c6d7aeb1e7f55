# This project was developed with assistance from AI tools.
"""Application status state machine.

Every status change goes through ``transition``, which appends exactly one
``ApplicationStatusHistory`` row and stamps the lifecycle timestamp that the
target status produces. Timestamps are set once and never rewound.

Adjacency is guarded by the calling workflow (``ensure_status``), not by a
global transition table.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from loan_db import Application, ApplicationStatusHistory
from loan_db.enums import ApplicationStatus

from ..exceptions import InvalidStateError

logger = logging.getLogger(__name__)

# Target status -> Application timestamp column it stamps.
_STAMPED_AT: dict[ApplicationStatus, str] = {
    ApplicationStatus.SUBMITTED: "submitted_at",
    ApplicationStatus.UNDERWRITING: "underwriting_started_at",
    ApplicationStatus.APPROVED: "decision_at",
    ApplicationStatus.CONDITIONAL_APPROVAL: "decision_at",
    ApplicationStatus.REJECTED: "decision_at",
    ApplicationStatus.CLOSED: "closed_at",
    ApplicationStatus.FUNDED: "closed_at",
}


def ensure_status(
    application: Application,
    allowed: Iterable[ApplicationStatus],
    operation: str,
) -> None:
    """Raise InvalidStateError unless the application is in an allowed status."""
    allowed = frozenset(allowed)
    if application.status not in allowed:
        raise InvalidStateError(
            f"Cannot {operation} application {application.application_number} "
            f"in status '{application.status.value}'. "
            f"Allowed: {sorted(s.value for s in allowed)}."
        )


def ensure_active(application: Application, operation: str) -> None:
    """Raise InvalidStateError if the application is in a terminal status."""
    if application.status in ApplicationStatus.terminal_statuses():
        raise InvalidStateError(
            f"Cannot {operation} application {application.application_number}: "
            f"status '{application.status.value}' is terminal."
        )


def transition(
    application: Application,
    to_status: ApplicationStatus,
    *,
    reason: str | None,
    actor: str,
    now: datetime,
) -> ApplicationStatusHistory:
    """Move the application to ``to_status`` and record the history entry.

    Mutates the in-session objects only; the caller commits.
    """
    from_status = application.status
    application.status = to_status
    application.updated_at = now

    stamp = _STAMPED_AT.get(to_status)
    if stamp is not None and getattr(application, stamp) is None:
        setattr(application, stamp, now)

    entry = ApplicationStatusHistory(
        from_status=from_status,
        to_status=to_status,
        reason=reason,
        changed_by=actor,
        position=len(application.status_history) + 1,
        changed_at=now,
    )
    application.status_history.append(entry)

    logger.info(
        "Application %s: %s -> %s by %s",
        application.application_number,
        from_status.value,
        to_status.value,
        actor,
    )
    return entry
