# This project was developed with assistance from AI tools.
"""Tests for the application status state machine."""

from datetime import UTC, datetime, timedelta

import pytest
from loan_db import Application
from loan_db.enums import ApplicationStatus

from loan_orchestrator.exceptions import InvalidStateError
from loan_orchestrator.services.status import ensure_active, ensure_status, transition

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _app(status=ApplicationStatus.DRAFT) -> Application:
    return Application(application_number="APP-2026-000007", status=status)


# ---------------------------------------------------------------------------
# Status set
# ---------------------------------------------------------------------------


def test_sixteen_statuses_with_draft_initial():
    assert len(ApplicationStatus) == 16
    assert ApplicationStatus.initial() == ApplicationStatus.DRAFT


def test_terminal_statuses():
    assert ApplicationStatus.terminal_statuses() == {
        ApplicationStatus.REJECTED,
        ApplicationStatus.CLOSED,
        ApplicationStatus.FUNDED,
        ApplicationStatus.WITHDRAWN,
        ApplicationStatus.EXPIRED,
    }


def test_fundable_statuses():
    assert ApplicationStatus.fundable_statuses() == {
        ApplicationStatus.APPROVED,
        ApplicationStatus.CLEAR_TO_CLOSE,
    }


# ---------------------------------------------------------------------------
# transition()
# ---------------------------------------------------------------------------


def test_transition_records_history_entry():
    app = _app()
    entry = transition(
        app, ApplicationStatus.SUBMITTED, reason="Submitted", actor="Borrower", now=T0
    )

    assert app.status == ApplicationStatus.SUBMITTED
    assert app.updated_at == T0
    assert app.status_history == [entry]
    assert entry.from_status == ApplicationStatus.DRAFT
    assert entry.to_status == ApplicationStatus.SUBMITTED
    assert entry.reason == "Submitted"
    assert entry.changed_by == "Borrower"
    assert entry.changed_at == T0


@pytest.mark.parametrize(
    "target,column",
    [
        (ApplicationStatus.SUBMITTED, "submitted_at"),
        (ApplicationStatus.UNDERWRITING, "underwriting_started_at"),
        (ApplicationStatus.APPROVED, "decision_at"),
        (ApplicationStatus.CONDITIONAL_APPROVAL, "decision_at"),
        (ApplicationStatus.REJECTED, "decision_at"),
        (ApplicationStatus.FUNDED, "closed_at"),
        (ApplicationStatus.CLOSED, "closed_at"),
    ],
)
def test_transition_stamps_lifecycle_timestamp(target, column):
    app = _app()
    transition(app, target, reason=None, actor="System", now=T0)
    assert getattr(app, column) == T0


def test_timestamps_are_never_rewound():
    """Re-entering Underwriting keeps the first underwriting_started_at."""
    app = _app(ApplicationStatus.SUBMITTED)
    later = T0 + timedelta(hours=2)

    transition(app, ApplicationStatus.UNDERWRITING, reason="first", actor="System", now=T0)
    transition(app, ApplicationStatus.UNDERWRITING, reason="again", actor="System", now=later)

    assert app.underwriting_started_at == T0
    assert app.updated_at == later
    assert len(app.status_history) == 2
    assert app.status_history[1].from_status == ApplicationStatus.UNDERWRITING


def test_transition_without_stamp_leaves_timestamps_alone():
    app = _app(ApplicationStatus.SUBMITTED)
    transition(app, ApplicationStatus.IN_REVIEW, reason=None, actor="System", now=T0)

    assert app.submitted_at is None
    assert app.decision_at is None
    assert app.closed_at is None


def test_full_lifecycle_history_is_append_only():
    app = _app()
    path = [
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.UNDERWRITING,
        ApplicationStatus.APPROVED,
        ApplicationStatus.FUNDED,
    ]
    for i, status in enumerate(path):
        transition(app, status, reason=None, actor="System", now=T0 + timedelta(minutes=i))

    assert [(h.from_status, h.to_status) for h in app.status_history] == [
        (ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED),
        (ApplicationStatus.SUBMITTED, ApplicationStatus.UNDERWRITING),
        (ApplicationStatus.UNDERWRITING, ApplicationStatus.APPROVED),
        (ApplicationStatus.APPROVED, ApplicationStatus.FUNDED),
    ]


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def test_ensure_status_rejects_without_mutation():
    app = _app(ApplicationStatus.DRAFT)

    with pytest.raises(InvalidStateError, match="Cannot fund"):
        ensure_status(app, ApplicationStatus.fundable_statuses(), "fund")

    assert app.status == ApplicationStatus.DRAFT
    assert app.status_history == []


def test_ensure_status_allows_listed_status():
    ensure_status(_app(ApplicationStatus.CLEAR_TO_CLOSE), ApplicationStatus.fundable_statuses(), "fund")


@pytest.mark.parametrize("status", sorted(ApplicationStatus.terminal_statuses()))
def test_ensure_active_rejects_terminal(status):
    with pytest.raises(InvalidStateError, match="terminal"):
        ensure_active(_app(status), "withdraw")


def test_ensure_active_allows_in_flight():
    ensure_active(_app(ApplicationStatus.UNDERWRITING), "withdraw")
