# This project was developed with assistance from AI tools.
"""Orchestration error taxonomy.

Routes translate these into HTTP problem responses. A non-fatal dependency
failure ("degraded") is not an exception: it is logged and reported on the
operation result instead.
"""


class OrchestrationError(Exception):
    """Base class for errors surfaced to callers of the workflow services."""


class NotFoundError(OrchestrationError):
    """An application or related entity id does not resolve."""


class InvalidStateError(OrchestrationError):
    """The operation is not legal for the application's current status."""


class DependencyFailureError(OrchestrationError):
    """A dependency call whose result is required by the operation failed."""
