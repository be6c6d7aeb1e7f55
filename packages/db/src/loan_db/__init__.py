# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import (
    Base,
    SessionLocal,
    build_engine,
    build_session_factory,
    engine,
    get_db,
    init_db,
)
from .enums import (
    ApplicationStatus,
    ApplicationType,
    ConditionStatus,
    ConditionType,
    DocumentStatus,
    DocumentType,
    LoanPurpose,
    UnderwritingDecision,
)
from .models import (
    Application,
    ApplicationCondition,
    ApplicationDocument,
    ApplicationNumberSequence,
    ApplicationStatusHistory,
    Underwriting,
)

__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "build_session_factory",
    "engine",
    "get_db",
    "init_db",
    "__version__",
    # Enums
    "ApplicationStatus",
    "ApplicationType",
    "ConditionStatus",
    "ConditionType",
    "DocumentStatus",
    "DocumentType",
    "LoanPurpose",
    "UnderwritingDecision",
    # Models
    "Application",
    "ApplicationCondition",
    "ApplicationDocument",
    "ApplicationNumberSequence",
    "ApplicationStatusHistory",
    "Underwriting",
]
