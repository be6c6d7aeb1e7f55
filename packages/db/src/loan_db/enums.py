# This project was developed with assistance from AI tools.
"""
Domain enums for the loan-application lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    DOCUMENTS_REQUESTED = "documents_requested"
    DOCUMENTS_RECEIVED = "documents_received"
    IN_REVIEW = "in_review"
    UNDERWRITING = "underwriting"
    CONDITIONAL_APPROVAL = "conditional_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    COUNTER_OFFER = "counter_offer"
    ACCEPTED_BY_BORROWER = "accepted_by_borrower"
    CLEAR_TO_CLOSE = "clear_to_close"
    CLOSED = "closed"
    FUNDED = "funded"
    WITHDRAWN = "withdrawn"
    EXPIRED = "expired"

    @classmethod
    def initial(cls) -> "ApplicationStatus":
        return cls.DRAFT

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses where an application is no longer active."""
        return frozenset({cls.REJECTED, cls.CLOSED, cls.FUNDED, cls.WITHDRAWN, cls.EXPIRED})

    @classmethod
    def fundable_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses from which the funding pipeline may run."""
        return frozenset({cls.APPROVED, cls.CLEAR_TO_CLOSE})


class LoanPurpose(str, enum.Enum):
    PURCHASE = "purchase"
    REFINANCE = "refinance"
    CASH_OUT_REFINANCE = "cash_out_refinance"
    HOME_EQUITY = "home_equity"
    CONSTRUCTION = "construction"


class ApplicationType(str, enum.Enum):
    PURCHASE = "purchase"
    REFINANCE = "refinance"
    HELOC = "heloc"
    REVERSE_MORTGAGE = "reverse_mortgage"


class UnderwritingDecision(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    APPROVED_WITH_CONDITIONS = "approved_with_conditions"
    DENIED = "denied"


class ConditionType(str, enum.Enum):
    PRIOR_TO_APPROVAL = "prior_to_approval"
    PRIOR_TO_CLOSING = "prior_to_closing"
    PRIOR_TO_FUNDING = "prior_to_funding"
    POST_CLOSING = "post_closing"


class ConditionStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SATISFIED = "satisfied"
    WAIVED = "waived"
    NOT_MET = "not_met"


class DocumentType(str, enum.Enum):
    DRIVERS_LICENSE = "drivers_license"
    PASSPORT = "passport"
    SSN_CARD = "ssn_card"
    PAY_STUBS = "pay_stubs"
    W2_FORMS = "w2_forms"
    TAX_RETURNS = "tax_returns"
    BANK_STATEMENTS = "bank_statements"
    EMPLOYMENT_VERIFICATION = "employment_verification"
    OFFER_LETTER = "offer_letter"
    PURCHASE_AGREEMENT = "purchase_agreement"
    APPRAISAL_REPORT = "appraisal_report"
    TITLE_REPORT = "title_report"
    HOMEOWNERS_INSURANCE = "homeowners_insurance"
    GIFT_LETTER = "gift_letter"
    EXPLANATION_LETTER = "explanation_letter"
    OTHER = "other"


class DocumentStatus(str, enum.Enum):
    REQUIRED = "required"
    REQUESTED = "requested"
    RECEIVED = "received"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    WAIVED = "waived"
