# This project was developed with assistance from AI tools.
"""Inputs and outputs of the automated underwriting engine."""

from decimal import Decimal

from loan_db.enums import UnderwritingDecision
from pydantic import BaseModel, Field

from .gateway import (
    Appraisal,
    CreditReport,
    CustomerProfile,
    Employment,
    PropertyRecord,
    TitleSearch,
)


class RequestedTerms(BaseModel):
    """The slice of an application the engine prices."""

    requested_loan_amount: Decimal
    requested_term_months: int


class UnderwritingSnapshot(BaseModel):
    """Facts gathered from the dependency services. Any field may be absent."""

    customer: CustomerProfile | None = None
    credit: CreditReport | None = None
    employments: list[Employment] | None = None
    property: PropertyRecord | None = None
    appraisal: Appraisal | None = None
    title: TitleSearch | None = None

    def absent_fields(self) -> list[str]:
        return [name for name, value in self if value is None]


class UnderwritingPolicy(BaseModel):
    """Thresholds the engine applies; sourced from settings."""

    reference_rate: Decimal = Decimal("6.5")
    min_credit_score: int = 620
    max_dti: Decimal = Decimal("43")
    max_ltv: Decimal = Decimal("97")


class UnderwritingEvaluation(BaseModel):
    """Engine output: derived metrics, verification flags and classification."""

    credit_score: int | None = None
    credit_rating: str | None = None
    credit_approved: bool = False

    gross_monthly_income: Decimal | None = None
    estimated_monthly_payment: Decimal | None = None
    calculated_dti: Decimal | None = None
    income_verified: bool = False
    employment_verified: bool = False
    years_employed: int | None = None

    appraised_value: Decimal | None = None
    calculated_ltv: Decimal | None = None
    property_approved: bool = False
    title_clear: bool = False

    issues: list[str] = Field(default_factory=list)
    decision: UnderwritingDecision = UnderwritingDecision.PENDING
    notes: str = ""

    @property
    def issue_count(self) -> int:
        return len(self.issues)
