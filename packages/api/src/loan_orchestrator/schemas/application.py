# This project was developed with assistance from AI tools.
"""Application request/response schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from loan_db.enums import (
    ApplicationStatus,
    ApplicationType,
    ConditionStatus,
    ConditionType,
    DocumentStatus,
    DocumentType,
    LoanPurpose,
    UnderwritingDecision,
)
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination
from .gateway import CustomerProfile, LoanRecord, PaymentSchedule, PropertyRecord


class ApplicationCreate(BaseModel):
    """Start a new loan application in Draft."""

    customer_id: UUID
    property_id: UUID
    requested_loan_amount: Decimal = Field(gt=0)
    down_payment_amount: Decimal = Field(default=Decimal("0"), ge=0)
    requested_term_months: int = Field(gt=0, le=480)
    loan_purpose: LoanPurpose = LoanPurpose.PURCHASE
    application_type: ApplicationType = ApplicationType.PURCHASE
    notes: str | None = Field(default=None, max_length=1000)


class SubmitApplication(BaseModel):
    """Borrower attestation required to leave Draft."""

    accept_terms: bool = False
    authorize_credit_check: bool = False
    notes: str | None = Field(default=None, max_length=1000)


class WithdrawApplication(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class DecisionRequest(BaseModel):
    """Underwriter decision on an application."""

    approved: bool
    approved_amount: Decimal | None = Field(default=None, gt=0)
    interest_rate: Decimal | None = Field(default=None, ge=0, le=30)
    reason: str | None = Field(default=None, max_length=500)
    conditions: list[Annotated[str, Field(max_length=200)]] = []
    decided_by: str | None = Field(default=None, max_length=100)


class UnderwritingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    credit_score: int | None = None
    credit_rating: str | None = None
    credit_approved: bool
    gross_monthly_income: Decimal | None = None
    estimated_monthly_payment: Decimal | None = None
    calculated_dti: Decimal | None = None
    income_verified: bool
    appraised_value: Decimal | None = None
    calculated_ltv: Decimal | None = None
    property_approved: bool
    title_clear: bool
    employment_verified: bool
    years_employed: int | None = None
    decision: UnderwritingDecision
    underwriter_name: str | None = None
    decision_notes: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None


class StatusHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    from_status: ApplicationStatus
    to_status: ApplicationStatus
    reason: str | None = None
    changed_by: str | None = None
    changed_at: datetime


class DocumentCreate(BaseModel):
    document_name: str = Field(min_length=1, max_length=100)
    document_type: DocumentType
    notes: str | None = Field(default=None, max_length=500)


class DocumentStatusUpdate(BaseModel):
    status: DocumentStatus
    file_path: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=500)


class DocumentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: UUID
    document_name: str
    document_type: DocumentType
    file_path: str | None = None
    status: DocumentStatus
    requested_at: datetime | None = None
    received_at: datetime | None = None
    approved_at: datetime | None = None
    notes: str | None = None


class ConditionCreate(BaseModel):
    condition_name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    condition_type: ConditionType = ConditionType.PRIOR_TO_CLOSING
    due_date: datetime | None = None


class ConditionStatusUpdate(BaseModel):
    status: ConditionStatus
    notes: str | None = Field(default=None, max_length=500)


class ConditionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: UUID
    condition_name: str
    description: str | None = None
    condition_type: ConditionType
    status: ConditionStatus
    due_date: datetime | None = None
    satisfied_at: datetime | None = None
    notes: str | None = None


class ApplicationSummary(BaseModel):
    """Application row as shown in list views."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_number: str
    customer_id: UUID
    property_id: UUID
    loan_id: UUID | None = None
    requested_loan_amount: Decimal
    requested_term_months: int
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime


class ApplicationResponse(ApplicationSummary):
    """Full application with its owned records and dependency lookups."""

    down_payment_amount: Decimal
    loan_purpose: LoanPurpose
    application_type: ApplicationType
    ltv: Decimal | None = None
    dti: Decimal | None = None
    offered_interest_rate: Decimal | None = None
    approved_loan_amount: Decimal | None = None
    submitted_at: datetime | None = None
    underwriting_started_at: datetime | None = None
    decision_at: datetime | None = None
    closed_at: datetime | None = None
    decision_reason: str | None = None
    notes: str | None = None

    underwriting: UnderwritingResponse | None = None
    documents: list[DocumentItem] = []
    conditions: list[ConditionItem] = []

    customer: CustomerProfile | None = None
    property: PropertyRecord | None = None
    loan: LoanRecord | None = None


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationSummary]
    pagination: Pagination


class FundingResponse(BaseModel):
    """Outcome of the funding pipeline."""

    application: ApplicationResponse
    loan: LoanRecord
    funding_confirmed: bool
    payment_schedule: PaymentSchedule | None = None
    degraded_steps: list[str] = []
