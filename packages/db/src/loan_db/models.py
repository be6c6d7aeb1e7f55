# This project was developed with assistance from AI tools.
"""
Loan application orchestrator -- domain models

The Application aggregate owns its underwriting record, status history,
documents and conditions. Customer, property, loan and payment records live
in their own services and are referenced here by id only.
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
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


class Application(Base):
    """Loan application -- the aggregate root."""

    __tablename__ = "applications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_number = Column(String(20), unique=True, nullable=False, index=True)
    customer_id = Column(Uuid, nullable=False, index=True)
    property_id = Column(Uuid, nullable=False, index=True)
    loan_id = Column(Uuid, nullable=True)

    requested_loan_amount = Column(Numeric(18, 2), nullable=False)
    down_payment_amount = Column(Numeric(18, 2), nullable=False, default=0)
    requested_term_months = Column(Integer, nullable=False)
    loan_purpose = Column(
        Enum(LoanPurpose, name="loan_purpose", native_enum=False),
        nullable=False,
    )
    application_type = Column(
        Enum(ApplicationType, name="application_type", native_enum=False),
        nullable=False,
        default=ApplicationType.PURCHASE,
    )
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )

    ltv = Column(Numeric(18, 2), nullable=True)
    dti = Column(Numeric(18, 2), nullable=True)
    offered_interest_rate = Column(Numeric(5, 3), nullable=True)
    approved_loan_amount = Column(Numeric(18, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    underwriting_started_at = Column(DateTime(timezone=True), nullable=True)
    decision_at = Column(DateTime(timezone=True), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    decision_reason = Column(String(500), nullable=True)
    notes = Column(String(1000), nullable=True)

    underwriting = relationship(
        "Underwriting", back_populates="application", uselist=False,
        cascade="all, delete-orphan",
    )
    status_history = relationship(
        "ApplicationStatusHistory", back_populates="application",
        cascade="all, delete-orphan",
        order_by="[ApplicationStatusHistory.changed_at, ApplicationStatusHistory.position]",
    )
    documents = relationship(
        "ApplicationDocument", back_populates="application", cascade="all, delete-orphan",
    )
    conditions = relationship(
        "ApplicationCondition", back_populates="application", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Application(number='{self.application_number}', status='{self.status}')>"


class Underwriting(Base):
    """Automated underwriting evaluation -- at most one per application."""

    __tablename__ = "underwritings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )

    credit_score = Column(Integer, nullable=True)
    credit_rating = Column(String(20), nullable=True)
    credit_approved = Column(Boolean, nullable=False, default=False)

    gross_monthly_income = Column(Numeric(18, 2), nullable=True)
    estimated_monthly_payment = Column(Numeric(18, 2), nullable=True)
    calculated_dti = Column(Numeric(18, 2), nullable=True)
    income_verified = Column(Boolean, nullable=False, default=False)

    appraised_value = Column(Numeric(18, 2), nullable=True)
    calculated_ltv = Column(Numeric(18, 2), nullable=True)
    property_approved = Column(Boolean, nullable=False, default=False)
    title_clear = Column(Boolean, nullable=False, default=False)

    employment_verified = Column(Boolean, nullable=False, default=False)
    years_employed = Column(Integer, nullable=True)

    decision = Column(
        Enum(UnderwritingDecision, name="underwriting_decision", native_enum=False),
        nullable=False,
        default=UnderwritingDecision.PENDING,
    )
    underwriter_name = Column(String(50), nullable=True)
    decision_notes = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    application = relationship("Application", back_populates="underwriting")

    def __repr__(self):
        return f"<Underwriting(app_id={self.application_id}, decision='{self.decision}')>"


class ApplicationStatusHistory(Base):
    """Append-only status transition log. INSERT + SELECT only."""

    __tablename__ = "application_status_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
    )
    to_status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
    )
    reason = Column(String(500), nullable=True)
    changed_by = Column(String(100), nullable=True)
    # 1-based insertion order within the application; breaks changed_at ties
    position = Column(Integer, nullable=False, default=0)
    changed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="status_history")

    def __repr__(self):
        return f"<ApplicationStatusHistory({self.from_status} -> {self.to_status})>"


class ApplicationDocument(Base):
    """Document requested from or supplied by the borrower."""

    __tablename__ = "application_documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    document_name = Column(String(100), nullable=False)
    document_type = Column(
        Enum(DocumentType, name="document_type", native_enum=False),
        nullable=False,
    )
    file_path = Column(String(500), nullable=True)
    status = Column(
        Enum(DocumentStatus, name="document_status", native_enum=False),
        nullable=False,
        default=DocumentStatus.REQUIRED,
    )
    requested_at = Column(DateTime(timezone=True), nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="documents")

    def __repr__(self):
        return f"<ApplicationDocument(type='{self.document_type}', status='{self.status}')>"


class ApplicationCondition(Base):
    """Underwriting condition on an application."""

    __tablename__ = "application_conditions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id = Column(
        Uuid, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    condition_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    condition_type = Column(
        Enum(ConditionType, name="condition_type", native_enum=False),
        nullable=False,
    )
    status = Column(
        Enum(ConditionStatus, name="condition_status", native_enum=False),
        nullable=False,
        default=ConditionStatus.PENDING,
    )
    due_date = Column(DateTime(timezone=True), nullable=True)
    satisfied_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="conditions")

    def __repr__(self):
        return f"<ApplicationCondition(name='{self.condition_name}', status='{self.status}')>"


class ApplicationNumberSequence(Base):
    """Per-year counter backing APP-<year>-<seq> application numbers."""

    __tablename__ = "application_number_sequences"

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<ApplicationNumberSequence(year={self.year}, last={self.last_value})>"
