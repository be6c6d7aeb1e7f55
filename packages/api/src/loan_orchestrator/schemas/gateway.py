# This project was developed with assistance from AI tools.
"""Records exchanged with the customer, property, loan and payment services."""

from datetime import date, datetime
from decimal import Decimal
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import Field

from . import CamelModel

T = TypeVar("T")


class ServiceEnvelope(CamelModel, Generic[T]):
    """Response wrapper every dependency service returns."""

    success: bool = False
    data: T | None = None
    message: str = ""


# -- Customer service --


class CustomerProfile(CamelModel):
    id: UUID
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    email: str = ""
    phone: str = ""
    age: int | None = None


class CreditReport(CamelModel):
    credit_score: int
    credit_rating: str = ""
    total_debt: Decimal = Decimal("0")
    available_credit: Decimal = Decimal("0")


class Employment(CamelModel):
    employer_name: str = ""
    job_title: str | None = None
    annual_income: Decimal
    years_employed: int | None = None
    is_current: bool = False
    start_date: date | None = None


# -- Property service --


class PropertyRecord(CamelModel):
    id: UUID
    full_address: str = ""
    property_type: str = ""
    estimated_value: Decimal
    listing_price: Decimal | None = None
    year_built: int | None = None
    square_feet: Decimal | None = None


class Appraisal(CamelModel):
    appraised_value: Decimal
    appraisal_date: datetime | None = None
    status: str = ""


class TitleSearch(CamelModel):
    is_clear: bool
    status: str = ""
    has_liens: bool = False


# -- Loan service --


class LoanRecord(CamelModel):
    id: UUID
    loan_number: str = ""
    customer_id: UUID | None = None
    property_id: UUID | None = None
    principal_amount: Decimal = Decimal("0")
    interest_rate: Decimal = Decimal("0")
    term_months: int = 0
    status: str = ""
    monthly_payment: Decimal = Decimal("0")


class CreateLoanRequest(CamelModel):
    customer_id: UUID
    property_id: UUID
    principal_amount: Decimal
    interest_rate: Decimal
    term_months: int
    loan_type: int = Field(default=1, description="1 = conventional")
    down_payment: Decimal | None = None


class FundLoanRequest(CamelModel):
    funding_date: datetime
    first_payment_date: datetime


# -- Payment service --


class PaymentSchedule(CamelModel):
    id: UUID
    loan_id: UUID
    is_auto_pay: bool = False
    next_payment_date: datetime | None = None
    regular_payment_amount: Decimal = Decimal("0")


class CreateScheduleRequest(CamelModel):
    loan_id: UUID
    customer_id: UUID
    is_auto_pay: bool = True
    payment_day_of_month: int = 1
    regular_payment_amount: Decimal
