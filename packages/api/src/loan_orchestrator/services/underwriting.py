# This project was developed with assistance from AI tools.
"""Automated underwriting decision engine.

Pure math, no I/O. Each rule contributes an independent issue flag; the
classification is a linear threshold on the number of issues:

    0 issues      -> Approved
    1 or 2 issues -> Approved with conditions
    3+ issues     -> Denied

Absent inputs degrade the result instead of failing it: missing credit or
title data counts as an issue, missing income skips the DTI rule, and a
missing property value skips the LTV rule.
"""

from datetime import date
from decimal import Decimal

from loan_db.enums import UnderwritingDecision

from ..schemas.gateway import Employment
from ..schemas.underwriting import (
    RequestedTerms,
    UnderwritingEvaluation,
    UnderwritingPolicy,
    UnderwritingSnapshot,
)

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")
_MONTHS_PER_YEAR = 12

APPROVE_MAX_ISSUES = 0
CONDITIONAL_MAX_ISSUES = 2


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT)


def calculate_monthly_payment(
    principal: Decimal,
    annual_rate_percent: Decimal,
    term_months: int,
) -> Decimal:
    """Fully-amortizing monthly payment, rounded to cents.

    ``P * r * (1 + r)^n / ((1 + r)^n - 1)`` with ``r`` the monthly rate.
    A zero rate spreads the principal evenly; a non-positive principal or
    term yields zero.
    """
    if term_months <= 0 or principal <= 0:
        return Decimal("0.00")

    monthly_rate = Decimal(annual_rate_percent) / _MONTHS_PER_YEAR / _HUNDRED
    if monthly_rate <= 0:
        return _round2(principal / term_months)

    compound = (1 + monthly_rate) ** term_months
    return _round2(principal * monthly_rate * compound / (compound - 1))


def calculate_dti(monthly_payment: Decimal, gross_monthly_income: Decimal) -> Decimal | None:
    """Payment as a percentage of gross monthly income; None without income."""
    if gross_monthly_income <= 0:
        return None
    return _round2(monthly_payment / gross_monthly_income * _HUNDRED)


def calculate_ltv(loan_amount: Decimal, property_value: Decimal | None) -> Decimal | None:
    """Loan amount as a percentage of property value; None without a value."""
    if property_value is None or property_value <= 0:
        return None
    return _round2(loan_amount / property_value * _HUNDRED)


def classify(issue_count: int) -> UnderwritingDecision:
    """Map an issue count onto an automated decision."""
    if issue_count <= APPROVE_MAX_ISSUES:
        return UnderwritingDecision.APPROVED
    if issue_count <= CONDITIONAL_MAX_ISSUES:
        return UnderwritingDecision.APPROVED_WITH_CONDITIONS
    return UnderwritingDecision.DENIED


def current_employment(employments: list[Employment] | None) -> Employment | None:
    """Most recent employment flagged current, by start date."""
    current = [e for e in employments or [] if e.is_current]
    if not current:
        return None
    return max(current, key=lambda e: e.start_date or date.min)


def evaluate_underwriting(
    terms: RequestedTerms,
    snapshot: UnderwritingSnapshot,
    policy: UnderwritingPolicy | None = None,
) -> UnderwritingEvaluation:
    """Run every underwriting rule over the gathered snapshot."""
    policy = policy or UnderwritingPolicy()
    result = UnderwritingEvaluation()
    issues: list[str] = []

    # Credit
    if snapshot.credit is not None:
        result.credit_score = snapshot.credit.credit_score
        result.credit_rating = snapshot.credit.credit_rating or None
        result.credit_approved = snapshot.credit.credit_score >= policy.min_credit_score
    if not result.credit_approved:
        if snapshot.credit is None:
            issues.append("Credit report unavailable")
        else:
            issues.append(
                f"Credit score {snapshot.credit.credit_score} below minimum "
                f"{policy.min_credit_score}"
            )

    # Income and DTI
    employment = current_employment(snapshot.employments)
    if employment is not None:
        result.employment_verified = True
        result.years_employed = employment.years_employed
        monthly_income = Decimal(employment.annual_income) / _MONTHS_PER_YEAR
        result.gross_monthly_income = _round2(monthly_income)
        result.income_verified = monthly_income > 0

        if monthly_income > 0:
            payment = calculate_monthly_payment(
                terms.requested_loan_amount,
                policy.reference_rate,
                terms.requested_term_months,
            )
            result.estimated_monthly_payment = payment
            result.calculated_dti = calculate_dti(payment, monthly_income)
            if result.calculated_dti is not None and result.calculated_dti > policy.max_dti:
                issues.append(
                    f"DTI {result.calculated_dti}% exceeds maximum {policy.max_dti}%"
                )

    # Property value and LTV -- appraisal wins over the estimate
    value: Decimal | None = None
    if snapshot.appraisal is not None and snapshot.appraisal.appraised_value > 0:
        value = snapshot.appraisal.appraised_value
        result.property_approved = snapshot.appraisal.status.lower() == "completed"
    elif snapshot.property is not None and snapshot.property.estimated_value > 0:
        value = snapshot.property.estimated_value
    result.appraised_value = value
    result.calculated_ltv = calculate_ltv(terms.requested_loan_amount, value)
    if result.calculated_ltv is not None and result.calculated_ltv > policy.max_ltv:
        issues.append(f"LTV {result.calculated_ltv}% exceeds maximum {policy.max_ltv}%")

    # Title -- absence fails closed
    result.title_clear = snapshot.title is not None and snapshot.title.is_clear
    if not result.title_clear:
        issues.append(
            "Title search unavailable" if snapshot.title is None else "Title is not clear"
        )

    result.issues = issues
    result.decision = classify(len(issues))
    result.notes = _build_notes(result)
    return result


def _build_notes(result: UnderwritingEvaluation) -> str:
    label = result.decision.value.replace("_", " ")
    if not result.issues:
        return f"Automated underwriting: {label}. No issues found."
    return (
        f"Automated underwriting: {label}. "
        f"{len(result.issues)} issue(s): {'; '.join(result.issues)}."
    )
