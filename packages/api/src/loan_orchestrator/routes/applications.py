# This project was developed with assistance from AI tools.
"""Loan application routes: bookkeeping plus the orchestrated workflow steps."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loan_db import Application, get_db
from loan_db.enums import ApplicationStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import Gateways, get_gateways
from ..core.clock import Clock, get_clock
from ..core.config import settings
from ..exceptions import (
    DependencyFailureError,
    InvalidStateError,
    NotFoundError,
    OrchestrationError,
)
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationSummary,
    ConditionCreate,
    ConditionItem,
    ConditionStatusUpdate,
    DecisionRequest,
    DocumentCreate,
    DocumentItem,
    DocumentStatusUpdate,
    FundingResponse,
    StatusHistoryItem,
    SubmitApplication,
    WithdrawApplication,
)
from ..schemas.gateway import CustomerProfile, LoanRecord, PropertyRecord
from ..services import application as app_service
from ..services.condition import add_condition, update_condition_status
from ..services.decision import record_decision
from ..services.document import add_document, update_document_status
from ..services.funding import fund_application
from ..services.orchestrator import start_underwriting

router = APIRouter()

_ERROR_STATUS: dict[type[OrchestrationError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    DependencyFailureError: status.HTTP_502_BAD_GATEWAY,
}


def _to_http(exc: OrchestrationError) -> HTTPException:
    code = _ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=str(exc))


def _build_app_response(
    app: Application,
    customer: CustomerProfile | None = None,
    property_record: PropertyRecord | None = None,
    loan: LoanRecord | None = None,
) -> ApplicationResponse:
    """ApplicationResponse from the ORM aggregate plus optional dependency lookups."""
    response = ApplicationResponse.model_validate(app)
    return response.model_copy(
        update={"customer": customer, "property": property_record, "loan": loan}
    )


@router.get("/", response_model=ApplicationListResponse)
async def list_applications(
    session: AsyncSession = Depends(get_db),
    customer_id: UUID | None = None,
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> ApplicationListResponse:
    """List applications, newest first."""
    applications, total = await app_service.list_applications(
        session,
        customer_id=customer_id,
        status=status_filter,
        offset=offset,
        limit=limit,
    )
    return ApplicationListResponse(
        data=[ApplicationSummary.model_validate(app) for app in applications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    response_model_by_alias=False,
)
async def get_application(
    application_id: UUID,
    session: AsyncSession = Depends(get_db),
    gateways: Gateways = Depends(get_gateways),
) -> ApplicationResponse:
    """Get a single application with customer, property and loan details."""
    app = await app_service.get_application(session, application_id)
    if app is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    customer, property_record, loan = await app_service.fetch_related_records(gateways, app)
    return _build_app_response(app, customer, property_record, loan)


@router.get("/{application_id}/history", response_model=list[StatusHistoryItem])
async def get_history(
    application_id: UUID,
    session: AsyncSession = Depends(get_db),
) -> list[StatusHistoryItem]:
    """Status transitions in chronological order."""
    history = await app_service.get_status_history(session, application_id)
    if history is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return [StatusHistoryItem.model_validate(entry) for entry in history]


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    response_model_by_alias=False,
)
async def create_application(
    body: ApplicationCreate,
    session: AsyncSession = Depends(get_db),
    gateways: Gateways = Depends(get_gateways),
    clock: Clock = Depends(get_clock),
) -> ApplicationResponse:
    """Create a Draft application for an existing customer and property."""
    try:
        app = await app_service.create_application(session, gateways, clock, body)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return _build_app_response(app)


@router.post("/{application_id}/submit", response_model=ApplicationResponse)
async def submit_application(
    application_id: UUID,
    body: SubmitApplication,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ApplicationResponse:
    """Submit a Draft application. Terms and credit authorisation are required."""
    if not body.accept_terms:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Terms and conditions must be accepted",
        )
    if not body.authorize_credit_check:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Credit check authorization is required",
        )
    try:
        app = await app_service.submit_application(session, clock, application_id, body.notes)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return _build_app_response(app)


@router.post("/{application_id}/underwrite", response_model=ApplicationResponse)
async def underwrite_application(
    application_id: UUID,
    session: AsyncSession = Depends(get_db),
    gateways: Gateways = Depends(get_gateways),
    clock: Clock = Depends(get_clock),
) -> ApplicationResponse:
    """Run automated underwriting against the dependency services."""
    try:
        app = await start_underwriting(session, gateways, clock, settings, application_id)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return _build_app_response(app)


@router.post("/{application_id}/decision", response_model=ApplicationResponse)
async def make_decision(
    application_id: UUID,
    body: DecisionRequest,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ApplicationResponse:
    """Record an approve/deny decision."""
    try:
        app = await record_decision(session, clock, application_id, body)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return _build_app_response(app)


@router.post(
    "/{application_id}/fund",
    response_model=FundingResponse,
    response_model_by_alias=False,
)
async def fund(
    application_id: UUID,
    session: AsyncSession = Depends(get_db),
    gateways: Gateways = Depends(get_gateways),
    clock: Clock = Depends(get_clock),
) -> FundingResponse:
    """Create, fund and schedule the loan for an approved application."""
    try:
        result = await fund_application(session, gateways, clock, settings, application_id)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return FundingResponse(
        application=_build_app_response(result.application, loan=result.loan),
        loan=result.loan,
        funding_confirmed=result.funding_confirmed,
        payment_schedule=result.payment_schedule,
        degraded_steps=result.degraded_steps,
    )


@router.post("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw(
    application_id: UUID,
    body: WithdrawApplication | None = None,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ApplicationResponse:
    """Withdraw a non-terminal application."""
    reason = body.reason if body else None
    try:
        app = await app_service.withdraw_application(session, clock, application_id, reason)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return _build_app_response(app)


@router.post(
    "/{application_id}/documents",
    response_model=DocumentItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_document(
    application_id: UUID,
    body: DocumentCreate,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DocumentItem:
    try:
        document = await add_document(session, clock, application_id, body)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return DocumentItem.model_validate(document)


@router.patch("/documents/{document_id}/status", response_model=DocumentItem)
async def set_document_status(
    document_id: UUID,
    body: DocumentStatusUpdate,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DocumentItem:
    document = await update_document_status(session, clock, document_id, body)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return DocumentItem.model_validate(document)


@router.post(
    "/{application_id}/conditions",
    response_model=ConditionItem,
    status_code=status.HTTP_201_CREATED,
)
async def create_condition(
    application_id: UUID,
    body: ConditionCreate,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ConditionItem:
    try:
        condition = await add_condition(session, clock, application_id, body)
    except OrchestrationError as exc:
        raise _to_http(exc) from exc
    return ConditionItem.model_validate(condition)


@router.patch("/conditions/{condition_id}/status", response_model=ConditionItem)
async def set_condition_status(
    condition_id: UUID,
    body: ConditionStatusUpdate,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ConditionItem:
    condition = await update_condition_status(session, clock, condition_id, body)
    if condition is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Condition not found",
        )
    return ConditionItem.model_validate(condition)
