# This project was developed with assistance from AI tools.
"""Document checklist bookkeeping for an application."""

import logging
from uuid import UUID

from loan_db import ApplicationDocument
from loan_db.enums import DocumentStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock
from ..schemas.application import DocumentCreate, DocumentStatusUpdate
from .application import require_application

logger = logging.getLogger(__name__)


async def add_document(
    session: AsyncSession,
    clock: Clock,
    application_id: UUID,
    data: DocumentCreate,
) -> ApplicationDocument:
    """Request a new document from the borrower."""
    application = await require_application(session, application_id)
    now = clock.now()
    document = ApplicationDocument(
        application_id=application.id,
        document_name=data.document_name,
        document_type=data.document_type,
        status=DocumentStatus.REQUIRED,
        requested_at=now,
        notes=data.notes,
        created_at=now,
    )
    session.add(document)
    await session.commit()
    await session.refresh(document)
    logger.info(
        "Document '%s' requested for application %s",
        data.document_name,
        application.application_number,
    )
    return document


async def update_document_status(
    session: AsyncSession,
    clock: Clock,
    document_id: UUID,
    data: DocumentStatusUpdate,
) -> ApplicationDocument | None:
    """Set a document's status; returns None for an unknown id."""
    document = await session.get(ApplicationDocument, document_id)
    if document is None:
        return None

    now = clock.now()
    document.status = data.status
    if data.status == DocumentStatus.RECEIVED and document.received_at is None:
        document.received_at = now
    elif data.status == DocumentStatus.APPROVED and document.approved_at is None:
        document.approved_at = now
    if data.file_path is not None:
        document.file_path = data.file_path
    if data.notes is not None:
        document.notes = data.notes

    await session.commit()
    await session.refresh(document)
    return document
