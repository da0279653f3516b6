# This project was developed with assistance from AI tools.
"""Permit application (permohonan) routes.

Thin HTTP layer over ``ApplicationLifecycle``: parse, delegate, shape the
response. Domain errors propagate to the handlers in ``main.py``.
"""

import math
from datetime import UTC, date, datetime, time
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from permit_db import get_db
from permit_db.enums import ApplicationStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..middleware.auth import CurrentActor
from ..schemas import PageMeta
from ..schemas.application import (
    ApplicationCreate,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    CancelRequest,
)
from ..schemas.completeness import CompletenessResponse
from ..schemas.document import DocumentResponse
from ..services.application import ApplicationLifecycle
from ..services.document import DocumentPolicy, UploadedFile
from ..services.events import get_event_dispatcher
from ..services.repository import ApplicationFilters, SqlAlchemyUnitOfWork
from ..services.requirements import get_requirement_registry
from ..services.storage import get_storage_service

router = APIRouter()


def get_lifecycle(session: AsyncSession = Depends(get_db)) -> ApplicationLifecycle:
    """Build the lifecycle engine over the request's database session."""
    return ApplicationLifecycle(
        uow=SqlAlchemyUnitOfWork(session),
        registry=get_requirement_registry(),
        storage=get_storage_service(),
        events=get_event_dispatcher(),
        policy=DocumentPolicy.from_settings(settings),
    )


Lifecycle = Annotated[ApplicationLifecycle, Depends(get_lifecycle)]


def _day_start(value: date | None) -> datetime | None:
    return datetime.combine(value, time.min, tzinfo=UTC) if value else None


def _day_end(value: date | None) -> datetime | None:
    return datetime.combine(value, time.max, tzinfo=UTC) if value else None


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    actor: CurrentActor,
    lifecycle: Lifecycle,
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    jenis_lesen_id: int | None = Query(default=None),
    tarikh_dari: date | None = Query(default=None, description="Submitted on or after"),
    tarikh_hingga: date | None = Query(default=None, description="Submitted on or before"),
    per_page: int = Query(default=15, ge=1, le=100),
    page: int = Query(default=1, ge=1),
) -> ApplicationListResponse:
    """List the caller's applications, newest first."""
    filters = ApplicationFilters(
        status=status_filter,
        license_type_id=jenis_lesen_id,
        submitted_from=_day_start(tarikh_dari),
        submitted_to=_day_end(tarikh_hingga),
    )
    items, total = await lifecycle.list_for_owner(actor, filters, page=page, per_page=per_page)
    first = (page - 1) * per_page + 1 if items else None
    return ApplicationListResponse(
        data=[ApplicationResponse.model_validate(app) for app in items],
        meta=PageMeta(
            current_page=page,
            last_page=max(1, math.ceil(total / per_page)),
            per_page=per_page,
            total=total,
            from_=first,
            to=first + len(items) - 1 if first else None,
        ),
    )


@router.post("", response_model=ApplicationDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    body: ApplicationCreate,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> ApplicationDetailResponse:
    application = await lifecycle.create(actor, body)
    return ApplicationDetailResponse.model_validate(application)


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> ApplicationDetailResponse:
    application = await lifecycle.view(actor, application_id)
    return ApplicationDetailResponse.model_validate(application)


@router.put("/{application_id}", response_model=ApplicationDetailResponse)
async def update_application(
    application_id: int,
    body: ApplicationUpdate,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> ApplicationDetailResponse:
    application = await lifecycle.update(actor, application_id, body)
    return ApplicationDetailResponse.model_validate(application)


@router.post("/{application_id}/submit", response_model=ApplicationDetailResponse)
async def submit_application(
    application_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> ApplicationDetailResponse:
    """Submit a complete draft. Incomplete drafts get a 422 listing what is missing."""
    application = await lifecycle.submit(actor, application_id)
    return ApplicationDetailResponse.model_validate(application)


@router.post("/{application_id}/cancel", response_model=ApplicationDetailResponse)
async def cancel_application(
    application_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
    body: CancelRequest | None = None,
) -> ApplicationDetailResponse:
    reason = body.reason if body else None
    application = await lifecycle.cancel(actor, application_id, reason)
    return ApplicationDetailResponse.model_validate(application)


@router.get("/{application_id}/completeness", response_model=CompletenessResponse)
async def get_completeness(
    application_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> CompletenessResponse:
    """Which mandatory requirements still lack a document, and any structural gaps."""
    result = await lifecycle.completeness(actor, application_id)
    return result.to_response(application_id)


@router.post(
    "/{application_id}/dokumen",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    application_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
    keperluan_dokumen_id: int = Form(...),
    file: UploadFile = File(...),
) -> DocumentResponse:
    """Upload into a requirement slot, replacing the slot's current document."""
    uploaded = UploadedFile(
        filename=file.filename or "document",
        content_type=file.content_type or "",
        data=await file.read(),
    )
    document = await lifecycle.upload_document(
        actor, application_id, keperluan_dokumen_id, uploaded
    )
    return DocumentResponse.model_validate(document)


@router.get("/{application_id}/dokumen/{document_id}/content")
async def download_document(
    application_id: int,
    document_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> Response:
    document, data = await lifecycle.download_document(actor, application_id, document_id)
    return Response(
        content=data,
        media_type=document.mime_type,
        headers={"Content-Disposition": _content_disposition(document.filename)},
    )


def _content_disposition(filename: str) -> str:
    """Attachment header; RFC 5987 ``filename*`` when the name is not plain ASCII."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.delete(
    "/{application_id}/dokumen/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_document(
    application_id: int,
    document_id: int,
    actor: CurrentActor,
    lifecycle: Lifecycle,
) -> Response:
    await lifecycle.delete_document(actor, application_id, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
