"""
Complaint API endpoints.

Constituents file, list and delete their complaints; the assigned
representative lists, updates and responds to them. Either party can view
or export a complaint.
"""

from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from api.deps import (
    CurrentClaims,
    CurrentConstituent,
    CurrentRepresentative,
    Pagination,
    get_complaint_service,
)
from models.cosmos_documents import ComplaintCategory, ComplaintStatus
from repositories.cosmos_complaint_repository import ComplaintFilters
from schemas.complaint import ComplaintListResponse, ComplaintResponse, ComplaintUpdate, DateFilter
from services.attachment_storage import read_uploads
from services.complaint_service import ComplaintService

logger = structlog.get_logger(__name__)

router = APIRouter()

ComplaintServiceDep = Annotated[ComplaintService, Depends(get_complaint_service)]


def get_complaint_filters(
    title: Optional[str] = Query(None, max_length=200, description="Case-insensitive title search"),
    category: Optional[ComplaintCategory] = Query(None),
    complaint_status: Optional[ComplaintStatus] = Query(None, alias="status"),
    date_filter: Optional[DateFilter] = Query(None, description="today, this-week, this-month or this-year"),
) -> ComplaintFilters:
    return ComplaintFilters(
        title=title or None,
        category=category.value if category else None,
        status=complaint_status.value if complaint_status else None,
        date_filter=date_filter,
    )


FiltersDep = Annotated[ComplaintFilters, Depends(get_complaint_filters)]


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    claims: CurrentConstituent,
    complaint_service: ComplaintServiceDep,
    title: str = Form(..., min_length=1, max_length=200),
    description: str = Form(..., min_length=1, max_length=5000),
    category: ComplaintCategory = Form(...),
    attachments: Optional[list[UploadFile]] = File(None, description="Up to three files"),
) -> ComplaintResponse:
    """
    File a complaint with the caller's representative.

    Accepts multipart form data with optional file attachments.
    """
    pending = await read_uploads(attachments or [])
    complaint = await complaint_service.submit(claims, title, description, category, pending)
    return ComplaintResponse.model_validate(complaint)


@router.get("/representative", response_model=ComplaintListResponse)
async def list_representative_complaints(
    claims: CurrentRepresentative,
    complaint_service: ComplaintServiceDep,
    filters: FiltersDep,
    pagination: Annotated[Pagination, Depends()],
) -> ComplaintListResponse:
    """List complaints assigned to the caller, newest first."""
    return await complaint_service.list_for_representative(
        claims, filters, page=pagination.page, per_page=pagination.per_page
    )


@router.get("/constituent", response_model=ComplaintListResponse)
async def list_constituent_complaints(
    claims: CurrentConstituent,
    complaint_service: ComplaintServiceDep,
    filters: FiltersDep,
    pagination: Annotated[Pagination, Depends()],
) -> ComplaintListResponse:
    """List complaints filed by the caller, newest first."""
    return await complaint_service.list_for_constituent(
        claims, filters, page=pagination.page, per_page=pagination.per_page
    )


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    claims: CurrentClaims,
    complaint_service: ComplaintServiceDep,
) -> ComplaintResponse:
    """Get a complaint the caller filed or is assigned to."""
    return await complaint_service.get_by_id(complaint_id, claims)


@router.put("/{complaint_id}", response_model=ComplaintResponse)
async def update_complaint(
    complaint_id: str,
    update: ComplaintUpdate,
    claims: CurrentRepresentative,
    complaint_service: ComplaintServiceDep,
) -> ComplaintResponse:
    """Update status and/or response. Resolved and rejected complaints cannot be changed."""
    complaint = await complaint_service.update(
        complaint_id,
        claims,
        status=update.status,
        response=update.response,
    )
    return ComplaintResponse.model_validate(complaint)


@router.delete("/{complaint_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_complaint(
    complaint_id: str,
    claims: CurrentConstituent,
    complaint_service: ComplaintServiceDep,
) -> Response:
    """Delete a complaint the caller filed."""
    await complaint_service.delete(complaint_id, claims)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{complaint_id}/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_complaint_pdf(
    complaint_id: str,
    claims: CurrentClaims,
    complaint_service: ComplaintServiceDep,
) -> Response:
    """Download a complaint as a PDF document."""
    content = await complaint_service.export_pdf(complaint_id, claims)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="complaint-{complaint_id}.pdf"'},
    )
