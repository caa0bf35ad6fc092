"""
Upload API routes.
Handles HTTP endpoints for PDF submission and upload records.
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from src.core.auth_dependencies import get_current_actor
from src.core.dependencies import get_admin_service, get_deletion_service, get_upload_service
from src.core.exceptions import ValidationException
from src.models.actor import Actor
from src.models.dto.upload_dto import (
    DeleteResponse,
    UploadCreatedResponse,
    UploadListResponse,
    UploadRecordResponse,
    UploadUpdateRequest
)
from src.services.admin_service import AdminService
from src.services.authorization import require_actor
from src.services.deletion_service import DeletionService
from src.services.upload_service import UploadService

router = APIRouter(prefix="/v1/api", tags=["Uploads"])


def _parse_priority(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationException(f"priority must be an integer, got: {raw}")


@router.post("/uploads", response_model=UploadCreatedResponse, status_code=status.HTTP_201_CREATED)
async def upload_pdf(
    file: UploadFile = File(..., description="PDF document"),
    title: Optional[str] = Form(None),
    authors: Optional[str] = Form(None, description="Comma-separated author names"),
    abstract: Optional[str] = Form(None),
    priority: Optional[str] = Form(None, description="1 (most urgent) to 10"),
    upload_service: UploadService = Depends(get_upload_service),
    actor: Optional[Actor] = Depends(get_current_actor)
):
    """
    Upload a PDF for processing.

    The file is stored and tracked in pending status until a worker picks it up.
    """
    require_actor(actor)
    content = await file.read()

    record = upload_service.submit(
        file_bytes=content,
        content_type=file.content_type,
        actor=actor,
        filename=file.filename,
        size_bytes=len(content),
        title=title,
        authors=authors,
        abstract=abstract,
        priority=_parse_priority(priority)
    )
    return UploadCreatedResponse.from_record(record)


@router.get("/uploads", response_model=UploadListResponse)
async def list_uploads(
    owner_id: Optional[str] = Query(default=None, alias="ownerId", description="Defaults to the caller"),
    upload_service: UploadService = Depends(get_upload_service),
    actor: Optional[Actor] = Depends(get_current_actor)
):
    """List the caller's uploads, newest first."""
    records = upload_service.list_for_owner(actor, owner_id)
    uploads = [UploadRecordResponse.from_record(record) for record in records]
    return UploadListResponse(uploads=uploads, count=len(uploads))


@router.get("/uploads/{upload_id}", response_model=UploadRecordResponse)
async def get_upload(
    upload_id: str,
    upload_service: UploadService = Depends(get_upload_service),
    actor: Optional[Actor] = Depends(get_current_actor)
):
    """Get the processing status of one upload."""
    return UploadRecordResponse.from_record(upload_service.get_upload(actor, upload_id))


@router.patch("/uploads/{upload_id}", response_model=UploadRecordResponse)
async def update_upload(
    upload_id: str,
    request: UploadUpdateRequest,
    admin_service: AdminService = Depends(get_admin_service),
    actor: Optional[Actor] = Depends(get_current_actor)
):
    """
    Update status, error message or priority (administrators only).

    Only fields present in the body are changed; an empty error_message clears it.
    """
    record = admin_service.update_upload(actor, upload_id, request.explicit_changes())
    return UploadRecordResponse.from_record(record)


@router.delete("/uploads/{upload_id}", response_model=DeleteResponse)
async def delete_upload(
    upload_id: str,
    deletion_service: DeletionService = Depends(get_deletion_service),
    actor: Optional[Actor] = Depends(get_current_actor)
):
    """Delete an upload and its stored file (owner or administrator)."""
    deletion_service.delete(actor, upload_id)
    return DeleteResponse(success=True, message="Upload deleted")
