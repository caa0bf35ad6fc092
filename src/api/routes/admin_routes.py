"""
Admin API routes.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from src.core import config
from src.core.auth_dependencies import get_current_actor
from src.core.dependencies import get_admin_service
from src.models.actor import Actor
from src.models.dto.upload_dto import AdminUploadListResponse, AdminUploadResponse
from src.models.upload_status import UploadStatus
from src.services.admin_service import AdminService

router = APIRouter(prefix="/v1/api/admin", tags=["Admin"])


@router.get("/uploads", response_model=AdminUploadListResponse)
async def list_all_uploads(
    status: Optional[UploadStatus] = Query(default=None, description="Filter by status"),
    limit: Optional[int] = Query(default=None, description="Page size"),
    offset: int = Query(default=0, description="Records to skip"),
    admin_service: AdminService = Depends(get_admin_service),
    actor: Optional[Actor] = Depends(get_current_actor)
):
    """
    List uploads of all users in processing order (priority, then age).

    - **status**: pending, processing, completed or failed
    - **limit** / **offset**: offset pagination
    """
    rows = admin_service.list_all(actor, status=status, limit=limit, offset=offset)
    uploads = [AdminUploadResponse.from_record_and_owner(record, owner) for record, owner in rows]
    return AdminUploadListResponse(
        uploads=uploads,
        count=len(uploads),
        limit=limit if limit is not None else config.settings.pagination_default_limit,
        offset=offset
    )
