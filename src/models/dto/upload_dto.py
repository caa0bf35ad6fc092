"""
Data Transfer Objects for the Upload API.
Defines request and response schemas for API endpoints.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field
from src.models.upload_record import UploadRecord
from src.models.upload_status import UploadStatus


class UploadCreatedResponse(BaseModel):
    """Response schema for a successful PDF submission."""
    id: str = Field(..., description="Unique identifier for the upload")
    filename: str = Field(..., description="Original filename")
    size: int = Field(..., description="File size in bytes")
    status: UploadStatus = Field(..., description="Processing status")
    url: str = Field(..., description="Public URL of the stored PDF")

    @classmethod
    def from_record(cls, record: UploadRecord) -> "UploadCreatedResponse":
        return cls(
            id=record.upload_id,
            filename=record.original_filename,
            size=record.size_bytes,
            status=record.status,
            url=record.storage_locator
        )


class UploadRecordResponse(BaseModel):
    """Response schema for an upload record."""
    id: str
    owner_id: str
    original_filename: str
    size_bytes: int
    storage_locator: Optional[str] = None
    status: UploadStatus
    error_message: Optional[str] = None
    extracted_title: Optional[str] = None
    extracted_authors: Optional[List[str]] = None
    extracted_abstract: Optional[str] = None
    priority: int
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_record(cls, record: UploadRecord) -> "UploadRecordResponse":
        return cls(
            id=record.upload_id,
            owner_id=record.owner_id,
            original_filename=record.original_filename,
            size_bytes=record.size_bytes,
            storage_locator=record.storage_locator,
            status=record.status,
            error_message=record.error_message,
            extracted_title=record.extracted_title,
            extracted_authors=record.extracted_authors,
            extracted_abstract=record.extracted_abstract,
            priority=record.priority,
            created_at=record.created_at,
            updated_at=record.updated_at,
            version=record.version
        )


class UploadListResponse(BaseModel):
    """Response schema for an owner's uploads."""
    uploads: List[UploadRecordResponse]
    count: int


class OwnerSummary(BaseModel):
    """Minimal owner identity shown in admin listings."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class AdminUploadResponse(UploadRecordResponse):
    """Upload record joined with its owner's identity."""
    owner: OwnerSummary

    @classmethod
    def from_record_and_owner(cls, record: UploadRecord, owner: dict) -> "AdminUploadResponse":
        base = UploadRecordResponse.from_record(record)
        return cls(**base.model_dump(), owner=OwnerSummary(**owner))


class AdminUploadListResponse(BaseModel):
    """Paginated admin listing."""
    uploads: List[AdminUploadResponse]
    count: int
    limit: int
    offset: int


class UploadUpdateRequest(BaseModel):
    """
    Partial update sent by an administrator.
    Only fields present in the request body are applied.
    """
    status: Optional[UploadStatus] = Field(default=None, description="Target status")
    error_message: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("error_message", "errorMessage"),
        description="Failure reason; empty string clears it"
    )
    priority: Optional[int] = Field(default=None, description="Processing priority, 1 is most urgent")
    expected_version: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("expected_version", "expectedVersion"),
        description="Optimistic concurrency check"
    )

    def explicit_changes(self) -> dict:
        """Fields the client actually sent, including explicit nulls and empty strings."""
        return self.model_dump(exclude_unset=True)


class DeleteResponse(BaseModel):
    """Response schema for a successful delete."""
    success: bool = True
    message: str = "Upload deleted"
