"""
Upload Record domain model.
Database-agnostic representation of one submitted document and its processing state.
"""
from datetime import datetime, timezone
from typing import List, Optional
from src.models.upload_status import UploadStatus


def utcnow() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


class UploadRecord:
    """Domain model for upload tracking."""

    def __init__(
        self,
        upload_id: str,
        owner_id: str,
        original_filename: str,
        size_bytes: int,
        storage_key: Optional[str] = None,
        storage_locator: Optional[str] = None,
        status: UploadStatus = UploadStatus.PENDING,
        error_message: Optional[str] = None,
        extracted_title: Optional[str] = None,
        extracted_authors: Optional[List[str]] = None,
        extracted_abstract: Optional[str] = None,
        priority: int = 5,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        version: int = 1
    ):
        self.upload_id = upload_id
        self.owner_id = owner_id
        self.original_filename = original_filename
        self.size_bytes = size_bytes
        self.storage_key = storage_key
        self.storage_locator = storage_locator
        self.status = UploadStatus(status)
        self.error_message = error_message
        self.extracted_title = extracted_title
        self.extracted_authors = extracted_authors
        self.extracted_abstract = extracted_abstract
        self.priority = priority
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at
        self.version = version

    def __repr__(self):
        return (
            f"UploadRecord(upload_id={self.upload_id}, owner_id={self.owner_id}, "
            f"status={self.status.value}, priority={self.priority})"
        )
