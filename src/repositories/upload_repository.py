"""
Abstract base class for upload record repositories.
Defines the contract for upload tracking storage operations.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from src.models.upload_record import UploadRecord
from src.models.upload_status import UploadStatus


class UploadRepository(ABC):
    """Abstract repository interface for upload records."""

    @abstractmethod
    def create(self, record: UploadRecord) -> None:
        """Persist a new record; an existing id raises ConflictException."""
        pass

    @abstractmethod
    def get_by_id(self, upload_id: str) -> Optional[UploadRecord]:
        """Fetch one record, or None if it does not exist."""
        pass

    @abstractmethod
    def get_by_owner(self, owner_id: str) -> List[UploadRecord]:
        """All records of one owner, newest first."""
        pass

    @abstractmethod
    def list_for_processing(
        self,
        status: Optional[UploadStatus] = None,
        limit: int = 10,
        offset: int = 0
    ) -> List[UploadRecord]:
        """Records in queue order: priority ascending, then created_at ascending."""
        pass

    @abstractmethod
    def update(
        self,
        upload_id: str,
        changes: dict,
        expected_version: Optional[int] = None,
        expected_status: Optional[UploadStatus] = None
    ) -> UploadRecord:
        """
        Apply only the given fields; None clears a field. Returns the updated record.
        A mismatching expected_version or expected_status raises ConflictException.
        """
        pass

    @abstractmethod
    def delete(self, upload_id: str) -> None:
        """Remove one record; a missing record raises UploadNotFoundException."""
        pass
