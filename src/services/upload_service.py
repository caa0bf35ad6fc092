"""
Upload Service for business logic.
Orchestrates PDF intake and owner-scoped views between the API and repositories.
"""
import logging
import time
import uuid
from typing import Callable, List, Optional, Sequence, Union
from src.core import config
from src.core.exceptions import (
    ConflictException,
    DatabaseException,
    StorageException,
    UploadNotFoundException,
    ValidationException
)
from src.core.retry import RetryPolicy
from src.models.actor import Actor
from src.models.upload_record import UploadRecord
from src.models.upload_status import UploadStatus
from src.repositories.blob_repository import BlobRepository
from src.repositories.upload_repository import UploadRepository
from src.services.authorization import can_access, require_actor, require_owner_scope

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    "application/pdf": "pdf",
}


class UploadService:
    """Service for upload intake and owner views."""

    def __init__(
        self,
        blob_repository: BlobRepository,
        upload_repository: UploadRepository,
        retry_policy: RetryPolicy = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.blob_repository = blob_repository
        self.upload_repository = upload_repository
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    def submit(
        self,
        file_bytes: bytes,
        content_type: str,
        actor: Optional[Actor],
        filename: str,
        size_bytes: Optional[int] = None,
        title: Optional[str] = None,
        authors: Union[str, Sequence[str], None] = None,
        abstract: Optional[str] = None,
        priority: Optional[int] = None
    ) -> UploadRecord:
        """
        Handle the PDF intake workflow.

        Steps run in order: validate, write the blob to the pending namespace,
        create the tracking record. A failed record write triggers a
        compensating blob delete.

        Args:
            file_bytes: PDF content
            content_type: MIME type reported by the client
            actor: Submitting user; becomes the record owner
            filename: Original filename (informational only)
            size_bytes: Declared size, defaults to len(file_bytes)
            title, authors, abstract: Optional metadata hints
            priority: Processing priority, 1 is most urgent

        Returns:
            The created UploadRecord in pending status

        Raises:
            UnauthorizedException: If there is no actor
            ValidationException: If type, size or priority is invalid
            StorageException: If the blob write fails (no record is written)
            DatabaseException: If the record write fails after retries
        """
        actor = require_actor(actor)
        size_bytes = len(file_bytes) if size_bytes is None else size_bytes
        self.validate_file(content_type, size_bytes, file_bytes)
        priority = self.validate_priority(priority)

        upload_id = str(uuid.uuid4())
        storage_key = self.build_storage_key(upload_id, content_type)

        locator = self.blob_repository.put_object(storage_key, file_bytes, content_type)

        record = UploadRecord(
            upload_id=upload_id,
            owner_id=actor.id,
            original_filename=filename or "upload.pdf",
            size_bytes=size_bytes,
            storage_key=storage_key,
            storage_locator=locator,
            status=UploadStatus.PENDING,
            extracted_title=(title or "").strip() or None,
            extracted_authors=self.parse_authors(authors),
            extracted_abstract=(abstract or "").strip() or None,
            priority=priority
        )

        try:
            created = self._create_with_retry(record)
        except DatabaseException:
            self._compensate_blob_write(storage_key)
            raise

        logger.info("Accepted upload %s from %s (%d bytes)", upload_id, actor.id, size_bytes)
        return created

    def list_for_owner(self, actor: Optional[Actor], owner_id: Optional[str] = None) -> List[UploadRecord]:
        """
        List uploads of one owner, newest first.

        Raises:
            UnauthorizedException: If there is no actor
            ForbiddenException: If a non-admin asks for another owner
        """
        owner_id = require_owner_scope(actor, owner_id)
        return self.upload_repository.get_by_owner(owner_id)

    def get_upload(self, actor: Optional[Actor], upload_id: str) -> UploadRecord:
        """
        Get one upload visible to the actor.

        Raises:
            UnauthorizedException: If there is no actor
            UploadNotFoundException: If missing or owned by someone else
        """
        actor = require_actor(actor)
        record = self.upload_repository.get_by_id(upload_id)
        if record is None or not can_access(actor, record):
            raise UploadNotFoundException(f"Upload '{upload_id}' not found")
        return record

    def validate_file(self, content_type: str, size_bytes: int, file_bytes: bytes) -> None:
        """Reject wrong types, empty files and files over the size ceiling."""
        accepted = config.settings.accepted_content_type
        if self._normalize_content_type(content_type) != accepted:
            raise ValidationException(f"Unsupported file type '{content_type}', only {accepted} is accepted")
        if size_bytes <= 0 or not file_bytes:
            raise ValidationException("File is empty")
        if size_bytes > config.settings.max_file_size_bytes or len(file_bytes) > config.settings.max_file_size_bytes:
            raise ValidationException(
                f"File size ({size_bytes / (1024 * 1024):.2f}MB) exceeds maximum allowed size "
                f"of {config.settings.max_file_size_mb}MB"
            )

    def validate_priority(self, priority: Optional[int]) -> int:
        if priority is None:
            return config.settings.default_priority
        low, high = config.settings.min_priority, config.settings.max_priority
        if isinstance(priority, bool) or not isinstance(priority, int) or not low <= priority <= high:
            raise ValidationException(f"priority must be an integer between {low} and {high}")
        return priority

    def build_storage_key(self, upload_id: str, content_type: str) -> str:
        """
        Object key for a new upload: ``{pending_prefix}/{upload_id}.{ext}``.
        The user filename never reaches the key, and the id matches the record id.
        """
        extension = CONTENT_TYPE_EXTENSIONS.get(self._normalize_content_type(content_type), "bin")
        return f"{config.settings.pending_prefix}/{upload_id}.{extension}"

    @staticmethod
    def _normalize_content_type(content_type: Optional[str]) -> str:
        return (content_type or "").split(";")[0].strip().lower()

    @staticmethod
    def parse_authors(authors: Union[str, Sequence[str], None]) -> Optional[List[str]]:
        """Split a comma-separated author string (or clean a list); empty becomes None."""
        if authors is None:
            return None
        if isinstance(authors, str):
            authors = authors.split(",")
        cleaned = [author.strip() for author in authors if author and author.strip()]
        return cleaned or None

    def _create_with_retry(self, record: UploadRecord) -> UploadRecord:
        """
        Write the record under the retry policy.

        A conditional-write conflict on a retry means an earlier attempt
        landed; the stored record is returned if it points at the same blob.
        """
        last_error = None
        for attempt in range(1, self.retry_policy.max_attempts + 1):
            try:
                self.upload_repository.create(record)
                return record
            except ConflictException:
                existing = self.upload_repository.get_by_id(record.upload_id)
                if attempt > 1 and existing is not None and existing.storage_key == record.storage_key:
                    logger.info("Record for %s already written by an earlier attempt", record.storage_key)
                    return existing
                raise DatabaseException(f"Upload id '{record.upload_id}' is already taken")
            except DatabaseException as e:
                last_error = e
                if attempt == self.retry_policy.max_attempts:
                    break
                delay = self.retry_policy.delay_for(attempt)
                logger.warning(
                    "Record write for %s failed (attempt %d/%d), retrying in %.2fs: %s",
                    record.storage_key, attempt, self.retry_policy.max_attempts, delay, e.message
                )
                self._sleep(delay)
        raise last_error

    def _compensate_blob_write(self, storage_key: str) -> None:
        """Best-effort removal of a blob whose record could not be written."""
        try:
            self.blob_repository.delete_object(storage_key)
            logger.warning("Removed blob %s after failed record write", storage_key)
        except StorageException as e:
            logger.error("Orphaned blob %s left in storage: %s", storage_key, e.message)
