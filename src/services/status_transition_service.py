"""
Status Transition Service.
Validates status changes against the transition table and applies them.
"""
import logging
from typing import Dict, FrozenSet, Optional
from src.core.exceptions import InvalidTransitionException, UploadNotFoundException, ValidationException
from src.models.upload_record import UploadRecord
from src.models.upload_status import UploadStatus
from src.repositories.upload_repository import UploadRepository

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[UploadStatus, FrozenSet[UploadStatus]] = {
    UploadStatus.PENDING: frozenset({UploadStatus.PROCESSING}),
    UploadStatus.PROCESSING: frozenset({UploadStatus.COMPLETED, UploadStatus.FAILED}),
    UploadStatus.FAILED: frozenset({UploadStatus.PENDING}),
    UploadStatus.COMPLETED: frozenset(),
}


class StatusTransitionService:
    """Service for upload status changes."""

    def __init__(self, upload_repository: UploadRepository):
        self.upload_repository = upload_repository

    @staticmethod
    def is_allowed(current: UploadStatus, target: UploadStatus) -> bool:
        return UploadStatus(target) in ALLOWED_TRANSITIONS[UploadStatus(current)]

    def plan(self, record: UploadRecord, target: UploadStatus, error_message: Optional[str] = None) -> dict:
        """
        Build the change set for moving a record to a new status.

        Args:
            record: Current record
            target: Requested status
            error_message: Failure reason, required when target is failed

        Returns:
            Fields to write

        Raises:
            InvalidTransitionException: If the transition table forbids the change
            ValidationException: If entering failed without an error message
        """
        target = UploadStatus(target)
        if not self.is_allowed(record.status, target):
            raise InvalidTransitionException(
                f"Cannot change status from '{record.status.value}' to '{target.value}'"
            )

        if target == UploadStatus.FAILED:
            if not isinstance(error_message, str) or not error_message.strip():
                raise ValidationException("error_message is required when marking an upload as failed")
            return {'status': target, 'error_message': error_message.strip()}

        # Only failed records carry an error message
        return {'status': target, 'error_message': None}

    def transition(
        self,
        upload_id: str,
        target: UploadStatus,
        error_message: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> UploadRecord:
        """
        Move an upload to a new status.

        Requesting the current status is a no-op and returns the record unchanged.
        The write is conditional on the status the transition was planned from.

        Raises:
            UploadNotFoundException: If the upload does not exist
            InvalidTransitionException: If the change is not allowed
            ValidationException: If entering failed without an error message
            ConflictException: If expected_version does not match or the status changed meanwhile
            DatabaseException: If the store fails
        """
        record = self.upload_repository.get_by_id(upload_id)
        if record is None:
            raise UploadNotFoundException(f"Upload '{upload_id}' not found")

        target = UploadStatus(target)
        if record.status == target:
            return record

        changes = self.plan(record, target, error_message)
        updated = self.upload_repository.update(
            upload_id,
            changes,
            expected_version=expected_version,
            expected_status=record.status
        )
        logger.info("Upload %s moved %s -> %s", upload_id, record.status.value, target.value)
        return updated
