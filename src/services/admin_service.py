"""
Admin Service.
Unscoped listing and field overrides for administrators.
"""
import logging
from typing import List, Optional, Tuple
from src.core import config
from src.core.exceptions import ConflictException, UploadNotFoundException, ValidationException
from src.models.actor import Actor
from src.models.upload_record import UploadRecord
from src.models.upload_status import UploadStatus
from src.repositories.upload_repository import UploadRepository
from src.repositories.user_repository import UserRepository
from src.services.authorization import require_admin
from src.services.status_transition_service import StatusTransitionService

logger = logging.getLogger(__name__)


class AdminService:
    """Service for administrator-only upload operations."""

    def __init__(
        self,
        upload_repository: UploadRepository,
        user_repository: UserRepository,
        transition_service: StatusTransitionService
    ):
        self.upload_repository = upload_repository
        self.user_repository = user_repository
        self.transition_service = transition_service

    def list_all(
        self,
        actor: Optional[Actor],
        status: Optional[UploadStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Tuple[UploadRecord, dict]]:
        """
        List uploads of every owner in processing order.

        Returns:
            (record, owner) pairs where owner is {'id', 'name', 'email'}

        Raises:
            UnauthorizedException / ForbiddenException: If the actor is not an administrator
            ValidationException: If limit or offset is out of range
        """
        require_admin(actor)
        limit = config.settings.pagination_default_limit if limit is None else limit
        if not 1 <= limit <= config.settings.pagination_max_limit:
            raise ValidationException(f"limit must be between 1 and {config.settings.pagination_max_limit}")
        if offset < 0:
            raise ValidationException("offset cannot be negative")

        records = self.upload_repository.list_for_processing(status=status, limit=limit, offset=offset)
        identities = self.user_repository.get_identities(record.owner_id for record in records)

        return [
            (record, {'id': record.owner_id, **identities.get(record.owner_id, {})})
            for record in records
        ]

    def update_upload(self, actor: Optional[Actor], upload_id: str, changes: dict) -> UploadRecord:
        """
        Apply an administrator's partial update.

        ``changes`` holds only the fields the client sent. Status changes are
        checked against the transition table; they are never forced.

        Raises:
            UnauthorizedException / ForbiddenException: If the actor is not an administrator
            UploadNotFoundException: If the upload does not exist
            InvalidTransitionException: If the status change is not allowed
            ValidationException: If a value is invalid
            ConflictException: If expected_version does not match or the status changed meanwhile
        """
        actor = require_admin(actor)
        changes = dict(changes)
        expected_version = changes.pop('expected_version', None)

        record = self.upload_repository.get_by_id(upload_id)
        if record is None:
            raise UploadNotFoundException(f"Upload '{upload_id}' not found")

        updates = {}
        target = changes.get('status', record.status)
        if target is None:
            raise ValidationException("status cannot be null")
        target = UploadStatus(target)

        if target != record.status:
            updates.update(self.transition_service.plan(record, target, changes.get('error_message')))
        elif 'error_message' in changes:
            message = (changes['error_message'] or "").strip()
            if message and record.status != UploadStatus.FAILED:
                raise ValidationException("error_message can only be set on failed uploads")
            updates['error_message'] = message or None

        if 'priority' in changes:
            priority = changes['priority']
            low, high = config.settings.min_priority, config.settings.max_priority
            if priority is None or not low <= priority <= high:
                raise ValidationException(f"priority must be an integer between {low} and {high}")
            updates['priority'] = priority

        if not updates:
            if expected_version is not None and record.version != expected_version:
                raise ConflictException(
                    f"Upload '{upload_id}' is at version {record.version}, not {expected_version}"
                )
            return record

        # Every override is validated against the status read above
        updated = self.upload_repository.update(
            upload_id,
            updates,
            expected_version=expected_version,
            expected_status=record.status
        )
        logger.info("Admin %s updated upload %s: %s", actor.id, upload_id, sorted(updates))
        return updated
