"""
Deletion Service.
Removes an upload's blob and then its record.

The blob always goes first; a failed blob delete is logged and the record is
still removed.
"""
import logging
from typing import Optional
from src.core.exceptions import StorageException, UploadNotFoundException
from src.models.actor import Actor
from src.repositories.blob_repository import BlobRepository
from src.repositories.upload_repository import UploadRepository
from src.services.authorization import can_access, require_actor

logger = logging.getLogger(__name__)


class DeletionService:
    """Service coordinating blob and record removal."""

    def __init__(self, blob_repository: BlobRepository, upload_repository: UploadRepository):
        self.blob_repository = blob_repository
        self.upload_repository = upload_repository

    def delete(self, actor: Optional[Actor], upload_id: str) -> None:
        """
        Delete an upload on behalf of its owner or an administrator.

        Args:
            actor: Caller
            upload_id: Upload identifier

        Raises:
            UnauthorizedException: If there is no actor
            UploadNotFoundException: If missing or not visible to the actor
            DatabaseException: If the record delete fails (the blob may already be gone)
        """
        actor = require_actor(actor)

        record = self.upload_repository.get_by_id(upload_id)
        if record is None or not can_access(actor, record):
            raise UploadNotFoundException(f"Upload '{upload_id}' not found")

        if record.storage_locator:
            self._delete_blob(upload_id, record.storage_key, record.storage_locator)

        self.upload_repository.delete(upload_id)
        logger.info("Upload %s deleted by %s", upload_id, actor.id)

    def _delete_blob(self, upload_id: str, storage_key: Optional[str], locator: str) -> None:
        key = storage_key or self.blob_repository.key_from_locator(locator)
        if not key:
            logger.warning("Upload %s has a foreign locator %s, blob not deleted", upload_id, locator)
            return
        try:
            self.blob_repository.delete_object(key)
        except StorageException as e:
            logger.error("Blob %s of upload %s could not be deleted: %s", key, upload_id, e.message)
