"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for services and repositories.
"""
from functools import lru_cache
from src.core import config
from src.core.retry import RetryPolicy
from src.repositories.s3_repository import S3Repository
from src.repositories.dynamo_upload_repository import DynamoUploadRepository
from src.repositories.user_repository import UserRepository
from src.services.admin_service import AdminService
from src.services.deletion_service import DeletionService
from src.services.status_transition_service import StatusTransitionService
from src.services.upload_service import UploadService


@lru_cache()
def get_s3_repository() -> S3Repository:
    """Get S3Repository singleton instance."""
    return S3Repository()


@lru_cache()
def get_upload_repository() -> DynamoUploadRepository:
    """Get DynamoUploadRepository singleton instance."""
    return DynamoUploadRepository()


@lru_cache()
def get_user_repository() -> UserRepository:
    """Get UserRepository singleton instance."""
    return UserRepository()


@lru_cache()
def get_transition_service() -> StatusTransitionService:
    return StatusTransitionService(upload_repository=get_upload_repository())


@lru_cache()
def get_upload_service() -> UploadService:
    """Get UploadService singleton instance with injected dependencies."""
    return UploadService(
        blob_repository=get_s3_repository(),
        upload_repository=get_upload_repository(),
        retry_policy=RetryPolicy(
            max_attempts=config.settings.record_write_max_attempts,
            backoff_seconds=config.settings.record_write_backoff_seconds
        )
    )


@lru_cache()
def get_deletion_service() -> DeletionService:
    return DeletionService(
        blob_repository=get_s3_repository(),
        upload_repository=get_upload_repository()
    )


@lru_cache()
def get_admin_service() -> AdminService:
    return AdminService(
        upload_repository=get_upload_repository(),
        user_repository=get_user_repository(),
        transition_service=get_transition_service()
    )


def clear_caches() -> None:
    """Drop all cached singletons (used after settings change)."""
    for factory in (
        get_s3_repository,
        get_upload_repository,
        get_user_repository,
        get_transition_service,
        get_upload_service,
        get_deletion_service,
        get_admin_service,
    ):
        factory.cache_clear()
