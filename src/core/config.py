"""
Core configuration for the Paper Upload API.
Manages environment variables and AWS service settings.
"""
import logging
import os
from pydantic_settings import BaseSettings
from src.core.exceptions import ConfigurationException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    s3_bucket_name: str = os.getenv("S3_BUCKET_NAME", "")
    storage_public_base_url: str = os.getenv("STORAGE_PUBLIC_BASE_URL", "")
    pending_prefix: str = os.getenv("PENDING_PREFIX", "pending")
    uploads_table_name: str = os.getenv("UPLOADS_TABLE_NAME", "")
    uploads_owner_index: str = os.getenv("UPLOADS_OWNER_INDEX", "OwnerIndex")
    uploads_queue_index: str = os.getenv("UPLOADS_QUEUE_INDEX", "ProcessingQueueIndex")
    users_table_name: str = os.getenv("USERS_TABLE_NAME", "")

    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Paper Upload API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")

    # File Upload Limits
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "50"))
    accepted_content_type: str = os.getenv("ACCEPTED_CONTENT_TYPE", "application/pdf")

    # Processing priority (1 is the most urgent)
    default_priority: int = int(os.getenv("DEFAULT_PRIORITY", "5"))
    min_priority: int = int(os.getenv("MIN_PRIORITY", "1"))
    max_priority: int = int(os.getenv("MAX_PRIORITY", "10"))

    # Pagination Configuration
    pagination_default_limit: int = int(os.getenv("PAGINATION_DEFAULT_LIMIT", "10"))
    pagination_max_limit: int = int(os.getenv("PAGINATION_MAX_LIMIT", "100"))

    # Intake record write retries
    record_write_max_attempts: int = int(os.getenv("RECORD_WRITE_MAX_ATTEMPTS", "3"))
    record_write_backoff_seconds: float = float(os.getenv("RECORD_WRITE_BACKOFF_SECONDS", "0.2"))

    # Authentication
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expiration_hours: int = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
    jwt_secret_fallback: str = os.getenv("JWT_SECRET", "dev-secret-change-in-production")
    use_parameter_store: bool = os.getenv("USE_PARAMETER_STORE", "false").lower() == "true"

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def jwt_secret(self) -> str:
        """Get JWT secret from Parameter Store, or the local fallback."""
        if not self.use_parameter_store:
            return self.jwt_secret_fallback
        try:
            from src.core.parameter_store import get_parameter
            return get_parameter(f"/paper-uploads/{self.environment}/jwt-secret", self.aws_region)
        except ConfigurationException as e:
            logger.warning("Using fallback JWT secret: %s", e.message)
            return self.jwt_secret_fallback

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
