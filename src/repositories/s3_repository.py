"""
S3 Repository for file storage operations.
Handles PDF blob writes, reads and deletes in Amazon S3.
"""
import logging
from typing import Optional
from urllib.parse import quote, unquote
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from src.core import config
from src.core.exceptions import StorageException
from src.repositories.blob_repository import BlobRepository

logger = logging.getLogger(__name__)


class S3Repository(BlobRepository):
    """Repository for S3 file operations."""

    def __init__(self):
        self.s3_client = boto3.client('s3', region_name=config.settings.aws_region)
        self.bucket_name = config.settings.s3_bucket_name
        self.public_base_url = (
            config.settings.storage_public_base_url
            or f"https://{self.bucket_name}.s3.{config.settings.aws_region}.amazonaws.com"
        ).rstrip("/")

    def put_object(self, key: str, content: bytes, content_type: str) -> str:
        """
        Upload bytes to S3.

        Args:
            key: S3 object key
            content: File content
            content_type: MIME type stored with the object

        Returns:
            Public URL of the stored object

        Raises:
            StorageException: If upload fails
        """
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageException(f"Failed to upload file to S3: {str(e)}") from e

        logger.info("Stored blob s3://%s/%s (%d bytes)", self.bucket_name, key, len(content))
        return self.public_url(key)

    def get_file(self, key: str) -> bytes:
        """
        Retrieve file from S3.

        Raises:
            StorageException: If retrieval fails
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            return response['Body'].read()
        except (ClientError, BotoCoreError) as e:
            raise StorageException(f"Failed to retrieve file from S3: {str(e)}") from e

    def delete_object(self, key: str) -> None:
        """
        Delete an object from S3.

        Raises:
            StorageException: If deletion fails
        """
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageException(f"Failed to delete file from S3: {str(e)}") from e

        logger.info("Deleted blob s3://%s/%s", self.bucket_name, key)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{quote(key)}"

    def key_from_locator(self, locator: str) -> Optional[str]:
        prefix = f"{self.public_base_url}/"
        if not locator or not locator.startswith(prefix):
            return None
        key = unquote(locator[len(prefix):])
        return key or None
