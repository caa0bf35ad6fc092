"""
Abstract base class for blob storage.
Defines the contract the intake and deletion sagas rely on.
"""
from abc import ABC, abstractmethod
from typing import Optional


class BlobRepository(ABC):
    """Abstract object store interface."""

    @abstractmethod
    def put_object(self, key: str, content: bytes, content_type: str) -> str:
        """Store bytes under key and return the public locator."""
        pass

    @abstractmethod
    def get_file(self, key: str) -> bytes:
        """Read the bytes stored under key."""
        pass

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """Remove the object stored under key."""
        pass

    @abstractmethod
    def key_from_locator(self, locator: str) -> Optional[str]:
        """Recover the object key from a public locator, or None if it is foreign."""
        pass
