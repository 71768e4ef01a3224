"""
Storage Interface
=================

Contract every file storage backend implements. Services depend on this
interface only and get a concrete backend from the container.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class StorageFile:
    """
    A file that has been written to a storage backend.

    Attributes:
        key: Path of the file inside the backend
        url: URL clients can fetch the file from
        size: Size in bytes
        content_type: MIME type given at upload
        bucket: Bucket name for object stores, None for the filesystem
    """

    key: str
    url: str
    size: int
    content_type: str
    bucket: Optional[str] = None


class StorageException(Exception):
    """Raised when a storage backend cannot complete an operation."""


class StorageInterface(ABC):
    """
    File storage operations used by the marketplace.

    Implementations:
        - S3StorageAdapter: AWS S3 / MinIO through django-storages
        - LocalStorageAdapter: MEDIA_ROOT on the local filesystem
    """

    @abstractmethod
    def upload(self, file: BinaryIO, path: str, content_type: str) -> StorageFile:
        """
        Store ``file`` under ``path``.

        The backend may alter the final key to avoid overwriting an existing
        file; the returned StorageFile carries the key actually used.

        Raises:
            StorageException: If the write fails
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a file. Returns False when there was nothing to delete."""

    @abstractmethod
    def get_url(self, key: str) -> str:
        """URL for an existing key."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether ``key`` is present in the backend."""
