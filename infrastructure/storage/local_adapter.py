"""
Local Storage Adapter
=====================

StorageInterface on top of Django's FileSystemStorage (MEDIA_ROOT). Used in
development and tests where no bucket is configured.
"""

import logging
from typing import BinaryIO

from django.core.files.storage import FileSystemStorage

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class LocalStorageAdapter(StorageInterface):
    def __init__(self, storage=None):
        self.storage = storage or FileSystemStorage()

    def upload(self, file: BinaryIO, path: str, content_type: str) -> StorageFile:
        try:
            key = self.storage.save(path, file)
            return StorageFile(
                key=key,
                url=self.storage.url(key),
                size=self.storage.size(key),
                content_type=content_type,
            )
        except Exception as e:
            logger.error(f"Local upload failed for {path}: {e}")
            raise StorageException(f"Local upload failed: {e}") from e

    def delete(self, key: str) -> bool:
        if not self.storage.exists(key):
            return False
        try:
            self.storage.delete(key)
            return True
        except OSError as e:
            raise StorageException(f"Local delete failed: {e}") from e

    def get_url(self, key: str) -> str:
        return self.storage.url(key)

    def exists(self, key: str) -> bool:
        return self.storage.exists(key)
