"""
Storage Abstraction Layer
==========================

One interface over S3 and local filesystem storage.
"""

from .factory import StorageFactory
from .interface import StorageException, StorageFile, StorageInterface
from .local_adapter import LocalStorageAdapter
from .s3_adapter import S3StorageAdapter

__all__ = [
    "StorageInterface",
    "StorageFile",
    "StorageException",
    "LocalStorageAdapter",
    "S3StorageAdapter",
    "StorageFactory",
]
