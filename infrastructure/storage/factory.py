"""
Storage Factory
===============

Picks the storage backend named by ``settings.INFRASTRUCTURE["STORAGE_BACKEND"]``.
"""

import logging
from typing import Optional

from django.conf import settings

from .interface import StorageInterface
from .local_adapter import LocalStorageAdapter
from .s3_adapter import S3StorageAdapter

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Usage:
        storage = StorageFactory.create()          # from settings
        storage = StorageFactory.create("local")   # explicit
    """

    BACKENDS = {
        "s3": S3StorageAdapter,
        "local": LocalStorageAdapter,
    }

    @classmethod
    def create(cls, backend: Optional[str] = None) -> StorageInterface:
        if backend is None:
            backend = getattr(settings, "INFRASTRUCTURE", {}).get("STORAGE_BACKEND", "local")

        try:
            adapter_class = cls.BACKENDS[backend]
        except KeyError:
            raise ValueError(f"Unknown storage backend '{backend}'. Choose one of: {', '.join(cls.BACKENDS)}")

        logger.info(f"Creating {backend} storage backend")
        return adapter_class()
