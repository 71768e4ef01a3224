"""
S3 Storage Adapter
==================

StorageInterface backed by an S3 compatible bucket through django-storages.
"""

import logging
from typing import BinaryIO

from django.conf import settings
from storages.backends.s3boto3 import S3Boto3Storage

from .interface import StorageException, StorageFile, StorageInterface

logger = logging.getLogger(__name__)


class S3StorageAdapter(StorageInterface):
    """
    Uploads listing images and resumes to S3.

    Settings used:
        AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY: credentials
        AWS_STORAGE_BUCKET_NAME: target bucket
        AWS_S3_REGION_NAME: bucket region
        AWS_S3_ENDPOINT_URL: MinIO or other S3 compatible endpoint (optional)
        AWS_S3_CUSTOM_DOMAIN: CDN domain for public URLs (optional)
    """

    def __init__(self, storage=None):
        self.storage = storage or S3Boto3Storage()
        self.bucket_name = getattr(settings, "AWS_STORAGE_BUCKET_NAME", "")

    def upload(self, file: BinaryIO, path: str, content_type: str) -> StorageFile:
        try:
            if hasattr(file, "content_type"):
                file.content_type = content_type
            key = self.storage.save(path, file)
            stored = StorageFile(
                key=key,
                url=self.storage.url(key),
                size=self.storage.size(key),
                content_type=content_type,
                bucket=self.bucket_name,
            )
            logger.info(f"Uploaded {key} to bucket {self.bucket_name} ({stored.size} bytes)")
            return stored

        except Exception as e:
            logger.error(f"S3 upload failed for {path}: {e}")
            raise StorageException(f"S3 upload failed: {e}") from e

    def delete(self, key: str) -> bool:
        try:
            if not self.storage.exists(key):
                logger.warning(f"Nothing to delete in S3 for key {key}")
                return False
            self.storage.delete(key)
            logger.info(f"Deleted {key} from bucket {self.bucket_name}")
            return True

        except Exception as e:
            logger.error(f"S3 delete failed for {key}: {e}")
            raise StorageException(f"S3 delete failed: {e}") from e

    def get_url(self, key: str) -> str:
        try:
            # Signed when AWS_QUERYSTRING_AUTH is on
            return self.storage.url(key)
        except Exception as e:
            logger.error(f"Could not build URL for S3 key {key}: {e}")
            raise StorageException(f"URL generation failed: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            return self.storage.exists(key)
        except Exception as e:
            logger.error(f"Could not check S3 key {key}: {e}")
            return False
