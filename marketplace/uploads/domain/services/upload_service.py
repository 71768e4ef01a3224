"""
UploadService - validated uploads to the configured storage backend.

Listing images go under ``markethub/products/`` and resumes under
``markethub/resumes/``. Type and size limits come from
``settings.UPLOAD_LIMITS``.
"""

import logging
import mimetypes
import os
import time
import uuid
from typing import Iterable

from django.conf import settings

from infrastructure.container import container
from infrastructure.storage.interface import StorageException, StorageFile, StorageInterface
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "markethub/products"
RESUME_PREFIX = "markethub/resumes"


def guess_content_type(upload) -> str:
    content_type = getattr(upload, "content_type", None)
    if content_type and content_type != "application/octet-stream":
        return content_type
    guessed, _ = mimetypes.guess_type(getattr(upload, "name", "") or "")
    return guessed or "application/octet-stream"


class UploadService(BaseService):
    """
    Checks uploaded files against the configured limits and stores them.

    Storage failures come back as ``upload_failed`` results; callers decide
    whether that is fatal.
    """

    def __init__(self, storage: StorageInterface = None):
        super().__init__()
        self.storage = storage or container.storage()

    @property
    def limits(self):
        return getattr(settings, "UPLOAD_LIMITS", {})

    def _validate(self, upload, allowed_types: Iterable[str], max_bytes: int, label: str) -> ServiceResult[str]:
        if upload is None:
            return service_err(ErrorCodes.INVALID_INPUT, "No file uploaded")

        content_type = guess_content_type(upload)
        if content_type not in allowed_types:
            return service_err(ErrorCodes.UNSUPPORTED_FILE_TYPE, f"Unsupported {label} type '{content_type}'")

        if upload.size > max_bytes:
            return service_err(
                ErrorCodes.FILE_TOO_LARGE,
                f"{label.capitalize()} exceeds the {max_bytes // (1024 * 1024)}MB limit",
            )
        return service_ok(content_type)

    def _store(self, upload, path: str, content_type: str) -> ServiceResult[StorageFile]:
        try:
            upload.seek(0)
            stored = self.storage.upload(upload, path, content_type)
            self.logger.info(f"Stored {stored.key} ({stored.size} bytes, {content_type})")
            return service_ok(stored)
        except StorageException as e:
            self.logger.error(f"Storage failed for {path}: {e}")
            return service_err(ErrorCodes.UPLOAD_FAILED, "File upload failed")

    @BaseService.log_performance
    def upload_image(self, upload) -> ServiceResult[StorageFile]:
        """
        Store a listing image (JPEG, PNG, GIF or WEBP).

        Example:
            >>> result = upload_service.upload_image(request.FILES.get("image"))
            >>> result.value.url
        """
        validation = self._validate(
            upload,
            self.limits.get("IMAGE_CONTENT_TYPES", ["image/jpeg", "image/png", "image/gif", "image/webp"]),
            self.limits.get("IMAGE_MAX_BYTES", 5 * 1024 * 1024),
            "image",
        )
        if not validation.ok:
            return validation

        extension = os.path.splitext(upload.name)[1].lower() or mimetypes.guess_extension(validation.value) or ""
        path = f"{IMAGE_PREFIX}/{uuid.uuid4().hex}{extension}"
        return self._store(upload, path, validation.value)

    def validate_resume(self, upload) -> ServiceResult[str]:
        return self._validate(
            upload,
            self.limits.get("DOCUMENT_CONTENT_TYPES", ["application/pdf", "text/plain"]),
            self.limits.get("DOCUMENT_MAX_BYTES", 10 * 1024 * 1024),
            "resume",
        )

    @BaseService.log_performance
    def upload_resume(self, upload, applicant_id) -> ServiceResult[StorageFile]:
        """Store a resume (PDF, DOC, DOCX or TXT) as ``resume_<applicant>_<ms>``."""
        validation = self.validate_resume(upload)
        if not validation.ok:
            return validation

        extension = os.path.splitext(upload.name)[1].lower()
        path = f"{RESUME_PREFIX}/resume_{applicant_id}_{int(time.time() * 1000)}{extension}"
        return self._store(upload, path, validation.value)
