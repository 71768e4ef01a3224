from .upload_service import UploadService

__all__ = ["UploadService"]
