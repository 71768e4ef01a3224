# Marketplace API Serializers

from .response_serializers import (
    ErrorResponseSerializer,
    ImageUploadResponseSerializer,
    LikeToggleResponseSerializer,
    MessageResponseSerializer,
    ViewCountResponseSerializer,
)


__all__ = [
    "ErrorResponseSerializer",
    "ImageUploadResponseSerializer",
    "LikeToggleResponseSerializer",
    "MessageResponseSerializer",
    "ViewCountResponseSerializer",
]
