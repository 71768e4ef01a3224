"""
Response Serializers for Marketplace API Documentation

These serializers describe response envelopes for the OpenAPI schema only;
they are never used to validate input.
"""

from rest_framework import serializers

# ===== Common =====


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    detail = serializers.CharField(help_text="Human-readable error message")


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class LikeToggleResponseSerializer(serializers.Serializer):
    likes = serializers.IntegerField(help_text="Like count after the toggle")
    is_liked = serializers.BooleanField(help_text="Whether the caller now likes the object")


class ViewCountResponseSerializer(serializers.Serializer):
    view_count = serializers.IntegerField()


# ===== Uploads =====


class ImageUploadResponseSerializer(serializers.Serializer):
    image_url = serializers.URLField()
    key = serializers.CharField()
    size = serializers.IntegerField()
