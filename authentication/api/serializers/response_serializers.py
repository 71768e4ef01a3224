"""Serializers used only to document responses in the OpenAPI schema."""

from rest_framework import serializers

from .auth_serializers import UserSerializer


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    errors = serializers.DictField(child=serializers.CharField(), required=False)


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer()
