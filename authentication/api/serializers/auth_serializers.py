from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from authentication.domain.models import CustomUser
from authentication.domain.models.user import phone_validator, username_validator


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = CustomUser
        fields = (
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "location",
            "bio",
            "avatar",
            "role",
            "is_verified",
            "is_active",
            "date_joined",
        )
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()


class PublicUserSerializer(serializers.ModelSerializer):
    """Seller / author card shown next to listings and comments."""

    class Meta:
        model = CustomUser
        fields = ("id", "username", "first_name", "last_name", "avatar", "location")
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=30, validators=[username_validator])
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, style={"input_type": "password"})
    first_name = serializers.CharField(min_length=2, max_length=50)
    last_name = serializers.CharField(min_length=2, max_length=50)
    phone = serializers.CharField(required=False, allow_blank=True, validators=[phone_validator])
    location = serializers.CharField(required=False, allow_blank=True, max_length=100)
    bio = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate_password(self, value):
        validate_password(value)
        return value


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ProfileUpdateSerializer(serializers.Serializer):
    """Fields a user may change on their own profile."""

    username = serializers.CharField(required=False, min_length=3, max_length=30, validators=[username_validator])
    first_name = serializers.CharField(required=False, min_length=2, max_length=50)
    last_name = serializers.CharField(required=False, min_length=2, max_length=50)
    phone = serializers.CharField(required=False, allow_blank=True, validators=[phone_validator])
    location = serializers.CharField(required=False, allow_blank=True, max_length=100)
    bio = serializers.CharField(required=False, allow_blank=True, max_length=500)
    avatar = serializers.URLField(required=False, allow_blank=True, max_length=2000)
