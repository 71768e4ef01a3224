from .auth_serializers import (
    LoginRequestSerializer,
    ProfileUpdateSerializer,
    PublicUserSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)
from .jwt_serializers import CustomRefreshToken


__all__ = [
    "UserSerializer",
    "PublicUserSerializer",
    "UserRegistrationSerializer",
    "LoginRequestSerializer",
    "ProfileUpdateSerializer",
    "CustomRefreshToken",
]
