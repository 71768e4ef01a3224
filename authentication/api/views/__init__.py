from .auth_views import LoginAPIView, RegisterAPIView
from .profile_views import BecomeSellerView, ProfileView


__all__ = [
    "LoginAPIView",
    "RegisterAPIView",
    "ProfileView",
    "BecomeSellerView",
]
