from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.api.views import BecomeSellerView, LoginAPIView, ProfileView, RegisterAPIView


urlpatterns = [
    # Auth
    path("register/", RegisterAPIView.as_view(), name="register"),
    path("login/", LoginAPIView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # Profile
    path("profile/", ProfileView.as_view(), name="profile"),
    path("become-seller/", BecomeSellerView.as_view(), name="become_seller"),
]
