from rest_framework_simplejwt.tokens import RefreshToken


class CustomRefreshToken(RefreshToken):
    """Refresh token that carries the user's role claims."""

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)
        token["role"] = user.role
        token["is_seller"] = user.role == "seller"
        token["is_admin"] = user.role == "admin" or user.is_superuser
        token["username"] = user.username
        return token
