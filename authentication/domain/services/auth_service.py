"""
AuthService - account registration, login and profile management.

Keeps the authentication rules out of the views so they can be unit tested
without the HTTP layer.
"""

import logging
from typing import Dict

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from authentication.api.serializers.jwt_serializers import CustomRefreshToken

from .results import LoginResult, RegisterResult, Result


User = get_user_model()
logger = logging.getLogger(__name__)

# Profile fields a user may edit on their own account
PROFILE_EDITABLE_FIELDS = ("username", "first_name", "last_name", "phone", "location", "bio", "avatar")


class AuthService:
    """
    Authentication service encapsulating the account business rules.
    """

    @staticmethod
    def issue_tokens(user) -> Dict[str, str]:
        refresh = CustomRefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}

    def register(self, data: Dict) -> RegisterResult:
        """
        Create an account and sign the user in.

        ``data`` is the validated payload of ``UserRegistrationSerializer``.
        Email and username must both be unused.
        """
        email = (data.get("email") or "").strip().lower()
        username = (data.get("username") or "").strip()

        if User.objects.filter(email__iexact=email).exists():
            return RegisterResult(
                success=False, error="Email already registered", errors={"email": "Email already registered"}
            )
        if User.objects.filter(username__iexact=username).exists():
            return RegisterResult(
                success=False, error="Username already taken", errors={"username": "Username already taken"}
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=username,
                    email=email,
                    password=data["password"],
                    first_name=data.get("first_name", ""),
                    last_name=data.get("last_name", ""),
                    phone=data.get("phone", ""),
                    location=data.get("location", ""),
                    bio=data.get("bio", ""),
                )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same identity
            logger.warning(f"Registration conflict for {email}")
            return RegisterResult(success=False, error="Email or username already in use")

        tokens = self.issue_tokens(user)
        logger.info(f"User registered: {user.id}")
        return RegisterResult(
            success=True,
            user=user,
            access_token=tokens["access"],
            refresh_token=tokens["refresh"],
            message="User registered successfully",
        )

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with email and password.

        Unknown email and wrong password produce the same error so the
        endpoint does not reveal which accounts exist.
        """
        if not email or not password:
            return LoginResult(success=False, error="Email and password are required.")

        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None or not user.check_password(password):
            logger.info(f"Failed login attempt for {email}")
            return LoginResult(success=False, error="Invalid email or password")

        if not user.is_active:
            return LoginResult(success=False, inactive=True, error="This account has been deactivated.")

        tokens = self.issue_tokens(user)
        logger.info(f"User logged in: {user.id}")
        return LoginResult(
            success=True,
            user=user,
            access_token=tokens["access"],
            refresh_token=tokens["refresh"],
            message="Login successful",
        )

    def update_profile(self, user, data: Dict) -> Result:
        """Apply whitelisted profile changes; anything else is ignored."""
        changes = {key: value for key, value in data.items() if key in PROFILE_EDITABLE_FIELDS}

        if "username" in changes and (
            User.objects.filter(username__iexact=changes["username"]).exclude(pk=user.pk).exists()
        ):
            return Result(success=False, message="Username already taken", error="Username already taken")

        for key, value in changes.items():
            setattr(user, key, value)
        if changes:
            user.save(update_fields=list(changes.keys()))

        logger.info(f"Profile updated for user {user.id}: {sorted(changes.keys())}")
        return Result(success=True, message="Profile updated successfully", data={"updated": sorted(changes)})

    def become_seller(self, user) -> Result:
        """Grant the seller role so the user can post listings."""
        if user.can_sell_products():
            return Result(success=True, message="You can already sell on MarketHub", data=self.issue_tokens(user))

        user.role = "seller"
        user.save(update_fields=["role"])
        logger.info(f"User {user.id} upgraded to seller")
        # Tokens carry the role claim, so hand out a fresh pair
        return Result(success=True, message="Seller account activated", data=self.issue_tokens(user))
