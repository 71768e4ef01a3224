import uuid

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models


username_validator = RegexValidator(
    regex=r"^[a-zA-Z0-9_]+$",
    message="Username can only contain letters, numbers, and underscores",
)
phone_validator = RegexValidator(
    regex=r"^\+?[1-9]\d{0,15}$",
    message="Please enter a valid phone number",
)


class CustomUser(AbstractUser):
    ROLE_CHOICES = [
        ("user", "User"),
        ("seller", "Seller"),
        ("admin", "Admin"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(
        max_length=30,
        unique=True,
        validators=[MinLengthValidator(3), username_validator],
        error_messages={"unique": "Username already taken"},
    )
    email = models.EmailField(unique=True, error_messages={"unique": "Email already registered"})
    first_name = models.CharField(max_length=50, blank=True)
    last_name = models.CharField(max_length=50, blank=True)
    date_joined = models.DateTimeField(auto_now_add=True)

    # Contact / public profile
    phone = models.CharField(max_length=17, blank=True, validators=[phone_validator])
    location = models.CharField(max_length=100, blank=True)
    bio = models.TextField(max_length=500, blank=True)
    avatar = models.URLField(max_length=2000, blank=True)

    # Role system - simple field
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="user")
    is_verified = models.BooleanField(default=False)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        app_label = "authentication"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def is_seller(self):
        return self.role == "seller"

    def is_admin(self):
        return self.role == "admin" or self.is_superuser

    def can_sell_products(self):
        """Sellers and admins may post listings."""
        return self.is_seller() or self.is_admin()
