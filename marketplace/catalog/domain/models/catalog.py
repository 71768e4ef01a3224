import uuid

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.text import slugify

from .category import LISTING_TYPE_CHOICES, Category

User = get_user_model()


class Product(models.Model):
    """A listing: a product, secondhand item, job, service or trip."""

    LISTING_TYPE_CHOICES = LISTING_TYPE_CHOICES
    # Jobs are applied for, everything else can be bought
    PURCHASABLE_TYPES = ("marketplace", "secondhand", "services", "travel")

    CONDITION_CHOICES = [
        ("new", "New"),
        ("like-new", "Like New"),
        ("good", "Good"),
        ("fair", "Fair"),
        ("poor", "Poor"),
    ]
    JOB_TYPE_CHOICES = [
        ("full-time", "Full Time"),
        ("part-time", "Part Time"),
        ("contract", "Contract"),
        ("remote", "Remote"),
        ("internship", "Internship"),
    ]
    EXPERIENCE_CHOICES = [
        ("entry", "Entry Level"),
        ("mid", "Mid Level"),
        ("senior", "Senior Level"),
        ("executive", "Executive"),
    ]
    TRIP_TYPE_CHOICES = [
        ("flights", "Flights"),
        ("hotels", "Hotels"),
        ("packages", "Packages"),
        ("activities", "Activities"),
        ("transport", "Transport"),
    ]
    STATUS_CHOICES = [
        ("active", "Active"),
        ("inactive", "Inactive"),
        ("sold", "Sold"),
        ("expired", "Expired"),
    ]

    REQUIRED_FIELDS_BY_TYPE = {
        "secondhand": ("condition",),
        "jobs": ("job_type", "experience", "salary"),
        "travel": ("trip_type", "duration"),
    }

    # Basic Information
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=100)
    slug = models.SlugField(max_length=150, unique=True, blank=True)
    description = models.TextField(max_length=1000, blank=True)
    listing_type = models.CharField(max_length=20, choices=LISTING_TYPE_CHOICES, default="marketplace")

    # Seller and Category
    seller = models.ForeignKey(User, on_delete=models.CASCADE, related_name="products")
    category = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="products"
    )

    # Pricing and Inventory
    price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    stock_quantity = models.PositiveIntegerField(default=1)

    # Presentation
    location = models.CharField(max_length=100, blank=True)
    image = models.URLField(max_length=2000, blank=True)
    tags = models.JSONField(default=list, blank=True)
    featured = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")

    # Secondhand
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, blank=True)
    # Jobs
    job_type = models.CharField(max_length=20, choices=JOB_TYPE_CHOICES, blank=True)
    experience = models.CharField(max_length=20, choices=EXPERIENCE_CHOICES, blank=True)
    salary = models.CharField(max_length=100, blank=True)
    # Travel
    trip_type = models.CharField(max_length=20, choices=TRIP_TYPE_CHOICES, blank=True)
    duration = models.CharField(max_length=100, blank=True)
    # Services
    service_type = models.CharField(max_length=100, blank=True)

    # Metrics
    view_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["status", "-created_at"], name="product_status_created_idx"),
            models.Index(fields=["listing_type", "status"], name="product_type_status_idx"),
            models.Index(fields=["seller", "status"], name="product_seller_status_idx"),
            models.Index(fields=["category", "status"], name="product_category_status_idx"),
            models.Index(fields=["featured", "status"], name="product_featured_status_idx"),
            models.Index(fields=["price"], name="product_price_idx"),
            models.Index(fields=["-view_count"], name="product_views_idx"),
        ]

    def clean(self):
        errors = {}
        for field_name in self.REQUIRED_FIELDS_BY_TYPE.get(self.listing_type, ()):
            if not getattr(self, field_name):
                errors[field_name] = f"This field is required for {self.listing_type} listings."
        if self.is_purchasable and self.price is None:
            errors["price"] = "Price is required for this listing type."
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(f"{self.title}-{str(self.id)[:8]}")
        super().save(*args, **kwargs)

    @property
    def is_purchasable(self):
        return self.listing_type in self.PURCHASABLE_TYPES

    @property
    def is_available(self):
        return self.status == "active" and self.stock_quantity > 0

    def __str__(self):
        return self.title
