from django.db import models
from django.utils.text import slugify


LISTING_TYPE_CHOICES = [
    ("marketplace", "Marketplace"),
    ("secondhand", "Secondhand"),
    ("jobs", "Jobs"),
    ("services", "Services"),
    ("travel", "Travel"),
]


class Category(models.Model):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    description = models.TextField(max_length=500, blank=True)
    icon = models.CharField(max_length=50, blank=True)
    gradient = models.CharField(max_length=100, blank=True)
    listing_type = models.CharField(max_length=20, choices=LISTING_TYPE_CHOICES, blank=True)
    parent = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="subcategories"
    )
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)
    # Filter definitions shown by the browse page, e.g. {"conditions": [...], "priceRanges": [...]}
    filters = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "Categories"
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["is_active", "sort_order"], name="category_active_sort_idx"),
            models.Index(fields=["parent"], name="category_parent_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def active_listings(self):
        """Active listings in this category or its children, plus any of its listing type."""
        scope = models.Q(category=self) | models.Q(category__parent=self)
        if self.listing_type:
            scope |= models.Q(listing_type=self.listing_type)
        return self.products.model.objects.filter(scope, status="active")

    @property
    def product_count(self):
        return self.active_listings().count()

    def __str__(self):
        return self.name
