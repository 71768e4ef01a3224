import json
import re
from decimal import Decimal, InvalidOperation

from rest_framework import serializers

from authentication.api.serializers import PublicUserSerializer
from marketplace.catalog.domain.models import Category, Product

from .category_serializers import CategorySummarySerializer


class PriceField(serializers.DecimalField):
    """Decimal price that also accepts display strings such as ``"$1,200"``."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 10)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("min_value", Decimal("0"))
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            cleaned = re.sub(r"[^\d.\-]", "", data)
            if not cleaned:
                self.fail("invalid")
            try:
                data = Decimal(cleaned)
            except InvalidOperation:
                self.fail("invalid")
        return super().to_internal_value(data)


class TagsField(serializers.ListField):
    """Tags as a list, a JSON encoded list, or a comma separated string (multipart forms)."""

    child = serializers.CharField(max_length=50)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.strip()
            if data.startswith("["):
                try:
                    data = json.loads(data)
                except ValueError:
                    raise serializers.ValidationError("Tags must be a list of strings.")
            else:
                data = [tag.strip() for tag in data.split(",") if tag.strip()]
        return super().to_internal_value(data)


class ProductListSerializer(serializers.ModelSerializer):
    """Listing card for browse pages"""

    seller = PublicUserSerializer(read_only=True)
    category = CategorySummarySerializer(read_only=True)
    is_liked = serializers.SerializerMethodField()
    comments_count = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "slug",
            "listing_type",
            "category",
            "price",
            "location",
            "image",
            "featured",
            "status",
            "stock_quantity",
            "condition",
            "job_type",
            "experience",
            "salary",
            "trip_type",
            "duration",
            "service_type",
            "tags",
            "rating",
            "review_count",
            "like_count",
            "view_count",
            "is_liked",
            "comments_count",
            "seller",
            "created_at",
        ]
        read_only_fields = fields

    def get_is_liked(self, obj):
        return bool(getattr(obj, "is_liked", False))

    def get_comments_count(self, obj):
        count = getattr(obj, "comments_count", None)
        if count is None:
            count = obj.comments.filter(parent__isnull=True).count()
        return count


class ProductDetailSerializer(ProductListSerializer):
    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + ["description", "is_purchasable", "updated_at"]
        read_only_fields = fields


class ProductWriteSerializer(serializers.ModelSerializer):
    """
    Create/update payload for listings.

    ``category`` is given by slug. Type specific fields are required
    according to ``Product.REQUIRED_FIELDS_BY_TYPE``.
    """

    title = serializers.CharField(min_length=3, max_length=100)
    price = PriceField(required=False, allow_null=True)
    tags = TagsField(required=False)
    category = serializers.SlugRelatedField(
        slug_field="slug",
        queryset=Category.objects.filter(is_active=True),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Product
        fields = [
            "title",
            "description",
            "listing_type",
            "category",
            "price",
            "stock_quantity",
            "location",
            "image",
            "tags",
            "featured",
            "status",
            "condition",
            "job_type",
            "experience",
            "salary",
            "trip_type",
            "duration",
            "service_type",
        ]

    def validate(self, attrs):
        instance = self.instance
        listing_type = attrs.get("listing_type", getattr(instance, "listing_type", "marketplace"))

        def current(field_name):
            if field_name in attrs:
                return attrs[field_name]
            return getattr(instance, field_name, None)

        errors = {}
        for field_name in Product.REQUIRED_FIELDS_BY_TYPE.get(listing_type, ()):
            if not current(field_name):
                errors[field_name] = f"This field is required for {listing_type} listings."
        if listing_type in Product.PURCHASABLE_TYPES and current("price") is None:
            errors["price"] = "Price is required for this listing type."
        if errors:
            raise serializers.ValidationError(errors)
        return attrs
