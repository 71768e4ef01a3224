from rest_framework import serializers

from marketplace.catalog.domain.models import Category


class CategorySummarySerializer(serializers.ModelSerializer):
    """Category reference embedded in listings"""

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "listing_type"]
        read_only_fields = fields


class CategorySerializer(serializers.ModelSerializer):
    parent = serializers.SlugRelatedField(slug_field="slug", read_only=True)
    subcategories = serializers.SerializerMethodField()
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "icon",
            "gradient",
            "listing_type",
            "parent",
            "subcategories",
            "product_count",
            "is_active",
            "sort_order",
            "filters",
            "created_at",
        ]
        read_only_fields = fields

    def get_subcategories(self, obj):
        children = [child for child in obj.subcategories.all() if child.is_active]
        return CategorySummarySerializer(children, many=True).data

    def get_product_count(self, obj):
        return obj.product_count


class CategoryWriteSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=120, required=False)
    parent = serializers.SlugRelatedField(
        slug_field="slug", queryset=Category.objects.all(), required=False, allow_null=True
    )

    class Meta:
        model = Category
        fields = [
            "name",
            "slug",
            "description",
            "icon",
            "gradient",
            "listing_type",
            "parent",
            "is_active",
            "sort_order",
            "filters",
        ]

    def validate_filters(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Filters must be an object.")
        for key, options in value.items():
            if not isinstance(options, list):
                raise serializers.ValidationError(f"'{key}' must be a list of options.")
            for option in options:
                if not isinstance(option, dict) or "id" not in option:
                    raise serializers.ValidationError(f"Every option in '{key}' needs an 'id'.")
        return value


class FilterOptionSerializer(serializers.Serializer):
    id = serializers.CharField()
    label = serializers.CharField(required=False)
    min = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    max = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    count = serializers.IntegerField()


class CategoryFiltersResponseSerializer(serializers.Serializer):
    category = serializers.CharField()
    total = serializers.IntegerField()
    filters = serializers.DictField(child=FilterOptionSerializer(many=True))
