import django_filters
from django.db.models import Q

from .models import Product


class CommaSeparatedFilter(django_filters.CharFilter):
    """Matches any of the comma separated values, e.g. ``?listing_type=jobs,travel``."""

    def filter(self, qs, value):
        if not value:
            return qs
        values = [item.strip() for item in value.split(",") if item.strip()]
        if not values:
            return qs
        return qs.filter(**{f"{self.field_name}__in": values})


class ProductFilter(django_filters.FilterSet):
    """
    Query string filters for the listing browse endpoint
    """

    search = django_filters.CharFilter(method="filter_search")

    listing_type = CommaSeparatedFilter(field_name="listing_type")
    category = django_filters.CharFilter(field_name="category__slug", lookup_expr="exact")

    # Price range filters
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")

    # Type specific filters
    condition = CommaSeparatedFilter(field_name="condition")
    job_type = CommaSeparatedFilter(field_name="job_type")
    experience = CommaSeparatedFilter(field_name="experience")
    trip_type = CommaSeparatedFilter(field_name="trip_type")

    featured = django_filters.BooleanFilter(field_name="featured")
    seller = django_filters.UUIDFilter(field_name="seller__id")

    class Meta:
        model = Product
        fields = []

    def filter_search(self, queryset, name, value):
        """Search title, description and tags"""
        if value:
            return queryset.filter(
                Q(title__icontains=value) | Q(description__icontains=value) | Q(tags__icontains=value)
            )
        return queryset
