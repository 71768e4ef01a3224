"""
CategoryService - browse categories and their filter options.

Active category lists are cached and dropped on every admin write.
"""

import logging
from decimal import Decimal
from typing import Any, Dict

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import Count
from django.utils.text import slugify

from marketplace.catalog.domain.models import Category
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from utils.rbac import is_admin


logger = logging.getLogger(__name__)

CATEGORIES_CACHE_KEY = "marketplace:categories:all"
MAIN_CATEGORIES_CACHE_KEY = "marketplace:categories:main"

CATEGORY_FIELDS = (
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
)

# filters JSON key -> Product field it narrows
CHOICE_FILTERS = {
    "conditions": "condition",
    "jobTypes": "job_type",
    "experienceLevels": "experience",
    "tripTypes": "trip_type",
}


class CategoryService(BaseService):
    """
    Category browsing and admin management.
    """

    def _timeout(self):
        return getattr(settings, "MARKETPLACE_CACHE_TIMEOUT", 300)

    def _active(self):
        # product_count is computed per read so cached lists never hold stale counts
        return Category.objects.filter(is_active=True)

    def invalidate_cache(self):
        cache.delete_many([CATEGORIES_CACHE_KEY, MAIN_CATEGORIES_CACHE_KEY])

    @BaseService.log_performance
    def list_categories(self) -> ServiceResult[list]:
        """Active categories ordered by sort_order then name."""
        try:
            categories = cache.get(CATEGORIES_CACHE_KEY)
            if categories is None:
                categories = list(
                    self._active()
                    .select_related("parent")
                    .prefetch_related("subcategories")
                    .order_by("sort_order", "name")
                )
                cache.set(CATEGORIES_CACHE_KEY, categories, self._timeout())
            return service_ok(categories)

        except Exception as e:
            self.logger.error(f"Error listing categories: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_main_categories(self) -> ServiceResult[list]:
        """Active categories without a parent."""
        try:
            categories = cache.get(MAIN_CATEGORIES_CACHE_KEY)
            if categories is None:
                categories = list(
                    self._active()
                    .filter(parent__isnull=True)
                    .prefetch_related("subcategories")
                    .order_by("sort_order", "name")
                )
                cache.set(MAIN_CATEGORIES_CACHE_KEY, categories, self._timeout())
            return service_ok(categories)

        except Exception as e:
            self.logger.error(f"Error listing main categories: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_category(self, slug: str) -> ServiceResult[Category]:
        try:
            category = self._active().select_related("parent").filter(slug=slug).first()
            if category is None:
                return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {slug} not found")
            return service_ok(category)

        except Exception as e:
            self.logger.error(f"Error getting category {slug}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_filter_options(self, slug: str) -> ServiceResult[Dict[str, Any]]:
        """
        Every option declared in the category's ``filters`` JSON with the
        number of active listings matching it.

        Price ranges match ``min <= price < max``; a null ``max`` is open ended.

        Example:
            >>> category_service.get_filter_options("secondhand").value["conditions"]
            [{"id": "good", "label": "Good", "count": 3}, ...]
        """
        try:
            category = Category.objects.filter(slug=slug, is_active=True).first()
            if category is None:
                return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {slug} not found")

            listings = category.active_listings()
            declared = category.filters or {}
            options = {}

            price_ranges = []
            for price_range in declared.get("priceRanges", []):
                queryset = listings.filter(price__isnull=False)
                if price_range.get("min") is not None:
                    queryset = queryset.filter(price__gte=Decimal(str(price_range["min"])))
                if price_range.get("max") is not None:
                    queryset = queryset.filter(price__lt=Decimal(str(price_range["max"])))
                price_ranges.append({**price_range, "count": queryset.count()})
            if "priceRanges" in declared:
                options["priceRanges"] = price_ranges

            for key, field_name in CHOICE_FILTERS.items():
                if key not in declared:
                    continue
                counts = {
                    row[field_name]: row["total"]
                    for row in listings.order_by().values(field_name).annotate(total=Count("id"))
                }
                options[key] = [{**option, "count": counts.get(option.get("id"), 0)} for option in declared[key]]

            return service_ok(
                {
                    "category": category.slug,
                    "total": listings.count(),
                    "filters": options,
                }
            )

        except Exception as e:
            self.logger.error(f"Error building filter options for category {slug}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def create_category(self, data: Dict[str, Any], user) -> ServiceResult[Category]:
        try:
            if not is_admin(user):
                return service_err(ErrorCodes.PERMISSION_DENIED, "Admin access required")

            slug = data.get("slug") or slugify(data.get("name", ""))
            if Category.objects.filter(slug=slug).exists():
                return service_err(ErrorCodes.DUPLICATE_SLUG, f"Category with slug '{slug}' already exists")

            fields = {k: v for k, v in data.items() if k in CATEGORY_FIELDS}
            fields["slug"] = slug
            category = Category.objects.create(**fields)
            self.invalidate_cache()

            self.logger.info(f"Created category {category.slug} by admin {user.id}")
            return service_ok(category)

        except Exception as e:
            self.logger.error(f"Error creating category: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_category(self, slug: str, data: Dict[str, Any], user) -> ServiceResult[Category]:
        try:
            if not is_admin(user):
                return service_err(ErrorCodes.PERMISSION_DENIED, "Admin access required")

            category = Category.objects.filter(slug=slug).first()
            if category is None:
                return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {slug} not found")

            new_slug = data.get("slug")
            if new_slug and new_slug != category.slug and Category.objects.filter(slug=new_slug).exists():
                return service_err(ErrorCodes.DUPLICATE_SLUG, f"Category with slug '{new_slug}' already exists")

            parent = data.get("parent")
            if parent is not None and parent.pk == category.pk:
                return service_err(ErrorCodes.INVALID_INPUT, "A category cannot be its own parent")

            for field in CATEGORY_FIELDS:
                if field in data:
                    setattr(category, field, data[field])
            category.save()
            self.invalidate_cache()

            self.logger.info(f"Updated category {category.slug} by admin {user.id}")
            return service_ok(category)

        except Exception as e:
            self.logger.error(f"Error updating category {slug}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def delete_category(self, slug: str, user) -> ServiceResult[bool]:
        try:
            if not is_admin(user):
                return service_err(ErrorCodes.PERMISSION_DENIED, "Admin access required")

            category = Category.objects.filter(slug=slug).first()
            if category is None:
                return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {slug} not found")

            if category.products.exists():
                return service_err(ErrorCodes.CATEGORY_IN_USE, "Cannot delete a category that still has listings")

            category.delete()
            self.invalidate_cache()

            self.logger.warning(f"Deleted category {slug} by admin {user.id}")
            return service_ok(True)

        except Exception as e:
            self.logger.error(f"Error deleting category {slug}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
