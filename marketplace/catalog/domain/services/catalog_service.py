"""
CatalogService - listing browse and CRUD

Handles listing browsing (filters, sorting, pagination), the featured strip,
view tracking and seller-side create/update/delete.
"""

import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import BooleanField, Count, Exists, F, OuterRef, Q, Value

from marketplace.catalog.domain.models import Product, ProductLike
from marketplace.filters import ProductFilter
from marketplace.infra.observability.metrics import listings_created_total
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, paginate, service_err, service_ok
from utils.rbac import is_admin, is_seller


User = get_user_model()
logger = logging.getLogger(__name__)

FEATURED_CACHE_KEY = "marketplace:featured:{limit}"
MAX_FEATURED = 20

# Fields a seller may set on create/update
EDITABLE_FIELDS = (
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
)


def annotate_listings(queryset, user=None):
    """Add ``comments_count`` and ``is_liked`` to a listing queryset."""
    queryset = queryset.annotate(
        comments_count=Count("comments", filter=Q(comments__parent__isnull=True), distinct=True)
    )
    if user is not None and getattr(user, "is_authenticated", False):
        is_liked = Exists(ProductLike.objects.filter(product=OuterRef("pk"), user=user))
    else:
        is_liked = Value(False, output_field=BooleanField())
    return queryset.annotate(is_liked=is_liked)


def invalidate_featured_cache():
    cache.delete_many([FEATURED_CACHE_KEY.format(limit=limit) for limit in range(1, MAX_FEATURED + 1)])


def _validation_message(exc: ValidationError) -> str:
    if hasattr(exc, "message_dict"):
        return "; ".join(f"{field}: {' '.join(messages)}" for field, messages in exc.message_dict.items())
    return " ".join(exc.messages)


class CatalogService(BaseService):
    """
    Service for listing catalog operations.

    Responsibilities:
    - Browse active listings with filtering, sorting and pagination
    - Featured listings (cached ids)
    - Listing details and view counting
    - Create listings (sellers and admins)
    - Update/delete listings (owner or admin)
    - A seller's own listings in every status
    """

    SORT_FIELDS = ("created_at", "price", "view_count", "rating", "title")
    DEFAULT_PAGE_SIZE = 12

    def _base_queryset(self):
        return Product.objects.select_related("seller", "category")

    def _get(self, product_id, queryset=None):
        queryset = queryset if queryset is not None else Product.objects.all()
        try:
            return queryset.get(id=product_id)
        except (Product.DoesNotExist, ValidationError):
            return None

    @BaseService.log_performance
    def list_products(
        self,
        filters: Optional[Dict[str, Any]] = None,
        user=None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> ServiceResult[Dict[str, Any]]:
        """
        List active, in-stock listings.

        Args:
            filters: Query parameters understood by ``ProductFilter``
            user: Requesting user, used for ``is_liked``
            page: Page number (1-indexed)
            page_size: Items per page (capped at 100)
            sort_by: One of SORT_FIELDS, anything else falls back to created_at
            sort_order: "asc" or "desc"

        Example:
            >>> result = catalog_service.list_products({"listing_type": "jobs,travel"}, page=2)
            >>> result.value["results"]
        """
        try:
            queryset = self._base_queryset().filter(status="active", stock_quantity__gt=0)

            filterset = ProductFilter(data=filters or {}, queryset=queryset)
            if not filterset.is_valid():
                errors = "; ".join(f"{field}: {' '.join(msgs)}" for field, msgs in filterset.errors.items())
                return service_err(ErrorCodes.VALIDATION_ERROR, errors)
            queryset = annotate_listings(filterset.qs, user)

            if sort_by not in self.SORT_FIELDS:
                sort_by = "created_at"
            prefix = "" if sort_order == "asc" else "-"
            queryset = queryset.order_by(f"{prefix}{sort_by}", "-created_at")

            page_data = paginate(queryset, page, page_size)
            self.logger.info(
                f"Listed products: count={page_data['count']}, page={page_data['page']}/{page_data['num_pages']}"
            )
            return service_ok(page_data)

        except Exception as e:
            self.logger.error(f"Error listing products: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_featured(self, limit: int = 6, user=None) -> ServiceResult[list]:
        """
        Featured active listings, most viewed first then newest.

        Only the ids are cached so ``is_liked`` stays per user.
        """
        try:
            try:
                limit = int(limit)
            except (TypeError, ValueError):
                limit = 6
            limit = min(max(limit, 1), MAX_FEATURED)

            cache_key = FEATURED_CACHE_KEY.format(limit=limit)
            product_ids = cache.get(cache_key)
            if product_ids is None:
                product_ids = list(
                    Product.objects.filter(featured=True, status="active")
                    .order_by("-view_count", "-created_at")
                    .values_list("id", flat=True)[:limit]
                )
                cache.set(cache_key, product_ids, getattr(settings, "MARKETPLACE_CACHE_TIMEOUT", 300))

            products = annotate_listings(self._base_queryset().filter(id__in=product_ids), user)
            products = list(products.order_by("-view_count", "-created_at"))
            return service_ok(products)

        except Exception as e:
            self.logger.error(f"Error getting featured products: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_product(self, product_id: str, user=None) -> ServiceResult[Product]:
        try:
            product = self._get(product_id, annotate_listings(self._base_queryset(), user))
            if product is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
            return service_ok(product)

        except Exception as e:
            self.logger.error(f"Error getting product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def increment_views(self, product_id: str) -> ServiceResult[int]:
        """Bump the view counter and return the new value."""
        try:
            try:
                updated = Product.objects.filter(id=product_id).update(view_count=F("view_count") + 1)
            except ValidationError:
                updated = 0
            if not updated:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            view_count = Product.objects.values_list("view_count", flat=True).get(id=product_id)
            return service_ok(view_count)

        except Exception as e:
            self.logger.error(f"Error incrementing views for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def create_product(self, data: Dict[str, Any], user: User) -> ServiceResult[Product]:
        """
        Create a listing (seller or admin only).

        Type specific requirements (condition for secondhand, job fields for
        jobs, trip fields for travel) are enforced by ``Product.clean``.

        Example:
            >>> result = catalog_service.create_product(
            ...     data={"title": "Road bike", "listing_type": "secondhand", "condition": "good", "price": "120"},
            ...     user=seller_user,
            ... )
        """
        try:
            if not is_seller(user):
                return service_err(ErrorCodes.PERMISSION_DENIED, "Only sellers can create listings")

            product = Product(seller=user, **{k: v for k, v in data.items() if k in EDITABLE_FIELDS})
            try:
                product.full_clean(exclude=["slug"])
            except ValidationError as e:
                return service_err(ErrorCodes.INVALID_PRODUCT_DATA, _validation_message(e))
            product.save()

            listings_created_total.labels(listing_type=product.listing_type).inc()
            if product.featured:
                invalidate_featured_cache()

            self.logger.info(f"Created product: {product.title} (id={product.id}) by seller {user.id}")
            return service_ok(product)

        except Exception as e:
            self.logger.error(f"Error creating product: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_product(self, product_id: str, data: Dict[str, Any], user: User) -> ServiceResult[Product]:
        """
        Update a listing (owner or admin).

        Example:
            >>> result = catalog_service.update_product(product_id, {"price": "899.00"}, user=seller_user)
        """
        try:
            product = self._get(product_id, Product.objects.select_for_update())
            if product is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            if product.seller_id != user.id and not is_admin(user):
                return service_err(ErrorCodes.NOT_PRODUCT_OWNER, "You do not own this product")

            updated_fields = []
            for field in EDITABLE_FIELDS:
                if field in data:
                    setattr(product, field, data[field])
                    updated_fields.append(field)

            try:
                product.full_clean(exclude=["slug"])
            except ValidationError as e:
                return service_err(ErrorCodes.INVALID_PRODUCT_DATA, _validation_message(e))
            product.save()
            invalidate_featured_cache()

            self.logger.info(f"Updated product: {product.title} (id={product_id}), fields={updated_fields}")
            return service_ok(product)

        except Exception as e:
            self.logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def delete_product(self, product_id: str, user: User) -> ServiceResult[bool]:
        try:
            product = self._get(product_id)
            if product is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            if product.seller_id != user.id and not is_admin(user):
                return service_err(ErrorCodes.NOT_PRODUCT_OWNER, "You do not own this product")

            title = product.title
            product.delete()
            invalidate_featured_cache()

            self.logger.warning(f"Deleted product: {title} (id={product_id}) by user {user.id}")
            return service_ok(True)

        except Exception as e:
            self.logger.error(f"Error deleting product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_seller_products(
        self, user: User, status: Optional[str] = None, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> ServiceResult[Dict[str, Any]]:
        """All of a seller's listings, whatever their status."""
        try:
            queryset = annotate_listings(self._base_queryset().filter(seller=user), user)
            if status:
                queryset = queryset.filter(status=status)
            return service_ok(paginate(queryset.order_by("-created_at"), page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing products of seller {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
