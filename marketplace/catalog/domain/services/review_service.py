"""
ReviewService - star ratings on listings.

One rating per user and listing; rating again replaces the previous one.
The listing's ``rating``/``review_count`` are recomputed after each change.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Avg, Count

from marketplace.catalog.domain.models import Product, ProductReview
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, paginate, service_err, service_ok


User = get_user_model()
logger = logging.getLogger(__name__)


class ReviewService(BaseService):
    """
    Service for listing ratings.

    Responsibilities:
    - Create or replace a user's rating on a listing
    - Keep the listing's average rating and review count in sync
    - Paginated ratings per listing
    """

    @BaseService.log_performance
    @transaction.atomic
    def rate_product(self, user: User, product_id: str, rating: int, comment: str = "") -> ServiceResult[Dict]:
        """
        Create or update ``user``'s rating of a listing.

        Returns:
            ServiceResult with {"review", "created", "rating", "review_count"}
        """
        try:
            try:
                rating = int(rating)
            except (TypeError, ValueError):
                return service_err(ErrorCodes.INVALID_INPUT, "Rating must be between 1 and 5")
            if not 1 <= rating <= 5:
                return service_err(ErrorCodes.INVALID_INPUT, "Rating must be between 1 and 5")

            try:
                product = Product.objects.select_for_update().get(id=product_id)
            except (Product.DoesNotExist, ValidationError):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            review, created = ProductReview.objects.update_or_create(
                product=product,
                reviewer=user,
                defaults={"rating": rating, "comment": comment or ""},
            )
            self.update_product_rating(product)

            self.logger.info(
                f"{'Created' if created else 'Updated'} rating {rating} for product {product.id} by user {user.id}"
            )
            return service_ok(
                {
                    "review": review,
                    "created": created,
                    "rating": product.rating,
                    "review_count": product.review_count,
                }
            )

        except Exception as e:
            self.logger.error(f"Error rating product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def update_product_rating(self, product: Product) -> Product:
        """Recompute the average (one decimal, half up) and count from stored reviews."""
        stats = ProductReview.objects.filter(product=product).aggregate(average=Avg("rating"), total=Count("id"))
        average = stats["average"]
        product.review_count = stats["total"] or 0
        product.rating = (
            Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP) if average else Decimal("0")
        )
        product.save(update_fields=["rating", "review_count", "updated_at"])
        return product

    @BaseService.log_performance
    def list_product_ratings(self, product_id: str, page: int = 1, page_size: int = 10) -> ServiceResult[Dict]:
        try:
            try:
                exists = Product.objects.filter(id=product_id).exists()
            except ValidationError:
                exists = False
            if not exists:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            queryset = ProductReview.objects.filter(product_id=product_id).select_related("reviewer")
            return service_ok(paginate(queryset.order_by("-created_at"), page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing ratings for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
