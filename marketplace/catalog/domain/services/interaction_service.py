"""
InteractionService - likes and comment threads on listings.
"""

import logging
from typing import Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import BooleanField, Exists, OuterRef, Prefetch, Value

from marketplace.catalog.domain.models import CommentLike, Product, ProductComment, ProductLike
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


User = get_user_model()
logger = logging.getLogger(__name__)


class InteractionService(BaseService):
    """
    Likes on listings and comments, and one level deep comment threads.
    """

    def _with_is_liked(self, queryset, user):
        if user is not None and getattr(user, "is_authenticated", False):
            return queryset.annotate(is_liked=Exists(CommentLike.objects.filter(comment=OuterRef("pk"), user=user)))
        return queryset.annotate(is_liked=Value(False, output_field=BooleanField()))

    @BaseService.log_performance
    @transaction.atomic
    def toggle_product_like(self, user: User, product_id: str) -> ServiceResult[Dict]:
        """
        Like a listing, or unlike it if already liked.

        Returns:
            ServiceResult with {"likes": int, "is_liked": bool}
        """
        try:
            try:
                product = Product.objects.select_for_update().get(id=product_id)
            except (Product.DoesNotExist, ValidationError):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            deleted, _ = ProductLike.objects.filter(user=user, product=product).delete()
            if not deleted:
                ProductLike.objects.create(user=user, product=product)

            product.like_count = ProductLike.objects.filter(product=product).count()
            product.save(update_fields=["like_count"])

            self.logger.info(f"User {user.id} {'unliked' if deleted else 'liked'} product {product.id}")
            return service_ok({"likes": product.like_count, "is_liked": not deleted})

        except Exception as e:
            self.logger.error(f"Error toggling like on product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_comments(self, product_id: str, user=None) -> ServiceResult[list]:
        """Top-level comments newest first, replies oldest first, each with ``is_liked``."""
        try:
            try:
                exists = Product.objects.filter(id=product_id).exists()
            except ValidationError:
                exists = False
            if not exists:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            replies = self._with_is_liked(ProductComment.objects.select_related("author"), user).order_by("created_at")
            comments = (
                self._with_is_liked(ProductComment.objects.filter(product_id=product_id, parent__isnull=True), user)
                .select_related("author")
                .prefetch_related(Prefetch("replies", queryset=replies))
                .order_by("-created_at")
            )
            return service_ok(list(comments))

        except Exception as e:
            self.logger.error(f"Error listing comments for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def add_comment(
        self, user: User, product_id: str, content: str, parent_id: Optional[int] = None
    ) -> ServiceResult[ProductComment]:
        """
        Comment on a listing or reply to a comment.

        A reply to a reply is attached to the top-level comment.
        """
        try:
            content = (content or "").strip()
            if not content:
                return service_err(ErrorCodes.INVALID_INPUT, "Comment text is required")

            try:
                product = Product.objects.get(id=product_id)
            except (Product.DoesNotExist, ValidationError):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            parent = None
            if parent_id:
                parent = ProductComment.objects.filter(id=parent_id, product=product).first()
                if parent is None:
                    return service_err(ErrorCodes.COMMENT_NOT_FOUND, f"Comment {parent_id} not found")
                if parent.parent_id:
                    parent = parent.parent

            comment = ProductComment.objects.create(product=product, author=user, parent=parent, content=content)
            comment.is_liked = False

            self.logger.info(f"User {user.id} commented on product {product.id} (comment={comment.id})")
            return service_ok(comment)

        except Exception as e:
            self.logger.error(f"Error adding comment on product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def toggle_comment_like(self, user: User, comment_id: int) -> ServiceResult[Dict]:
        try:
            comment = ProductComment.objects.select_for_update().filter(id=comment_id).first()
            if comment is None:
                return service_err(ErrorCodes.COMMENT_NOT_FOUND, f"Comment {comment_id} not found")

            deleted, _ = CommentLike.objects.filter(user=user, comment=comment).delete()
            if not deleted:
                CommentLike.objects.create(user=user, comment=comment)

            comment.like_count = CommentLike.objects.filter(comment=comment).count()
            comment.save(update_fields=["like_count"])

            return service_ok({"likes": comment.like_count, "is_liked": not deleted})

        except Exception as e:
            self.logger.error(f"Error toggling like on comment {comment_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
