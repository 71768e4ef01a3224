"""
DashboardService - admin and seller dashboards.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Avg, Count, Q, Sum

from marketplace.cart.domain.services.pricing_service import to_money
from marketplace.catalog.domain.models import Product
from marketplace.ordering.domain.models import Order, SubOrder
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, paginate, service_err, service_ok
from utils.rbac import ROLE_ADMIN

User = get_user_model()
logger = logging.getLogger(__name__)


class DashboardService(BaseService):
    """
    Read-mostly aggregates for the admin console and the seller dashboard,
    plus admin user moderation.

    Role checks live in the views' permission classes; the admin-account
    guards (no deleting or deactivating admins) live here.
    """

    @BaseService.log_performance
    def admin_stats(self) -> ServiceResult[Dict]:
        """Platform totals; revenue is the sum of all order totals as a 2-dp string."""
        try:
            revenue = Order.objects.aggregate(total=Sum("total"))["total"] or Decimal("0")
            return service_ok(
                {
                    "total_users": User.objects.count(),
                    "total_products": Product.objects.count(),
                    "total_orders": Order.objects.count(),
                    "total_revenue": f"{to_money(revenue):.2f}",
                }
            )

        except Exception as e:
            self.logger.error(f"Error computing admin stats: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_users(
        self, search: Optional[str] = None, role: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict]:
        try:
            queryset = User.objects.all().order_by("-date_joined")
            if search:
                queryset = queryset.filter(
                    Q(username__icontains=search)
                    | Q(email__icontains=search)
                    | Q(first_name__icontains=search)
                    | Q(last_name__icontains=search)
                )
            if role:
                queryset = queryset.filter(role=role)
            return service_ok(paginate(queryset, page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing users: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_orders(self, status: Optional[str] = None, page: int = 1, page_size: int = 20) -> ServiceResult[Dict]:
        try:
            queryset = (
                Order.objects.select_related("customer")
                .prefetch_related("sub_orders__seller", "sub_orders__items")
                .order_by("-created_at")
            )
            if status:
                queryset = queryset.filter(overall_status=status)
            return service_ok(paginate(queryset, page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing orders for admin: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def _get_user(self, user_id):
        try:
            return User.objects.filter(id=user_id).first()
        except ValidationError:
            return None

    @BaseService.log_performance
    @transaction.atomic
    def delete_user(self, user_id: str, acting_user) -> ServiceResult[bool]:
        try:
            user = self._get_user(user_id)
            if user is None:
                return service_err(ErrorCodes.USER_NOT_FOUND, "User not found")
            if user.role == ROLE_ADMIN or user.is_superuser:
                return service_err(ErrorCodes.PERMISSION_DENIED, "Cannot delete admin users")

            username = user.username
            user.delete()
            self.logger.warning(f"Deleted user {username} (id={user_id}) by admin {acting_user.id}")
            return service_ok(True)

        except Exception as e:
            self.logger.error(f"Error deleting user {user_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def set_user_active(self, user_id: str, is_active: bool, acting_user) -> ServiceResult[User]:
        try:
            user = self._get_user(user_id)
            if user is None:
                return service_err(ErrorCodes.USER_NOT_FOUND, "User not found")
            if not is_active and (user.role == ROLE_ADMIN or user.is_superuser):
                return service_err(ErrorCodes.PERMISSION_DENIED, "Cannot deactivate admin users")

            user.is_active = is_active
            user.save(update_fields=["is_active"])
            self.logger.info(f"User {user.id} is_active={is_active} set by admin {acting_user.id}")
            return service_ok(user)

        except Exception as e:
            self.logger.error(f"Error updating status of user {user_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def seller_stats(self, user) -> ServiceResult[Dict]:
        """
        Listing, sub-order and revenue figures for one seller.

        Revenue counts every sub-order that is not cancelled; the average
        rating only covers listings that have been rated.
        """
        try:
            listings = Product.objects.filter(seller=user).aggregate(
                total=Count("id"),
                active=Count("id", filter=Q(status="active")),
                average_rating=Avg("rating", filter=Q(review_count__gt=0)),
            )
            sub_orders = SubOrder.objects.filter(seller=user).aggregate(
                total=Count("id"),
                pending=Count("id", filter=Q(status="pending")),
                revenue=Sum("subtotal", filter=~Q(status="cancelled")),
            )
            average_rating = listings["average_rating"]

            return service_ok(
                {
                    "total_listings": listings["total"],
                    "active_listings": listings["active"],
                    "total_sub_orders": sub_orders["total"],
                    "pending_sub_orders": sub_orders["pending"],
                    "revenue": f"{to_money(sub_orders['revenue'] or 0):.2f}",
                    "average_rating": round(float(average_rating), 1) if average_rating is not None else 0.0,
                }
            )

        except Exception as e:
            self.logger.error(f"Error computing seller stats for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
