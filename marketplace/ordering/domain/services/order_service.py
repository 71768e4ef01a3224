"""
OrderService - order lifecycle

Turns a cart into an order split into per-seller sub-orders, and handles
seller fulfilment updates, customer cancellation and invoices. The order's
``overall_status`` is always recomputed from its sub-orders.
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone

from marketplace.cart.domain.models import CartItem
from marketplace.cart.domain.services.cart_service import CartService
from marketplace.cart.domain.services.inventory_service import InventoryService
from marketplace.cart.domain.services.pricing_service import PricingService, to_money
from marketplace.infra.observability.metrics import (
    order_value,
    orders_cancelled_total,
    orders_placed_total,
    sub_order_status_changes_total,
)
from marketplace.ordering.domain.models import Order, OrderItem, SubOrder
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, paginate, service_err, service_ok
from utils.rbac import is_admin

User = get_user_model()
logger = logging.getLogger(__name__)

PAYMENT_METHODS = [choice for choice, _ in Order.PAYMENT_METHOD_CHOICES]
SUB_ORDER_STATUSES = [choice for choice, _ in SubOrder.STATUS_CHOICES]


class OrderService(BaseService):
    """
    Service for managing order lifecycle.

    Dependencies:
    - CartService: Read and clear the customer's cart
    - InventoryService: Reserve and release stock
    - PricingService: Compute totals server side
    """

    def __init__(
        self,
        cart_service: CartService = None,
        inventory_service: InventoryService = None,
        pricing_service: PricingService = None,
    ):
        super().__init__()
        self.inventory_service = inventory_service or InventoryService()
        self.pricing_service = pricing_service or PricingService()
        self.cart_service = cart_service or CartService(self.inventory_service, self.pricing_service)

    def _order_queryset(self):
        return Order.objects.select_related("customer").prefetch_related(
            "sub_orders__seller", "sub_orders__items__product"
        )

    def _get_order(self, order_id, queryset=None):
        queryset = queryset if queryset is not None else self._order_queryset()
        try:
            return queryset.get(id=order_id)
        except (Order.DoesNotExist, ValidationError):
            return None

    def _validate_shipping_address(self, shipping_address) -> Optional[str]:
        if not isinstance(shipping_address, dict):
            return "Shipping address is required"
        missing = [
            field for field in Order.SHIPPING_ADDRESS_FIELDS if not str(shipping_address.get(field) or "").strip()
        ]
        if missing:
            return f"Missing shipping address fields: {', '.join(missing)}"
        return None

    @BaseService.log_performance
    @transaction.atomic
    def create_order(
        self,
        user: User,
        shipping_address: Dict,
        payment_method: str = "card",
        coupon_code: Optional[str] = None,
    ) -> ServiceResult[Order]:
        """
        Create an order from the user's cart.

        Steps: validate input and cart, price the cart, reserve stock per
        line, write the order with one sub-order per seller, clear the cart.
        Any failure releases what was reserved.

        Example:
            >>> result = order_service.create_order(user, address, payment_method="cod", coupon_code="SAVE10")
            >>> result.value.order_number
            'ORD-1718000000000-7K2QX'
        """
        try:
            address_error = self._validate_shipping_address(shipping_address)
            if address_error:
                return service_err(ErrorCodes.VALIDATION_ERROR, address_error)
            if payment_method not in PAYMENT_METHODS:
                return service_err(ErrorCodes.VALIDATION_ERROR, f"Invalid payment method '{payment_method}'")

            # Step 1: Cart must be non-empty and valid
            cart_items = list(
                CartItem.objects.filter(cart__user=user)
                .select_related("product", "product__seller")
                .order_by("added_at")
            )
            if not cart_items:
                return service_err(ErrorCodes.CART_EMPTY, "Cannot create order from empty cart")

            validation_result = self.cart_service.validate_cart(user)
            if not validation_result.ok:
                return validation_result
            validation = validation_result.value
            if not validation["valid"]:
                return service_err(
                    ErrorCodes.VALIDATION_ERROR,
                    "; ".join(issue["message"] for issue in validation["issues"]),
                )

            # Step 2: Price the cart (coupon errors abort before touching stock)
            totals_result = self.pricing_service.calculate_order_total(
                [{"unit_price": item.unit_price, "quantity": item.quantity} for item in cart_items],
                coupon_code=coupon_code,
            )
            if not totals_result.ok:
                return totals_result
            totals = totals_result.value

            # Step 3: Reserve stock
            reservations = []
            for item in cart_items:
                reserve_result = self.inventory_service.reserve_stock(
                    product_id=str(item.product_id), quantity=item.quantity
                )
                if not reserve_result.ok:
                    self._rollback_reservations(reservations)
                    return service_err(
                        reserve_result.error,
                        f"Failed to reserve stock for {item.product.title}: {reserve_result.error_detail}",
                    )
                reservations.append({"product_id": str(item.product_id), "quantity": item.quantity})

            # Step 4: Order, one sub-order per seller
            order = Order.objects.create(
                customer=user,
                payment_method=payment_method,
                coupon_code=totals["coupon_code"],
                subtotal=totals["subtotal"],
                shipping=totals["shipping"],
                tax=totals["tax"],
                discount=totals["discount"],
                total=totals["total"],
                shipping_address={field: shipping_address[field] for field in Order.SHIPPING_ADDRESS_FIELDS},
            )

            items_by_seller = OrderedDict()
            for item in cart_items:
                items_by_seller.setdefault(item.product.seller_id, []).append(item)

            for seller_id, seller_items in items_by_seller.items():
                sub_order = SubOrder.objects.create(
                    order=order,
                    seller_id=seller_id,
                    subtotal=to_money(sum((i.unit_price * i.quantity for i in seller_items), Decimal("0"))),
                )
                OrderItem.objects.bulk_create(
                    [
                        OrderItem(
                            sub_order=sub_order,
                            product=item.product,
                            seller_id=seller_id,
                            quantity=item.quantity,
                            price=item.unit_price,
                            total=to_money(item.unit_price * item.quantity),
                            title=item.product.title,
                            image=item.product.image,
                        )
                        for item in seller_items
                    ]
                )

            order.update_overall_status()

            # Step 5: Clear cart
            clear_result = self.cart_service.clear_cart(user)
            if not clear_result.ok:
                self.logger.warning(
                    f"Failed to clear cart after order creation for user {user.id}: {clear_result.error}"
                )

            orders_placed_total.labels(payment_method=payment_method).inc()
            order_value.observe(float(order.total))

            self.logger.info(
                f"Created order {order.order_number} for user {user.id}: "
                f"{len(cart_items)} items, {len(items_by_seller)} sellers, total ${order.total}"
            )
            return service_ok(self._get_order(order.id))

        except Exception as e:
            transaction.set_rollback(True)
            self.logger.error(f"Error creating order for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def _rollback_reservations(self, reservations: List[Dict]) -> None:
        """Give back stock reserved earlier in a failed checkout."""
        self.logger.warning(f"Rolling back {len(reservations)} inventory reservations")

        for reservation in reservations:
            release_result = self.inventory_service.release_stock(
                product_id=reservation["product_id"], quantity=reservation["quantity"], reason="order_creation_rollback"
            )
            if not release_result.ok:
                self.logger.error(
                    f"Failed to release stock during rollback: "
                    f"product={reservation['product_id']}, quantity={reservation['quantity']}, "
                    f"error={release_result.error}"
                )

    @BaseService.log_performance
    def list_customer_orders(
        self, user: User, status: Optional[str] = None, page: int = 1, page_size: int = 10
    ) -> ServiceResult[Dict]:
        """The customer's orders, newest first, optionally by overall status."""
        try:
            queryset = self._order_queryset().filter(customer=user)
            if status:
                queryset = queryset.filter(overall_status=status)
            return service_ok(paginate(queryset.order_by("-created_at"), page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing orders for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_seller_orders(
        self, user: User, status: Optional[str] = None, page: int = 1, page_size: int = 10
    ) -> ServiceResult[Dict]:
        """
        The seller's own sub-orders, newest first.

        Each result is a SubOrder with its parent order and customer loaded,
        so the seller sees contact and shipping details but not other
        sellers' items.
        """
        try:
            queryset = (
                SubOrder.objects.filter(seller=user)
                .select_related("order", "order__customer")
                .prefetch_related("items")
            )
            if status:
                queryset = queryset.filter(status=status)
            return service_ok(paginate(queryset.order_by("-created_at"), page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing seller orders for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_order(self, order_id: str, user: User) -> ServiceResult[Order]:
        """Order details for its customer, one of its sellers, or an admin."""
        try:
            order = self._get_order(order_id)
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

            is_seller_in_order = any(sub_order.seller_id == user.id for sub_order in order.sub_orders.all())
            if order.customer_id != user.id and not is_seller_in_order and not is_admin(user):
                return service_err(ErrorCodes.NOT_ORDER_OWNER, "You do not have access to this order")

            return service_ok(order)

        except Exception as e:
            self.logger.error(f"Error getting order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_sub_order_status(
        self,
        order_id: str,
        sub_order_id: int,
        user: User,
        status: str,
        tracking_number: Optional[str] = None,
        estimated_delivery=None,
    ) -> ServiceResult[Order]:
        """
        Move a sub-order along its fulfilment states (its seller only).

        Delivered and cancelled sub-orders are final. Cancelling puts the
        sub-order's stock back.

        Example:
            >>> order_service.update_sub_order_status(order.id, sub.id, seller, "shipped", tracking_number="1Z999")
        """
        try:
            if status not in SUB_ORDER_STATUSES:
                return service_err(ErrorCodes.INVALID_STATUS, f"Invalid status '{status}'")

            order = self._get_order(order_id, Order.objects.select_for_update())
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

            try:
                sub_order = SubOrder.objects.select_for_update().get(id=sub_order_id, order=order)
            except (SubOrder.DoesNotExist, ValueError):
                return service_err(ErrorCodes.SUB_ORDER_NOT_FOUND, f"Sub-order {sub_order_id} not found")

            if sub_order.seller_id != user.id:
                return service_err(ErrorCodes.PERMISSION_DENIED, "Only the seller of this sub-order can update it")

            if sub_order.status in SubOrder.FINAL_STATUSES:
                return service_err(
                    ErrorCodes.INVALID_ORDER_STATE, f"Sub-order is already {sub_order.status} and cannot be changed"
                )

            previous_status = sub_order.status
            now = timezone.now()
            sub_order.status = status
            if tracking_number is not None:
                sub_order.tracking_number = tracking_number
            if estimated_delivery is not None:
                sub_order.estimated_delivery = estimated_delivery
            if status == "shipped" and not sub_order.shipped_at:
                sub_order.shipped_at = now
            if status == "delivered":
                sub_order.delivered_at = now
                sub_order.shipped_at = sub_order.shipped_at or now
            sub_order.save()

            if status == "cancelled":
                self._release_sub_order_stock(sub_order, reason=f"sub_order_cancelled_{order.order_number}")

            order.update_overall_status()
            if previous_status != status:
                sub_order_status_changes_total.labels(status=status).inc()

            self.logger.info(
                f"Sub-order {sub_order.id} of order {order.order_number}: {previous_status} -> {status} "
                f"(overall={order.overall_status})"
            )
            return service_ok(self._get_order(order.id))

        except Exception as e:
            self.logger.error(f"Error updating sub-order {sub_order_id} of order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def _release_sub_order_stock(self, sub_order: SubOrder, reason: str) -> None:
        for item in sub_order.items.all():
            if item.product_id is None:
                continue
            release_result = self.inventory_service.release_stock(
                product_id=str(item.product_id), quantity=item.quantity, reason=reason
            )
            if not release_result.ok:
                # Cancellation proceeds even if stock release fails
                self.logger.error(
                    f"Failed to release stock for product {item.product_id} "
                    f"of sub-order {sub_order.id}: {release_result.error}"
                )

    @BaseService.log_performance
    @transaction.atomic
    def cancel_order(self, order_id: str, user: User) -> ServiceResult[Order]:
        """
        Cancel an order (customer only, while pending or processing).

        Every sub-order not yet shipped is cancelled and its stock released.
        """
        try:
            order = self._get_order(order_id, Order.objects.select_for_update())
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")

            if order.customer_id != user.id:
                return service_err(ErrorCodes.NOT_ORDER_OWNER, "You do not own this order")

            if not order.can_cancel:
                return service_err(
                    ErrorCodes.ORDER_CANNOT_CANCEL, f"Cannot cancel order in status '{order.overall_status}'"
                )

            for sub_order in order.sub_orders.select_for_update().prefetch_related("items"):
                if sub_order.status not in SubOrder.CANCELLABLE_STATUSES:
                    continue
                sub_order.status = "cancelled"
                sub_order.save(update_fields=["status", "updated_at"])
                self._release_sub_order_stock(sub_order, reason=f"order_cancelled_{order.order_number}")

            order.cancelled_at = timezone.now()
            order.save(update_fields=["cancelled_at", "updated_at"])
            order.update_overall_status()
            orders_cancelled_total.inc()

            self.logger.info(f"Cancelled order {order.order_number} by user {user.id}")
            return service_ok(self._get_order(order.id))

        except Exception as e:
            self.logger.error(f"Error cancelling order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def render_invoice(self, order_id: str, user: User) -> ServiceResult[Dict]:
        """
        HTML invoice for the customer's order.

        Returns:
            ServiceResult with {"filename": "invoice-<order_number>.html", "content": str}
        """
        try:
            order = self._get_order(order_id)
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
            if order.customer_id != user.id:
                return service_err(ErrorCodes.NOT_ORDER_OWNER, "You do not own this order")

            content = render_to_string(
                "marketplace/invoice.html",
                {"order": order, "sub_orders": order.sub_orders.all(), "address": order.shipping_address},
            )
            return service_ok({"filename": f"invoice-{order.order_number}.html", "content": content})

        except Exception as e:
            self.logger.error(f"Error rendering invoice for order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
