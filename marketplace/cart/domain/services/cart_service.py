"""
CartService - shopping cart operations.

Validates listings and stock through InventoryService and prices the cart
through PricingService.
"""

import logging
from typing import Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction

from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import Product
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .inventory_service import InventoryService
from .pricing_service import PricingService

User = get_user_model()
logger = logging.getLogger(__name__)


class CartService(BaseService):
    """
    Service for managing shopping cart operations.

    Dependencies:
    - InventoryService: Check stock availability
    - PricingService: Calculate cart totals
    """

    def __init__(self, inventory_service: InventoryService = None, pricing_service: PricingService = None):
        super().__init__()
        self.inventory_service = inventory_service or InventoryService()
        self.pricing_service = pricing_service or PricingService()

    def _cart_lines(self, cart):
        return list(cart.items.select_related("product", "product__seller", "product__category"))

    @BaseService.log_performance
    def get_cart(self, user: User, coupon_code: Optional[str] = None) -> ServiceResult[Dict]:
        """
        Get the user's cart with lines and a checkout breakdown.

        An unknown coupon does not fail the call; it is reported under
        ``coupon_error`` and the totals are computed without it.
        """
        try:
            cart, _ = Cart.objects.get_or_create(user=user)
            lines = self._cart_lines(cart)

            items_data = []
            pricing_lines = []
            for cart_item in lines:
                items_data.append(
                    {
                        "id": cart_item.id,
                        "product": cart_item.product,
                        "quantity": cart_item.quantity,
                        "unit_price": cart_item.unit_price,
                        "total_price": cart_item.total_price,
                        "added_at": cart_item.added_at,
                    }
                )
                pricing_lines.append({"unit_price": cart_item.unit_price, "quantity": cart_item.quantity})

            coupon_error = None
            totals_result = self.pricing_service.calculate_order_total(pricing_lines, coupon_code=coupon_code)
            if not totals_result.ok and totals_result.error == ErrorCodes.INVALID_COUPON:
                coupon_error = totals_result.error_detail
                totals_result = self.pricing_service.calculate_order_total(pricing_lines)
            if not totals_result.ok:
                return totals_result

            cart_data = {
                "id": cart.id,
                "user_id": user.id,
                "items": items_data,
                "items_count": len(items_data),
                "totals": totals_result.value,
                "coupon_error": coupon_error,
                "created_at": cart.created_at,
                "updated_at": cart.updated_at,
            }

            self.logger.info(f"Retrieved cart for user {user.id}: {len(items_data)} items")
            return service_ok(cart_data)

        except Exception as e:
            self.logger.error(f"Error getting cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def add_to_cart(self, user: User, product_id: str, quantity: int = 1) -> ServiceResult[Dict]:
        """
        Add a listing to the cart, merging with an existing line.

        Example:
            >>> result = cart_service.add_to_cart(user, product_id, quantity=2)
        """
        try:
            if quantity <= 0:
                return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

            try:
                product = Product.objects.get(id=product_id)
            except (Product.DoesNotExist, ValidationError):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            if product.status != "active":
                return service_err(ErrorCodes.PRODUCT_INACTIVE, f"{product.title} is no longer available")
            if not product.is_purchasable or product.price is None:
                return service_err(ErrorCodes.PRODUCT_NOT_PURCHASABLE, f"{product.title} cannot be purchased")
            if product.seller_id == user.id:
                return service_err(ErrorCodes.INVALID_INPUT, "You cannot buy your own listing")

            cart, _ = Cart.objects.get_or_create(user=user)
            cart_item = CartItem.objects.filter(cart=cart, product=product).first()
            new_quantity = quantity + (cart_item.quantity if cart_item else 0)

            stock_check = self.inventory_service.check_availability(product.id, new_quantity)
            if not stock_check.ok:
                return stock_check
            if not stock_check.value:
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock for {product.title}. Available: {product.stock_quantity}",
                )

            if cart_item:
                cart_item.quantity = new_quantity
                cart_item.save(update_fields=["quantity"])
                self.logger.info(f"Updated cart item for user {user.id}: {product.title} -> {new_quantity}")
            else:
                CartItem.objects.create(cart=cart, product=product, quantity=quantity, unit_price=product.price)
                self.logger.info(f"Added to cart for user {user.id}: {quantity}x {product.title}")

            return self.get_cart(user)

        except Exception as e:
            self.logger.error(f"Error adding to cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def remove_from_cart(self, user: User, product_id: str) -> ServiceResult[Dict]:
        try:
            deleted, _ = CartItem.objects.filter(cart__user=user, product_id=product_id).delete()
            if not deleted:
                return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} not in cart")

            self.logger.info(f"Removed product {product_id} from cart of user {user.id}")
            return self.get_cart(user)

        except Exception as e:
            self.logger.error(f"Error removing from cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_quantity(self, user: User, product_id: str, quantity: int) -> ServiceResult[Dict]:
        """
        Set the quantity of a cart line. Zero or less removes the line.
        """
        try:
            try:
                cart_item = CartItem.objects.select_related("product").get(cart__user=user, product_id=product_id)
            except CartItem.DoesNotExist:
                return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} not in cart")

            if quantity <= 0:
                cart_item.delete()
                self.logger.info(f"Removed product {product_id} from cart of user {user.id} (quantity {quantity})")
                return self.get_cart(user)

            stock_check = self.inventory_service.check_availability(product_id, quantity)
            if not stock_check.ok:
                return stock_check
            if not stock_check.value:
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock. Requested: {quantity}, Available: {cart_item.product.stock_quantity}",
                )

            old_quantity = cart_item.quantity
            cart_item.quantity = quantity
            cart_item.save(update_fields=["quantity"])

            self.logger.info(
                f"Updated cart quantity for user {user.id}: {cart_item.product.title} {old_quantity} -> {quantity}"
            )
            return self.get_cart(user)

        except Exception as e:
            self.logger.error(f"Error updating cart quantity for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def clear_cart(self, user: User) -> ServiceResult[bool]:
        try:
            deleted, _ = CartItem.objects.filter(cart__user=user).delete()
            self.logger.info(f"Cleared cart for user {user.id}: {deleted} items removed")
            return service_ok(True)

        except Exception as e:
            self.logger.error(f"Error clearing cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def validate_cart(self, user: User) -> ServiceResult[Dict]:
        """
        Check every line is still purchasable and in stock.

        Returns ``{"valid", "issues", "items", "items_count"}``; each issue
        names the product and one of product_inactive, not_purchasable or
        insufficient_stock.
        """
        try:
            cart, _ = Cart.objects.get_or_create(user=user)
            lines = self._cart_lines(cart)

            issues = []
            validation_items = []
            for cart_item in lines:
                product = cart_item.product
                quantity = cart_item.quantity
                item_issues = []

                if product.status != "active":
                    item_issues.append(
                        {"issue": "product_inactive", "message": f"{product.title} is no longer available"}
                    )
                elif not product.is_purchasable:
                    item_issues.append({"issue": "not_purchasable", "message": f"{product.title} cannot be purchased"})
                elif product.stock_quantity < quantity:
                    item_issues.append(
                        {
                            "issue": "insufficient_stock",
                            "message": f"{product.title}: requested {quantity}, available {product.stock_quantity}",
                            "requested": quantity,
                            "available": product.stock_quantity,
                        }
                    )

                for issue in item_issues:
                    issues.append({"product_id": str(product.id), "product_title": product.title, **issue})

                validation_items.append(
                    {
                        "product_id": str(product.id),
                        "product_title": product.title,
                        "quantity": quantity,
                        "available": product.stock_quantity,
                        "issues": [issue["message"] for issue in item_issues],
                    }
                )

            validation = {
                "valid": not issues,
                "issues": issues,
                "items": validation_items,
                "items_count": len(lines),
            }

            self.logger.info(f"Validated cart for user {user.id}: valid={validation['valid']}, issues={len(issues)}")
            return service_ok(validation)

        except Exception as e:
            self.logger.error(f"Error validating cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def checkout_preview(self, user: User, coupon_code: Optional[str] = None) -> ServiceResult[Dict]:
        """
        Price the current cart with an optional coupon.

        Unlike ``get_cart`` an unknown coupon is an error here.
        """
        try:
            lines = CartItem.objects.filter(cart__user=user)
            if not lines.exists():
                return service_err(ErrorCodes.CART_EMPTY, "Cart is empty")

            pricing_lines = [{"unit_price": line.unit_price, "quantity": line.quantity} for line in lines]
            return self.pricing_service.calculate_order_total(pricing_lines, coupon_code=coupon_code)

        except Exception as e:
            self.logger.error(f"Error previewing checkout for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
