"""
PricingService - checkout arithmetic.

subtotal -> coupon discount -> shipping -> tax -> total. Everything is Decimal
and rounded to cents with ROUND_HALF_UP.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from django.conf import settings

from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class PricingService(BaseService):
    """
    Stateless price calculations for carts and orders.

    Rules:
    - discount = subtotal x coupon rate
    - shipping is free when the subtotal is strictly above the threshold
    - tax = (subtotal - discount) x tax rate
    - total = subtotal - discount + shipping + tax
    """

    def __init__(self):
        super().__init__()
        self.tax_rates = getattr(settings, "TAX_RATES", {"default": Decimal("0.08")})
        self.shipping_flat_rate = Decimal(str(getattr(settings, "SHIPPING_FLAT_RATE", "5.99")))
        self.free_shipping_threshold = Decimal(str(getattr(settings, "FREE_SHIPPING_THRESHOLD", "50.00")))
        self.coupons = {
            code.upper(): Decimal(str(rate)) for code, rate in getattr(settings, "MARKETPLACE_COUPONS", {}).items()
        }

    def _line_price(self, item: Dict) -> Decimal:
        if item.get("unit_price") is not None:
            return Decimal(str(item["unit_price"]))
        return Decimal(str(item["product"].price))

    @BaseService.log_performance
    def calculate_cart_total(self, cart_items: List[Dict], region: str = "default") -> ServiceResult[Dict]:
        """
        Subtotal and item counts for a list of cart lines.

        Args:
            cart_items: dicts with 'quantity' and either 'unit_price' or 'product'
            region: key into settings.TAX_RATES

        Example:
            >>> pricing_service.calculate_cart_total([{"unit_price": Decimal("10.00"), "quantity": 2}])
        """
        try:
            subtotal = Decimal("0")
            units = 0

            for item in cart_items:
                quantity = item.get("quantity", 1)
                if quantity <= 0:
                    return service_err(ErrorCodes.INVALID_QUANTITY, f"Invalid quantity: {quantity}")
                if item.get("unit_price") is None and not item.get("product"):
                    return service_err(ErrorCodes.INVALID_INPUT, "Cart item missing price")

                subtotal += self._line_price(item) * quantity
                units += quantity

            tax_rate = self.tax_rates.get(region, self.tax_rates["default"])
            return service_ok(
                {
                    "subtotal": to_money(subtotal),
                    "tax_rate": tax_rate,
                    "items_count": len(cart_items),
                    "units_count": units,
                    "currency": "USD",
                }
            )

        except Exception as e:
            self.logger.error(f"Error calculating cart total: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def calculate_shipping_cost(self, subtotal: Decimal) -> ServiceResult[Decimal]:
        """Flat rate, waived above the free shipping threshold."""
        if subtotal <= 0:
            return service_ok(to_money(0))
        if subtotal > self.free_shipping_threshold:
            return service_ok(to_money(0))
        return service_ok(to_money(self.shipping_flat_rate))

    def validate_coupon(self, coupon_code: Optional[str], subtotal: Decimal) -> ServiceResult[Dict]:
        """
        Look up a coupon (case-insensitive) and compute its discount.

        An empty code is valid and yields no discount.
        """
        code = (coupon_code or "").strip().upper()
        if not code:
            return service_ok({"code": "", "rate": Decimal("0"), "discount_amount": to_money(0)})

        rate = self.coupons.get(code)
        if rate is None:
            self.logger.info(f"Rejected coupon code {code}")
            return service_err(ErrorCodes.INVALID_COUPON, "Invalid coupon code")

        return service_ok({"code": code, "rate": rate, "discount_amount": to_money(subtotal * rate)})

    @BaseService.log_performance
    def calculate_order_total(
        self, order_items: List[Dict], coupon_code: Optional[str] = None, region: str = "default"
    ) -> ServiceResult[Dict]:
        """
        Full checkout breakdown for a set of lines and an optional coupon.

        Example:
            >>> result = pricing_service.calculate_order_total(items, coupon_code="SAVE10")
            >>> result.value["total"]
        """
        try:
            cart_result = self.calculate_cart_total(order_items, region)
            if not cart_result.ok:
                return cart_result

            subtotal = cart_result.value["subtotal"]
            tax_rate = cart_result.value["tax_rate"]

            coupon_result = self.validate_coupon(coupon_code, subtotal)
            if not coupon_result.ok:
                return coupon_result
            discount = coupon_result.value["discount_amount"]

            shipping = self.calculate_shipping_cost(subtotal).value
            tax = to_money(max(subtotal - discount, Decimal("0")) * tax_rate)
            total = to_money(subtotal - discount + shipping + tax)

            breakdown = {
                "subtotal": subtotal,
                "discount": discount,
                "coupon_code": coupon_result.value["code"],
                "shipping": shipping,
                "tax": tax,
                "tax_rate": tax_rate,
                "total": total,
                "items_count": cart_result.value["items_count"],
                "units_count": cart_result.value["units_count"],
                "currency": "USD",
            }

            self.logger.info(
                f"Order total calculated: items={breakdown['items_count']}, shipping=${shipping}, total=${total}"
            )
            return service_ok(breakdown)

        except Exception as e:
            self.logger.error(f"Error calculating order total: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
