"""
InventoryService - stock checks and stock movements.

Stock is decremented when an order is placed and returned when a sub-order or
order is cancelled. Rows are locked with SELECT ... FOR UPDATE while changing.
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from marketplace.catalog.domain.models.catalog import Product
from marketplace.infra.observability.metrics import stock_reservation_failures
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)


class InventoryService(BaseService):
    """
    Service for managing listing stock.
    """

    @BaseService.log_performance
    def check_availability(self, product_id: str, quantity: int = 1) -> ServiceResult[bool]:
        """
        Check if an active listing has at least ``quantity`` units.

        Example:
            >>> result = inventory_service.check_availability(product_id, 5)
            >>> if result.ok and result.value:
            ...     print("In stock")
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        try:
            product = Product.objects.get(id=product_id, status="active")
            available = product.stock_quantity >= quantity

            self.logger.info(
                f"Availability check for product {product_id}: "
                f"requested={quantity}, available={product.stock_quantity}, result={available}"
            )
            return service_ok(available)

        except Product.DoesNotExist:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        except Exception as e:
            self.logger.error(f"Error checking availability for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def reserve_stock(self, product_id: str, quantity: int, order_number: str = "") -> ServiceResult[dict]:
        """
        Take ``quantity`` units out of stock.

        Returns:
            ServiceResult with quantity_reserved, old_stock and new_stock
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        try:
            product = Product.objects.select_for_update().get(id=product_id, status="active")

            if product.stock_quantity < quantity:
                stock_reservation_failures.inc()
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock for {product.title}. "
                    f"Available: {product.stock_quantity}, Requested: {quantity}",
                )

            old_quantity = product.stock_quantity
            product.stock_quantity -= quantity
            product.save(update_fields=["stock_quantity", "updated_at"])

            self.logger.info(
                f"Stock reserved: product={product.title}, quantity={quantity}, order={order_number}, "
                f"stock: {old_quantity} -> {product.stock_quantity}"
            )
            return service_ok(
                {
                    "product_id": str(product_id),
                    "product_title": product.title,
                    "quantity_reserved": quantity,
                    "old_stock": old_quantity,
                    "new_stock": product.stock_quantity,
                    "reserved_at": timezone.now().isoformat(),
                }
            )

        except Product.DoesNotExist:
            stock_reservation_failures.inc()
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        except Exception as e:
            stock_reservation_failures.inc()
            self.logger.error(f"Error reserving stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.RESERVATION_FAILED, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def release_stock(self, product_id: str, quantity: int, reason: str = "order_cancelled") -> ServiceResult[dict]:
        """
        Put ``quantity`` units back into stock.

        Listings that are no longer active still get their stock back.
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        try:
            updated = Product.objects.filter(id=product_id).update(stock_quantity=F("stock_quantity") + quantity)
            if not updated:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            new_stock = Product.objects.values_list("stock_quantity", flat=True).get(id=product_id)
            self.logger.info(
                f"Stock released: product={product_id}, quantity={quantity}, reason={reason}, new_stock={new_stock}"
            )
            return service_ok(
                {
                    "product_id": str(product_id),
                    "quantity_released": quantity,
                    "new_stock": new_stock,
                    "reason": reason,
                    "released_at": timezone.now().isoformat(),
                }
            )

        except Exception as e:
            self.logger.error(f"Error releasing stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
