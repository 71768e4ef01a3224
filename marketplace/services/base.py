"""
Service layer building blocks shared by every marketplace service.

``ServiceResult`` carries either a value or an error code plus a human readable
message, so expected failures (missing listing, empty cart, wrong owner) never
travel as exceptions. ``BaseService`` gives each service a named logger and the
``log_performance`` timing decorator.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from django.core.paginator import EmptyPage, Paginator

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service call.

    Attributes:
        ok: True if the operation succeeded
        value: Payload when ok=True
        error: Error code from ``ErrorCodes`` when ok=False
        error_detail: Message safe to show to API clients

    Example:
        >>> result = cart_service.add_to_cart(user, product_id, 2)
        >>> if not result.ok:
        ...     return Response({"detail": result.error_detail}, status=400)
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None


def service_ok(value: T) -> ServiceResult[T]:
    """Build a successful result."""
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """Build a failed result; the detail falls back to the code."""
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


def paginate(queryset, page=1, page_size=20, max_page_size=100) -> Dict[str, Any]:
    """
    Slice a queryset into one page.

    Out of range pages return an empty ``results`` list instead of failing,
    and ``page_size`` is clamped to ``[1, max_page_size]``.
    """
    try:
        page = max(int(page), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = 20
    page_size = min(max(page_size, 1), max_page_size)

    paginator = Paginator(queryset, page_size)
    try:
        page_obj = paginator.page(page)
        results = list(page_obj.object_list)
        has_next = page_obj.has_next()
        has_previous = page_obj.has_previous()
    except EmptyPage:
        results = []
        has_next = False
        has_previous = paginator.num_pages > 0

    return {
        "results": results,
        "count": paginator.count,
        "page": page,
        "page_size": page_size,
        "num_pages": paginator.num_pages,
        "has_next": has_next,
        "has_previous": has_previous,
    }


class BaseService:
    """
    Base class for marketplace services.

    Usage:
        class OrderService(BaseService):
            @BaseService.log_performance
            def get_order(self, order_id, user):
                self.logger.info(f"Fetching order {order_id}")
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Log how long a service method took and how it ended.

        Failed ServiceResults are logged as warnings; exceptions are logged
        with a traceback and re-raised.
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


class ErrorCodes:
    """Error codes returned by marketplace services."""

    # Listing errors
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_INACTIVE = "product_inactive"
    PRODUCT_NOT_PURCHASABLE = "product_not_purchasable"
    INVALID_PRODUCT_DATA = "invalid_product_data"

    # Category errors
    CATEGORY_NOT_FOUND = "category_not_found"
    DUPLICATE_SLUG = "duplicate_slug"
    CATEGORY_IN_USE = "category_in_use"

    # Interaction errors
    COMMENT_NOT_FOUND = "comment_not_found"

    # Cart errors
    CART_EMPTY = "cart_empty"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_IN_CART = "item_not_in_cart"
    INVALID_COUPON = "invalid_coupon"

    # Order errors
    ORDER_NOT_FOUND = "order_not_found"
    SUB_ORDER_NOT_FOUND = "sub_order_not_found"
    ORDER_CANNOT_CANCEL = "order_cannot_cancel"
    INVALID_ORDER_STATE = "invalid_order_state"
    INVALID_STATUS = "invalid_status"

    # Inventory errors
    INSUFFICIENT_STOCK = "insufficient_stock"
    RESERVATION_FAILED = "reservation_failed"

    # Job application errors
    JOB_NOT_FOUND = "job_not_found"
    NOT_A_JOB = "not_a_job"
    ALREADY_APPLIED = "already_applied"
    APPLICATION_NOT_FOUND = "application_not_found"

    # Account errors
    USER_NOT_FOUND = "user_not_found"

    # Upload errors
    UNSUPPORTED_FILE_TYPE = "unsupported_file_type"
    FILE_TOO_LARGE = "file_too_large"
    UPLOAD_FAILED = "upload_failed"

    # Permission errors
    PERMISSION_DENIED = "permission_denied"
    NOT_PRODUCT_OWNER = "not_product_owner"
    NOT_ORDER_OWNER = "not_order_owner"

    # Validation errors
    VALIDATION_ERROR = "validation_error"
    INVALID_INPUT = "invalid_input"

    # Internal errors
    INTERNAL_ERROR = "internal_error"
    DATABASE_ERROR = "database_error"
