"""
Helpers shared by the marketplace views for turning ServiceResults into
HTTP responses.
"""

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers, status
from rest_framework.response import Response

from marketplace.services.base import ErrorCodes

ERROR_STATUS = {
    # 404
    ErrorCodes.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.CATEGORY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.COMMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.ITEM_NOT_IN_CART: status.HTTP_404_NOT_FOUND,
    ErrorCodes.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.SUB_ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.JOB_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.APPLICATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # 403
    ErrorCodes.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCodes.NOT_PRODUCT_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorCodes.NOT_ORDER_OWNER: status.HTTP_403_FORBIDDEN,
    # 400
    ErrorCodes.PRODUCT_INACTIVE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.PRODUCT_NOT_PURCHASABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_PRODUCT_DATA: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.DUPLICATE_SLUG: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.CATEGORY_IN_USE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.CART_EMPTY: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_COUPON: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.ORDER_CANNOT_CANCEL: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_ORDER_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INSUFFICIENT_STOCK: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.NOT_A_JOB: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.ALREADY_APPLIED: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.UNSUPPORTED_FILE_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.FILE_TOO_LARGE: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    # 409
    ErrorCodes.RESERVATION_FAILED: status.HTTP_409_CONFLICT,
}


def error_response(result) -> Response:
    """``{"detail": ...}`` with the status mapped from the result's error code (500 if unknown)."""
    http_status = ERROR_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({"detail": result.error_detail}, status=http_status)


def serialize_page(page_data, serializer_class, context=None) -> dict:
    """Serialize the ``results`` of a ``paginate()`` dict, keeping its metadata."""
    return {
        **page_data,
        "results": serializer_class(page_data["results"], many=True, context=context or {}).data,
    }


def page_params(request, default_page_size=20):
    """``page`` and ``limit`` (alias ``page_size``) from the query string."""
    params = request.query_params
    return {
        "page": params.get("page", 1),
        "page_size": params.get("limit") or params.get("page_size") or default_page_size,
    }


def paginated_response(name, item_serializer):
    """OpenAPI shape of a ``serialize_page`` payload whose items use ``item_serializer``."""
    return inline_serializer(
        name=name,
        fields={
            "count": serializers.IntegerField(),
            "page": serializers.IntegerField(),
            "page_size": serializers.IntegerField(),
            "num_pages": serializers.IntegerField(),
            "has_next": serializers.BooleanField(),
            "has_previous": serializers.BooleanField(),
            "results": item_serializer(many=True),
        },
    )
