import logging

from django.http import HttpResponse
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response, page_params, paginated_response, serialize_page
from marketplace.api.serializers import ErrorResponseSerializer
from marketplace.ordering.api.serializers.order_serializers import (
    CreateOrderRequestSerializer,
    OrderSerializer,
    SellerSubOrderSerializer,
    SubOrderStatusUpdateSerializer,
)
from marketplace.ordering.domain.services import OrderService
from marketplace.permissions import IsSellerUser

logger = logging.getLogger(__name__)

PAGE_PARAMETERS = [
    OpenApiParameter(name="status", type=str, description="Filter by status"),
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="limit", type=int, description="Items per page (default: 10)"),
]


class OrderViewSet(viewsets.ViewSet):
    """
    Customer order history and checkout, the seller's sub-order queue,
    cancellation, invoices and fulfilment updates.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def get_service(self) -> OrderService:
        return container.order_service()

    def get_permissions(self):
        if self.action == "seller":
            return [IsAuthenticated(), IsSellerUser()]
        return super().get_permissions()

    @extend_schema(
        operation_id="orders_list",
        summary="Order history",
        description="""
        **What it receives:**
        - `status` (optional): overall status filter
        - `page`, `limit` (optional)

        **What it returns:**
        - The customer's orders, newest first, with sub-orders and items
        """,
        parameters=PAGE_PARAMETERS,
        responses={
            200: OpenApiResponse(
                response=paginated_response("OrderPaginatedResponse", OrderSerializer),
                description="Orders retrieved successfully",
            )
        },
        tags=["Marketplace - Orders"],
    )
    def list(self, request):
        result = self.get_service().list_customer_orders(
            request.user, status=request.query_params.get("status"), **page_params(request, 10)
        )
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, OrderSerializer))

    @extend_schema(
        operation_id="orders_create",
        summary="Place an order from the cart",
        description="""
        **What it receives:**
        - `shipping_address`: first_name, last_name, email, phone, address, city, zip_code
        - `payment_method`: card, paypal or cod (recorded only)
        - `coupon_code` (optional)

        **What it returns:**
        - The created order; totals are computed server-side and the cart is emptied
        """,
        request=CreateOrderRequestSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(
                response=ErrorResponseSerializer, description="Empty or invalid cart, invalid coupon or address"
            ),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Stock could not be reserved"),
        },
        tags=["Marketplace - Orders"],
    )
    def create(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = self.get_service().create_order(
            request.user,
            shipping_address=dict(data["shipping_address"]),
            payment_method=data["payment_method"],
            coupon_code=data["coupon_code"],
        )
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Order details",
        description="Visible to the customer, any seller in the order, and admins.",
        responses={
            200: OrderSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="No access to this order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(pk, request.user)
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data)

    @extend_schema(
        operation_id="orders_seller",
        summary="Seller sub-orders (Seller only)",
        description="""
        **What it returns:**
        - The seller's own sub-orders with the customer's contact and shipping address
        """,
        parameters=PAGE_PARAMETERS,
        responses={
            200: OpenApiResponse(
                response=paginated_response("SellerSubOrderPaginatedResponse", SellerSubOrderSerializer),
                description="Sub-orders retrieved successfully",
            ),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Seller role required"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=False, methods=["get"])
    def seller(self, request):
        result = self.get_service().list_seller_orders(
            request.user, status=request.query_params.get("status"), **page_params(request, 10)
        )
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, SellerSubOrderSerializer))

    @extend_schema(
        operation_id="orders_cancel",
        summary="Cancel an order (Customer only)",
        description="Allowed while the order is pending or processing. Cancelled items go back in stock.",
        request=None,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Order can no longer be cancelled"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not your order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        result = self.get_service().cancel_order(pk, request.user)
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data)

    @extend_schema(
        operation_id="orders_invoice",
        summary="Download the HTML invoice (Customer only)",
        responses={
            (200, "text/html"): OpenApiResponse(response=OpenApiTypes.STR, description="Invoice attachment"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not your order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["get"])
    def invoice(self, request, pk=None):
        result = self.get_service().render_invoice(pk, request.user)
        if not result.ok:
            return error_response(result)

        response = HttpResponse(result.value["content"], content_type="text/html; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{result.value["filename"]}"'
        return response

    @extend_schema(
        operation_id="orders_sub_order_update",
        summary="Update a sub-order's fulfilment status (its seller only)",
        description="""
        **What it receives:**
        - `status`: pending, confirmed, processing, shipped, delivered or cancelled
        - `tracking_number`, `estimated_delivery` (optional)

        **What it returns:**
        - The whole order with its recomputed overall status
        """,
        request=SubOrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid or final status"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the seller of this sub-order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order or sub-order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["put", "patch"], url_path=r"suborders/(?P<sub_order_id>\d+)")
    def suborders(self, request, pk=None, sub_order_id=None):
        serializer = SubOrderStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = self.get_service().update_sub_order_status(
            pk,
            int(sub_order_id),
            request.user,
            data["status"],
            tracking_number=data.get("tracking_number"),
            estimated_delivery=data.get("estimated_delivery"),
        )
        if not result.ok:
            return error_response(result)
        return Response(OrderSerializer(result.value).data)
