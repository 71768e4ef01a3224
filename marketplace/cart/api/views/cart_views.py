from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response
from marketplace.api.serializers import ErrorResponseSerializer, MessageResponseSerializer
from marketplace.cart.api.serializers.cart_serializers import (
    AddToCartRequestSerializer,
    CartOutputSerializer,
    CartValidationSerializer,
    CheckoutBreakdownSerializer,
    CouponRequestSerializer,
    RemoveFromCartRequestSerializer,
    UpdateCartItemRequestSerializer,
)
from marketplace.cart.domain.services import CartService


class CartViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> CartService:
        return container.cart_service()

    def _cart_response(self, request, result):
        if not result.ok:
            return error_response(result)
        return Response(CartOutputSerializer(result.value, context={"request": request}).data)

    @extend_schema(
        operation_id="cart_get",
        summary="Get user's shopping cart",
        description="""
        **What it receives:**
        - Authentication token (header)
        - `coupon_code` (query, optional): Preview the totals with a coupon

        **What it returns:**
        - Cart items with listing details and snapshot unit prices
        - Totals (subtotal, discount, shipping, tax, total)
        - Item count
        """,
        responses={
            200: OpenApiResponse(response=CartOutputSerializer, description="Cart retrieved successfully"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    def list(self, request):
        result = self.get_service().get_cart(request.user, coupon_code=request.query_params.get("coupon_code"))
        return self._cart_response(request, result)

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Listing to add
        - `quantity` (integer, optional): Quantity to add (default: 1)

        **What it returns:**
        - Updated cart with all items
        - Updated totals
        """,
        request=AddToCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartOutputSerializer, description="Item added successfully"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer, description="Invalid data, unavailable listing or insufficient stock"
            ),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def add_item(self, request):
        serializer = AddToCartRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().add_to_cart(
            request.user, serializer.validated_data["product_id"], serializer.validated_data["quantity"]
        )
        return self._cart_response(request, result)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Update item quantity in cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Listing to update
        - `quantity` (integer): New quantity (0 or less removes the item)

        **What it returns:**
        - Updated cart with modified quantities
        - Updated totals
        """,
        request=UpdateCartItemRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartOutputSerializer, description="Item updated successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data or insufficient stock"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["patch"])
    def update_item(self, request):
        serializer = UpdateCartItemRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_quantity(
            request.user, serializer.validated_data["product_id"], serializer.validated_data["quantity"]
        )
        return self._cart_response(request, result)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove item from cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Listing to remove (body or query string)

        **What it returns:**
        - Updated cart without the removed item
        """,
        request=RemoveFromCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartOutputSerializer, description="Item removed successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing product_id"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def remove_item(self, request):
        # DELETE bodies are dropped by some clients, so accept the query string too
        data = request.data or {"product_id": request.query_params.get("product_id")}
        serializer = RemoveFromCartRequestSerializer(data=data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().remove_from_cart(request.user, serializer.validated_data["product_id"])
        return self._cart_response(request, result)

    @extend_schema(
        operation_id="cart_clear",
        summary="Clear cart",
        responses={
            200: OpenApiResponse(response=MessageResponseSerializer, description="Cart cleared"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def clear(self, request):
        result = self.get_service().clear_cart(request.user)
        if not result.ok:
            return error_response(result)
        return Response({"message": "Cart cleared successfully"})

    @extend_schema(
        operation_id="cart_validate",
        summary="Validate cart before checkout",
        description="""
        **What it returns:**
        - `valid`: whether every line can be bought as is
        - `issues`: one entry per problem (product_inactive, not_purchasable, insufficient_stock)
        """,
        request=None,
        responses={200: CartValidationSerializer},
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def validate(self, request):
        result = self.get_service().validate_cart(request.user)
        if not result.ok:
            return error_response(result)
        return Response(CartValidationSerializer(result.value).data)

    @extend_schema(
        operation_id="cart_checkout_preview",
        summary="Preview checkout totals",
        description="""
        **What it receives:**
        - `coupon_code` (string, optional)

        **What it returns:**
        - subtotal, discount, shipping, tax and total for the current cart
        """,
        request=CouponRequestSerializer,
        responses={
            200: CheckoutBreakdownSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Empty cart or invalid coupon"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def checkout_preview(self, request):
        serializer = CouponRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().checkout_preview(request.user, serializer.validated_data["coupon_code"])
        if not result.ok:
            return error_response(result)
        return Response(CheckoutBreakdownSerializer(result.value).data)
