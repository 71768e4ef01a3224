from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response, page_params, paginated_response, serialize_page
from marketplace.api.serializers import ErrorResponseSerializer
from marketplace.dashboard.api.serializers.dashboard_serializers import (
    AdminOrderSerializer,
    AdminStatsSerializer,
    AdminUserSerializer,
    SellerStatsSerializer,
    UserStatusUpdateSerializer,
)
from marketplace.dashboard.domain.services import DashboardService
from marketplace.permissions import IsAdminUser, IsSellerUser

USER_ID_PATTERN = r"(?P<user_id>[0-9a-fA-F-]{32,36})"


class AdminDashboardViewSet(viewsets.ViewSet):
    """Admin console: platform stats, user moderation and every order."""

    permission_classes = [IsAuthenticated, IsAdminUser]

    def get_service(self) -> DashboardService:
        return container.dashboard_service()

    @extend_schema(
        operation_id="admin_stats",
        summary="Platform statistics (Admin only)",
        responses={
            200: AdminStatsSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
        },
        tags=["Marketplace - Admin"],
    )
    @action(detail=False, methods=["get"])
    def stats(self, request):
        result = self.get_service().admin_stats()
        if not result.ok:
            return error_response(result)
        return Response(AdminStatsSerializer(result.value).data)

    @extend_schema(
        operation_id="admin_users",
        summary="List users (Admin only)",
        parameters=[
            OpenApiParameter(name="search", type=str, description="Username, email or name"),
            OpenApiParameter(name="role", type=str, description="user, seller or admin"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 20)"),
        ],
        responses={
            200: OpenApiResponse(
                response=paginated_response("AdminUsersPaginatedResponse", AdminUserSerializer),
                description="Users retrieved successfully",
            ),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
        },
        tags=["Marketplace - Admin"],
    )
    @action(detail=False, methods=["get"])
    def users(self, request):
        result = self.get_service().list_users(
            search=request.query_params.get("search"),
            role=request.query_params.get("role"),
            **page_params(request),
        )
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, AdminUserSerializer))

    @extend_schema(
        operation_id="admin_users_delete",
        summary="Delete a user (Admin only)",
        responses={
            204: OpenApiResponse(description="User deleted"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admins cannot be deleted"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="User not found"),
        },
        tags=["Marketplace - Admin"],
    )
    @action(detail=False, methods=["delete"], url_path=f"users/{USER_ID_PATTERN}")
    def delete_user(self, request, user_id=None):
        result = self.get_service().delete_user(user_id, request.user)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="admin_users_status",
        summary="Activate or deactivate a user (Admin only)",
        request=UserStatusUpdateSerializer,
        responses={
            200: AdminUserSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admins cannot be deactivated"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="User not found"),
        },
        tags=["Marketplace - Admin"],
    )
    @action(detail=False, methods=["patch"], url_path=f"users/{USER_ID_PATTERN}/status")
    def user_status(self, request, user_id=None):
        serializer = UserStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().set_user_active(user_id, serializer.validated_data["is_active"], request.user)
        if not result.ok:
            return error_response(result)
        return Response(AdminUserSerializer(result.value).data)

    @extend_schema(
        operation_id="admin_orders",
        summary="List all orders (Admin only)",
        parameters=[
            OpenApiParameter(name="status", type=str, description="Overall status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 20)"),
        ],
        responses={
            200: OpenApiResponse(
                response=paginated_response("AdminOrdersPaginatedResponse", AdminOrderSerializer),
                description="Orders retrieved successfully",
            ),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
        },
        tags=["Marketplace - Admin"],
    )
    @action(detail=False, methods=["get"])
    def orders(self, request):
        result = self.get_service().list_orders(status=request.query_params.get("status"), **page_params(request))
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, AdminOrderSerializer))


class SellerDashboardViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, IsSellerUser]

    @extend_schema(
        operation_id="seller_stats",
        summary="Seller dashboard statistics",
        description="""
        **What it returns:**
        - Listing counts, sub-order counts, revenue from non-cancelled sub-orders and average rating
        """,
        responses={
            200: SellerStatsSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Seller role required"),
        },
        tags=["Marketplace - Seller"],
    )
    @action(detail=False, methods=["get"])
    def stats(self, request):
        result = container.dashboard_service().seller_stats(request.user)
        if not result.ok:
            return error_response(result)
        return Response(SellerStatsSerializer(result.value).data)
