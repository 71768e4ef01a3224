from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response
from marketplace.api.serializers import ErrorResponseSerializer
from marketplace.catalog.api.serializers.category_serializers import (
    CategoryFiltersResponseSerializer,
    CategorySerializer,
    CategoryWriteSerializer,
)
from marketplace.catalog.domain.services import CategoryService
from marketplace.permissions import IsAdminOrReadOnly


class CategoryViewSet(viewsets.ViewSet):
    """
    Browse categories by slug. Create, update and delete are admin only.
    """

    permission_classes = [IsAdminOrReadOnly]
    lookup_field = "slug"
    lookup_value_regex = r"[-a-zA-Z0-9_]+"

    def get_service(self) -> CategoryService:
        return container.category_service()

    @extend_schema(
        operation_id="categories_list",
        summary="List active categories",
        responses={200: CategorySerializer(many=True)},
        tags=["Marketplace - Categories"],
    )
    def list(self, request):
        result = self.get_service().list_categories()
        if not result.ok:
            return error_response(result)
        return Response(CategorySerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="categories_main",
        summary="List top-level categories",
        responses={200: CategorySerializer(many=True)},
        tags=["Marketplace - Categories"],
    )
    @action(detail=False, methods=["get"])
    def main(self, request):
        result = self.get_service().list_main_categories()
        if not result.ok:
            return error_response(result)
        return Response(CategorySerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="categories_retrieve",
        summary="Get a category by slug",
        responses={
            200: CategorySerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
        },
        tags=["Marketplace - Categories"],
    )
    def retrieve(self, request, slug=None):
        result = self.get_service().get_category(slug)
        if not result.ok:
            return error_response(result)
        return Response(CategorySerializer(result.value).data)

    @extend_schema(
        operation_id="categories_filters",
        summary="Filter options of a category with listing counts",
        description="""
        **What it receives:**
        - `slug` (path): category slug

        **What it returns:**
        - Every option declared in the category's filters with the number of active listings matching it
        - Price ranges match `min <= price < max`
        """,
        responses={
            200: CategoryFiltersResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
        },
        tags=["Marketplace - Categories"],
    )
    @action(detail=True, methods=["get"])
    def filters(self, request, slug=None):
        result = self.get_service().get_filter_options(slug)
        if not result.ok:
            return error_response(result)
        return Response(result.value)

    @extend_schema(
        operation_id="categories_create",
        summary="Create a category (Admin only)",
        request=CategoryWriteSerializer,
        responses={
            201: CategorySerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data or duplicate slug"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
        },
        tags=["Marketplace - Categories"],
    )
    def create(self, request):
        serializer = CategoryWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().create_category(serializer.validated_data, request.user)
        if not result.ok:
            return error_response(result)
        return Response(CategorySerializer(result.value).data, status=status.HTTP_201_CREATED)

    def _update(self, request, slug, partial):
        serializer = CategoryWriteSerializer(data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_category(slug, serializer.validated_data, request.user)
        if not result.ok:
            return error_response(result)
        return Response(CategorySerializer(result.value).data)

    @extend_schema(
        operation_id="categories_update",
        summary="Update a category (Admin only)",
        request=CategoryWriteSerializer,
        responses={
            200: CategorySerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data or duplicate slug"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
        },
        tags=["Marketplace - Categories"],
    )
    def update(self, request, slug=None):
        return self._update(request, slug, partial=False)

    @extend_schema(
        operation_id="categories_partial_update",
        summary="Partially update a category (Admin only)",
        request=CategoryWriteSerializer,
        responses={
            200: CategorySerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data or duplicate slug"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
        },
        tags=["Marketplace - Categories"],
    )
    def partial_update(self, request, slug=None):
        return self._update(request, slug, partial=True)

    @extend_schema(
        operation_id="categories_delete",
        summary="Delete a category (Admin only)",
        responses={
            204: OpenApiResponse(description="Category deleted"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Category still has listings"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
        },
        tags=["Marketplace - Categories"],
    )
    def destroy(self, request, slug=None):
        result = self.get_service().delete_category(slug, request.user)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)
