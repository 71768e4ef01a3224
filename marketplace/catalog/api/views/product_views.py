import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response, page_params, paginated_response, serialize_page
from marketplace.api.serializers import (
    ErrorResponseSerializer,
    LikeToggleResponseSerializer,
    ViewCountResponseSerializer,
)
from marketplace.catalog.api.serializers.comment_serializers import CommentSerializer
from marketplace.catalog.api.serializers.product_serializers import (
    ProductDetailSerializer,
    ProductListSerializer,
    ProductWriteSerializer,
)
from marketplace.catalog.api.serializers.review_serializers import (
    ProductReviewSerializer,
    RatingRequestSerializer,
    RatingResponseSerializer,
)
from marketplace.catalog.domain.services import CatalogService
from marketplace.permissions import IsSellerUser

logger = logging.getLogger(__name__)

UUID_REGEX = r"[0-9a-fA-F-]{32,36}"

LISTING_FILTER_PARAMETERS = [
    OpenApiParameter(name="search", type=str, description="Search title, description and tags"),
    OpenApiParameter(name="listing_type", type=str, description="Comma separated listing types"),
    OpenApiParameter(name="category", type=str, description="Category slug"),
    OpenApiParameter(name="min_price", type=float, description="Minimum price"),
    OpenApiParameter(name="max_price", type=float, description="Maximum price"),
    OpenApiParameter(name="location", type=str, description="Location substring"),
    OpenApiParameter(name="condition", type=str, description="Comma separated conditions (secondhand)"),
    OpenApiParameter(name="job_type", type=str, description="Comma separated job types"),
    OpenApiParameter(name="experience", type=str, description="Comma separated experience levels"),
    OpenApiParameter(name="trip_type", type=str, description="Comma separated trip types"),
    OpenApiParameter(name="featured", type=bool, description="Only featured listings"),
    OpenApiParameter(name="seller", type=str, description="Seller id"),
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="limit", type=int, description="Items per page (default: 12, max: 100)"),
    OpenApiParameter(
        name="sort_by", type=str, description="created_at, price, view_count, rating or title (default: created_at)"
    ),
    OpenApiParameter(name="sort_order", type=str, description="asc or desc (default: desc)"),
]


class ProductViewSet(viewsets.ViewSet):
    """
    Listings: browse, detail, seller CRUD and the per-listing interactions
    (views, likes, ratings, comments). All work is delegated to the
    catalog services.
    """

    permission_classes = [AllowAny]
    lookup_value_regex = UUID_REGEX

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    def get_permissions(self):
        if self.action in ["create", "mine"]:
            return [IsAuthenticated(), IsSellerUser()]
        if self.action in ["update", "partial_update", "destroy", "like"]:
            return [IsAuthenticated()]
        if self.action == "ratings" and self.request.method == "POST":
            return [IsAuthenticated()]
        return super().get_permissions()

    def _context(self, request):
        return {"request": request}

    @extend_schema(
        operation_id="products_list",
        summary="List listings with filters",
        description="""
        **What it receives:**
        - Filter, sort and pagination query parameters (all optional)

        **What it returns:**
        - Paginated active listings with stock, each with `is_liked` and `comments_count`
        """,
        parameters=LISTING_FILTER_PARAMETERS,
        responses={
            200: OpenApiResponse(
                response=paginated_response("ProductListPaginatedResponse", ProductListSerializer),
                description="Listings retrieved successfully",
            ),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filter value"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Products"],
    )
    def list(self, request):
        params = page_params(request, CatalogService.DEFAULT_PAGE_SIZE)
        result = self.get_service().list_products(
            filters=request.query_params,
            user=request.user,
            sort_by=request.query_params.get("sort_by", "created_at"),
            sort_order=request.query_params.get("sort_order", "desc"),
            **params,
        )
        if not result.ok:
            return error_response(result)

        return Response(serialize_page(result.value, ProductListSerializer, self._context(request)))

    @extend_schema(
        operation_id="products_create",
        summary="Create a listing (Seller only)",
        description="""
        **What it receives:**
        - Listing fields; `category` is a slug, `price` accepts strings like `"$1,200"`
        - Type specific fields (condition, job_type/experience/salary, trip_type/duration)

        **What it returns:**
        - The created listing
        """,
        request=ProductWriteSerializer,
        responses={
            201: OpenApiResponse(response=ProductDetailSerializer, description="Listing created successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Seller role required"),
        },
        tags=["Marketplace - Products"],
    )
    def create(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().create_product(serializer.validated_data, request.user)
        if not result.ok:
            return error_response(result)

        return Response(
            ProductDetailSerializer(result.value, context=self._context(request)).data, status=status.HTTP_201_CREATED
        )

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get listing details",
        responses={
            200: ProductDetailSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Products"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_product(pk, user=request.user)
        if not result.ok:
            return error_response(result)
        return Response(ProductDetailSerializer(result.value, context=self._context(request)).data)

    def _update(self, request, pk, partial):
        service = self.get_service()
        current = service.get_product(pk)
        if not current.ok:
            return error_response(current)

        serializer = ProductWriteSerializer(current.value, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = service.update_product(pk, serializer.validated_data, request.user)
        if not result.ok:
            return error_response(result)

        refreshed = service.get_product(pk, user=request.user)
        product = refreshed.value if refreshed.ok else result.value
        return Response(ProductDetailSerializer(product, context=self._context(request)).data)

    @extend_schema(
        operation_id="products_update",
        summary="Update listing (Owner or admin)",
        request=ProductWriteSerializer,
        responses={
            200: OpenApiResponse(response=ProductDetailSerializer, description="Listing updated successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the listing owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Products"],
    )
    def update(self, request, pk=None):
        return self._update(request, pk, partial=False)

    @extend_schema(
        operation_id="products_partial_update",
        summary="Partially update listing (Owner or admin)",
        request=ProductWriteSerializer,
        responses={
            200: OpenApiResponse(response=ProductDetailSerializer, description="Listing updated successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the listing owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Products"],
    )
    def partial_update(self, request, pk=None):
        return self._update(request, pk, partial=True)

    @extend_schema(
        operation_id="products_delete",
        summary="Delete listing (Owner or admin)",
        responses={
            204: OpenApiResponse(description="Listing deleted successfully"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the listing owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Products"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete_product(pk, request.user)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="products_featured",
        summary="Featured listings",
        description="""
        **What it receives:**
        - `limit` (integer, optional): default 6, max 20

        **What it returns:**
        - Featured active listings, most viewed first
        """,
        parameters=[OpenApiParameter(name="limit", type=int, description="Number of listings (default: 6)")],
        responses={200: ProductListSerializer(many=True)},
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"])
    def featured(self, request):
        result = self.get_service().get_featured(request.query_params.get("limit", 6), user=request.user)
        if not result.ok:
            return error_response(result)
        return Response(ProductListSerializer(result.value, many=True, context=self._context(request)).data)

    @extend_schema(
        operation_id="products_mine",
        summary="My listings (Seller only)",
        description="""
        **What it receives:**
        - `status` (optional): active, inactive, sold or expired
        - `page`, `limit` (optional)

        **What it returns:**
        - Paginated listings of the current seller, in every status
        """,
        parameters=[
            OpenApiParameter(name="status", type=str, description="Listing status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 12)"),
        ],
        responses={
            200: OpenApiResponse(
                response=paginated_response("SellerProductsPaginatedResponse", ProductListSerializer),
                description="Listings retrieved successfully",
            ),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Seller role required"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"])
    def mine(self, request):
        result = self.get_service().list_seller_products(
            request.user,
            status=request.query_params.get("status"),
            **page_params(request, CatalogService.DEFAULT_PAGE_SIZE),
        )
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, ProductListSerializer, self._context(request)))

    @extend_schema(
        operation_id="products_view",
        summary="Count a listing view",
        request=None,
        responses={
            200: ViewCountResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=True, methods=["post"])
    def view(self, request, pk=None):
        result = self.get_service().increment_views(pk)
        if not result.ok:
            return error_response(result)
        return Response({"view_count": result.value})

    @extend_schema(
        operation_id="products_like",
        summary="Toggle like on a listing",
        request=None,
        responses={
            200: LikeToggleResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Interactions"],
    )
    @action(detail=True, methods=["post"])
    def like(self, request, pk=None):
        result = container.interaction_service().toggle_product_like(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response(result.value)

    @extend_schema(
        methods=["GET"],
        operation_id="products_ratings_list",
        summary="Ratings of a listing",
        parameters=[
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 10)"),
        ],
        responses={
            200: OpenApiResponse(
                response=paginated_response("ProductRatingsPaginatedResponse", ProductReviewSerializer),
                description="Ratings retrieved successfully",
            ),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Interactions"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="products_ratings_create",
        summary="Rate a listing",
        description="""
        **What it receives:**
        - `rating` (integer 1-5)
        - `review` (string, optional)

        **What it returns:**
        - The stored rating and the listing's new average and count
        - 201 the first time, 200 when an existing rating is replaced
        """,
        request=RatingRequestSerializer,
        responses={
            200: RatingResponseSerializer,
            201: RatingResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid rating"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Interactions"],
    )
    @action(detail=True, methods=["get", "post"])
    def ratings(self, request, pk=None):
        service = container.review_service()

        if request.method == "GET":
            result = service.list_product_ratings(pk, **page_params(request, 10))
            if not result.ok:
                return error_response(result)
            return Response(serialize_page(result.value, ProductReviewSerializer, self._context(request)))

        serializer = RatingRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = service.rate_product(
            request.user, pk, serializer.validated_data["rating"], serializer.validated_data["review"]
        )
        if not result.ok:
            return error_response(result)

        data = result.value
        payload = {
            "message": "Rating submitted" if data["created"] else "Rating updated",
            "review": data["review"],
            "rating": data["rating"],
            "review_count": data["review_count"],
        }
        return Response(
            RatingResponseSerializer(payload, context=self._context(request)).data,
            status=status.HTTP_201_CREATED if data["created"] else status.HTTP_200_OK,
        )

    @extend_schema(
        operation_id="products_comments",
        summary="Comments on a listing",
        description="""
        **What it returns:**
        - Top-level comments newest first, each with its replies and `is_liked`
        """,
        responses={
            200: CommentSerializer(many=True),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing not found"),
        },
        tags=["Marketplace - Interactions"],
    )
    @action(detail=True, methods=["get"])
    def comments(self, request, pk=None):
        result = container.interaction_service().list_comments(pk, user=request.user)
        if not result.ok:
            return error_response(result)
        return Response(CommentSerializer(result.value, many=True, context=self._context(request)).data)
