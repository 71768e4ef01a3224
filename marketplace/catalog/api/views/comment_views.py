from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response
from marketplace.api.serializers import ErrorResponseSerializer, LikeToggleResponseSerializer
from marketplace.catalog.api.serializers.comment_serializers import CommentCreateSerializer, CommentSerializer


class CommentViewSet(viewsets.ViewSet):
    """Comments and replies on listings. Reading happens through ``/products/{id}/comments/``."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        operation_id="comments_create",
        summary="Comment on a listing or reply to a comment",
        description="""
        **What it receives:**
        - `product_id` (UUID): Listing commented on
        - `text` (string): Comment body
        - `parent_id` (integer, optional): Comment replied to; replies to replies attach to the top-level comment

        **What it returns:**
        - The created comment
        """,
        request=CommentCreateSerializer,
        responses={
            201: CommentSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Listing or parent comment not found"),
        },
        tags=["Marketplace - Interactions"],
    )
    def create(self, request):
        serializer = CommentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = container.interaction_service().add_comment(
            request.user, data["product_id"], data["text"], data.get("parent_id")
        )
        if not result.ok:
            return error_response(result)
        return Response(CommentSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="comments_like",
        summary="Toggle like on a comment",
        request=None,
        responses={
            200: LikeToggleResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Comment not found"),
        },
        tags=["Marketplace - Interactions"],
    )
    @action(detail=True, methods=["post"])
    def like(self, request, pk=None):
        result = container.interaction_service().toggle_comment_like(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response(result.value)
