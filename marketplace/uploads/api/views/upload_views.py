from drf_spectacular.utils import OpenApiResponse, extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response
from marketplace.api.serializers import ErrorResponseSerializer, ImageUploadResponseSerializer


@extend_schema(
    operation_id="uploads_image",
    summary="Upload a listing image",
    description="""
    **What it receives (multipart):**
    - `image`: JPEG, PNG, GIF or WEBP up to 5MB

    **What it returns:**
    - `image_url` to store on the listing, the storage `key` and the `size` in bytes
    """,
    request={
        "multipart/form-data": inline_serializer(name="ImageUploadRequest", fields={"image": serializers.ImageField()})
    },
    responses={
        201: ImageUploadResponseSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing, unsupported or oversized file"),
        500: OpenApiResponse(response=ErrorResponseSerializer, description="Storage failure"),
    },
    tags=["Marketplace - Uploads"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_image(request):
    result = container.upload_service().upload_image(request.FILES.get("image"))
    if not result.ok:
        return error_response(result)

    stored = result.value
    return Response({"image_url": stored.url, "key": stored.key, "size": stored.size}, status=status.HTTP_201_CREATED)
