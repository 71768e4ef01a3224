from drf_spectacular.utils import OpenApiResponse, extend_schema, inline_serializer
from rest_framework import permissions, serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.api.serializers import ProfileUpdateSerializer, UserSerializer
from authentication.api.serializers.response_serializers import ErrorResponseSerializer

from .auth_views import get_auth_service


class ProfileView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="auth_profile_get",
        summary="Get the current user's profile",
        responses={200: UserSerializer},
        tags=["Authentication - Profile"],
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        operation_id="auth_profile_update",
        summary="Update the current user's profile",
        description="""
        Partial update of profile fields. `email`, `password`, `role` and
        verification flags cannot be changed here and are ignored if sent.
        """,
        request=ProfileUpdateSerializer,
        responses={
            200: UserSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
        },
        tags=["Authentication - Profile"],
    )
    def patch(self, request):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(
                {"error": "Validation failed", "errors": serializer.errors}, status=status.HTTP_400_BAD_REQUEST
            )

        result = get_auth_service().update_profile(request.user, serializer.validated_data)
        if not result.success:
            return Response({"error": result.error}, status=status.HTTP_400_BAD_REQUEST)

        request.user.refresh_from_db()
        return Response(UserSerializer(request.user).data, status=status.HTTP_200_OK)

    put = patch


class BecomeSellerView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="auth_become_seller",
        summary="Upgrade the current account to a seller account",
        request=None,
        responses={
            200: inline_serializer(
                name="BecomeSellerResponse",
                fields={
                    "message": serializers.CharField(),
                    "access": serializers.CharField(),
                    "refresh": serializers.CharField(),
                    "user": UserSerializer(),
                },
            )
        },
        tags=["Authentication - Profile"],
    )
    def post(self, request):
        result = get_auth_service().become_seller(request.user)
        return Response(
            {
                "message": result.message,
                "access": result.data["access"],
                "refresh": result.data["refresh"],
                "user": UserSerializer(request.user).data,
            },
            status=status.HTTP_200_OK,
        )
