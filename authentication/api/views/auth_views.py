from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.api.serializers import LoginRequestSerializer, UserRegistrationSerializer, UserSerializer
from authentication.api.serializers.response_serializers import AuthResponseSerializer, ErrorResponseSerializer
from authentication.domain.services import AuthService


def get_auth_service():
    """Factory to get an AuthService instance."""
    return AuthService()


class RegisterAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_register",
        summary="Register new user account",
        description="""
        Create a new account and return a JWT pair so the client is signed in immediately.

        **Validation:**
        - `username`: 3-30 characters, letters, numbers and underscores
        - `password`: at least 6 characters
        - `first_name` / `last_name`: 2-50 characters
        - `phone` (optional): international format
        """,
        request=UserRegistrationSerializer,
        responses={
            201: OpenApiResponse(response=AuthResponseSerializer, description="Account created"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error or duplicate"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Validation failed", "errors": serializer.errors}, status=status.HTTP_400_BAD_REQUEST
            )

        result = get_auth_service().register(serializer.validated_data)
        if not result.success:
            return Response({"error": result.error, "errors": result.errors or {}}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "message": result.message,
                "access": result.access_token,
                "refresh": result.refresh_token,
                "user": UserSerializer(result.user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_login",
        summary="Login with email and password",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(
                response=AuthResponseSerializer,
                description="Login successful",
                examples=[
                    OpenApiExample(
                        "Successful Login",
                        value={
                            "message": "Login successful",
                            "access": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                            "refresh": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                            "user": {
                                "id": "123e4567-e89b-12d3-a456-426614174000",
                                "email": "user@example.com",
                                "username": "johndoe",
                                "role": "user",
                            },
                        },
                    )
                ],
            ),
            401: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid credentials"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Account disabled"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        email = request.data.get("email")
        password = request.data.get("password")

        result = get_auth_service().login(email, password)

        if result.success:
            return Response(
                {
                    "message": result.message,
                    "access": result.access_token,
                    "refresh": result.refresh_token,
                    "user": UserSerializer(result.user).data,
                },
                status=status.HTTP_200_OK,
            )

        if result.inactive:
            return Response({"error": result.error}, status=status.HTTP_403_FORBIDDEN)
        return Response({"error": result.error}, status=status.HTTP_401_UNAUTHORIZED)
