from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.responses import error_response, page_params, paginated_response, serialize_page
from marketplace.api.serializers import ErrorResponseSerializer
from marketplace.jobs.api.serializers.job_serializers import (
    ApplicationStatusUpdateSerializer,
    JobApplicationCreateSerializer,
    JobApplicationSerializer,
)
from marketplace.jobs.domain.services import JobApplicationService


class JobApplicationViewSet(viewsets.ViewSet):
    """
    Applying to job listings, the applicant's history and the employer inbox.
    Detail routes take the job listing id.
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    lookup_value_regex = r"[0-9a-fA-F-]{32,36}"

    def get_service(self) -> JobApplicationService:
        return container.job_application_service()

    @extend_schema(
        operation_id="jobs_apply",
        summary="Apply to a job",
        description="""
        **What it receives (multipart or JSON):**
        - `job_id` (UUID): Job listing
        - `cover_letter` (string, max 2000)
        - `expected_salary` (decimal, optional), `available_start_date` (date, optional)
        - `resume` (file, optional): PDF, DOC, DOCX or TXT up to 10MB

        **What it returns:**
        - The created application. If the resume cannot be stored the application is kept without it.
        """,
        request={
            "multipart/form-data": JobApplicationCreateSerializer,
            "application/json": JobApplicationCreateSerializer,
        },
        responses={
            201: JobApplicationSerializer,
            400: OpenApiResponse(
                response=ErrorResponseSerializer, description="Not a job, already applied, or invalid resume"
            ),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Job not found"),
        },
        tags=["Marketplace - Jobs"],
    )
    @action(detail=False, methods=["post"])
    def apply(self, request):
        serializer = JobApplicationCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        resume = data.pop("resume", None)
        result = self.get_service().apply(request.user, data.pop("job_id"), data, resume_file=resume)
        if not result.ok:
            return error_response(result)
        return Response(JobApplicationSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="jobs_my_applications",
        summary="My job applications",
        parameters=[
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 10)"),
        ],
        responses={
            200: OpenApiResponse(
                response=paginated_response("MyApplicationsPaginatedResponse", JobApplicationSerializer),
                description="Applications retrieved successfully",
            )
        },
        tags=["Marketplace - Jobs"],
    )
    @action(detail=False, methods=["get"], url_path="applications/mine")
    def my_applications(self, request):
        result = self.get_service().list_my_applications(request.user, **page_params(request, 10))
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, JobApplicationSerializer))

    @extend_schema(
        operation_id="jobs_received_applications",
        summary="Applications received across my job listings",
        parameters=[
            OpenApiParameter(name="status", type=str, description="Filter by application status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 10)"),
        ],
        responses={
            200: OpenApiResponse(
                response=paginated_response("ReceivedApplicationsPaginatedResponse", JobApplicationSerializer),
                description="Applications retrieved successfully",
            )
        },
        tags=["Marketplace - Jobs"],
    )
    @action(detail=False, methods=["get"], url_path="applications/received")
    def received(self, request):
        result = self.get_service().list_employer_applications(
            request.user, status=request.query_params.get("status"), **page_params(request, 10)
        )
        if not result.ok:
            return error_response(result)
        return Response(serialize_page(result.value, JobApplicationSerializer))

    @extend_schema(
        operation_id="jobs_applications_for_job",
        summary="Applications for one of my jobs",
        responses={
            200: JobApplicationSerializer(many=True),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Job not found or not yours"),
        },
        tags=["Marketplace - Jobs"],
    )
    @action(detail=True, methods=["get"])
    def applications(self, request, pk=None):
        result = self.get_service().list_job_applications(pk, request.user)
        if not result.ok:
            return error_response(result)
        return Response(JobApplicationSerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="jobs_application_status",
        summary="Update an application's status (Employer only)",
        description="""
        **What it receives:**
        - `status`: pending, reviewed, shortlisted, rejected or hired
        - `employer_notes` (optional, max 1000)
        """,
        request=ApplicationStatusUpdateSerializer,
        responses={
            200: JobApplicationSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the employer"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Application not found"),
        },
        tags=["Marketplace - Jobs"],
    )
    @action(detail=False, methods=["patch"], url_path=r"applications/(?P<application_id>\d+)/status")
    def application_status(self, request, application_id=None):
        serializer = ApplicationStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_application_status(
            int(application_id),
            request.user,
            serializer.validated_data["status"],
            employer_notes=serializer.validated_data.get("employer_notes"),
        )
        if not result.ok:
            return error_response(result)
        return Response(JobApplicationSerializer(result.value).data)
