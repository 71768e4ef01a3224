from rest_framework import serializers

from authentication.api.serializers import PublicUserSerializer
from marketplace.jobs.domain.models import JobApplication


class JobApplicationCreateSerializer(serializers.Serializer):
    """Multipart body of ``POST /jobs/apply/``."""

    job_id = serializers.UUIDField()
    cover_letter = serializers.CharField(max_length=2000)
    expected_salary = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    available_start_date = serializers.DateField(required=False, allow_null=True)
    resume = serializers.FileField(required=False, help_text="PDF, DOC, DOCX or TXT, up to 10MB")


class JobSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    slug = serializers.CharField()
    location = serializers.CharField()
    job_type = serializers.CharField()
    salary = serializers.CharField()


class JobApplicationSerializer(serializers.ModelSerializer):
    job = JobSummarySerializer(read_only=True)
    applicant = PublicUserSerializer(read_only=True)
    employer = PublicUserSerializer(read_only=True)
    applicant_email = serializers.EmailField(source="applicant.email", read_only=True)

    class Meta:
        model = JobApplication
        fields = [
            "id",
            "job",
            "applicant",
            "applicant_email",
            "employer",
            "cover_letter",
            "resume",
            "expected_salary",
            "available_start_date",
            "status",
            "employer_notes",
            "applied_at",
            "updated_at",
        ]
        read_only_fields = fields


class ApplicationStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=JobApplication.STATUS_CHOICES)
    employer_notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)
