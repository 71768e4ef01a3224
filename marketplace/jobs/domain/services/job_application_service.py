"""
JobApplicationService - applying to job listings and the employer inbox.
"""

import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from marketplace.catalog.domain.models import Product
from marketplace.infra.observability.metrics import job_applications_total, resume_upload_failures
from marketplace.jobs.domain.models import JobApplication
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, paginate, service_err, service_ok
from marketplace.uploads.domain.services import UploadService

User = get_user_model()
logger = logging.getLogger(__name__)

APPLICATION_STATUSES = [choice for choice, _ in JobApplication.STATUS_CHOICES]


class JobApplicationService(BaseService):
    """
    Service for job applications.

    Responsibilities:
    - Apply to a job listing with an optional resume upload
    - Applicant history
    - Per-job and per-employer application lists
    - Employer status updates

    Dependencies:
    - UploadService: Resume validation and storage
    """

    def __init__(self, upload_service: UploadService = None):
        super().__init__()
        self._upload_service = upload_service

    @property
    def upload_service(self) -> UploadService:
        if self._upload_service is None:
            self._upload_service = UploadService()
        return self._upload_service

    def _applications(self):
        return JobApplication.objects.select_related("job", "job__seller", "applicant", "employer")

    @BaseService.log_performance
    @transaction.atomic
    def apply(self, user: User, job_id: str, data: Dict[str, Any], resume_file=None) -> ServiceResult[JobApplication]:
        """
        Submit an application to a job listing.

        A resume that fails validation rejects the application. A resume
        that validates but cannot be stored is dropped: the application is
        saved without it and the failure is logged and counted.

        Example:
            >>> result = job_service.apply(user, job.id, {"cover_letter": "Hi"}, request.FILES.get("resume"))
        """
        try:
            try:
                job = Product.objects.select_related("seller").get(id=job_id)
            except (Product.DoesNotExist, ValidationError):
                return service_err(ErrorCodes.JOB_NOT_FOUND, "Job not found")

            if job.listing_type != "jobs":
                return service_err(ErrorCodes.NOT_A_JOB, "This is not a job posting")
            if job.seller_id == user.id:
                return service_err(ErrorCodes.INVALID_INPUT, "You cannot apply to your own job posting")
            if JobApplication.objects.filter(job=job, applicant=user).exists():
                return service_err(ErrorCodes.ALREADY_APPLIED, "You have already applied for this job")

            cover_letter = (data.get("cover_letter") or "").strip()
            if not cover_letter:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Cover letter is required")

            resume_url, resume_key = "", ""
            if resume_file is not None:
                validation = self.upload_service.validate_resume(resume_file)
                if not validation.ok:
                    return validation

                upload_result = self.upload_service.upload_resume(resume_file, user.id)
                if upload_result.ok:
                    resume_url, resume_key = upload_result.value.url, upload_result.value.key
                else:
                    resume_upload_failures.inc()
                    self.logger.warning(
                        f"Resume upload failed for user {user.id} on job {job.id}, "
                        f"continuing without resume: {upload_result.error_detail}"
                    )

            try:
                with transaction.atomic():
                    application = JobApplication.objects.create(
                        job=job,
                        applicant=user,
                        employer=job.seller,
                        cover_letter=cover_letter,
                        resume=resume_url,
                        resume_key=resume_key,
                        expected_salary=data.get("expected_salary"),
                        available_start_date=data.get("available_start_date"),
                    )
            except IntegrityError:
                return service_err(ErrorCodes.ALREADY_APPLIED, "You have already applied for this job")

            job_applications_total.inc()
            self.logger.info(f"User {user.id} applied to job {job.id} (application={application.id})")
            return service_ok(application)

        except Exception as e:
            self.logger.error(f"Error applying to job {job_id} for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_my_applications(self, user: User, page: int = 1, page_size: int = 10) -> ServiceResult[Dict]:
        try:
            queryset = self._applications().filter(applicant=user).order_by("-applied_at")
            return service_ok(paginate(queryset, page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing applications of user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_job_applications(self, job_id: str, user: User) -> ServiceResult[list]:
        """Applications for one job; only its owner may look (404 otherwise)."""
        try:
            try:
                owns_job = Product.objects.filter(id=job_id, seller=user).exists()
            except ValidationError:
                owns_job = False
            if not owns_job:
                return service_err(ErrorCodes.JOB_NOT_FOUND, "Job not found or unauthorized")

            applications = self._applications().filter(job_id=job_id).order_by("-applied_at")
            return service_ok(list(applications))

        except Exception as e:
            self.logger.error(f"Error listing applications for job {job_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_application_status(
        self, application_id: int, user: User, status: str, employer_notes: Optional[str] = None
    ) -> ServiceResult[JobApplication]:
        try:
            if status not in APPLICATION_STATUSES:
                return service_err(ErrorCodes.INVALID_STATUS, f"Invalid status '{status}'")

            application = self._applications().filter(id=application_id).first()
            if application is None:
                return service_err(ErrorCodes.APPLICATION_NOT_FOUND, "Application not found")

            if application.employer_id != user.id:
                return service_err(ErrorCodes.PERMISSION_DENIED, "Only the employer can update this application")

            application.status = status
            if employer_notes:
                application.employer_notes = employer_notes
            application.save(update_fields=["status", "employer_notes", "updated_at"])

            self.logger.info(f"Application {application.id} set to {status} by employer {user.id}")
            return service_ok(application)

        except Exception as e:
            self.logger.error(f"Error updating application {application_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def list_employer_applications(
        self, user: User, status: Optional[str] = None, page: int = 1, page_size: int = 10
    ) -> ServiceResult[Dict]:
        """Every application received across the employer's job listings."""
        try:
            queryset = self._applications().filter(employer=user)
            if status:
                queryset = queryset.filter(status=status)
            return service_ok(paginate(queryset.order_by("-applied_at"), page, page_size))

        except Exception as e:
            self.logger.error(f"Error listing received applications of user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
