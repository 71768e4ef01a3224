from unittest.mock import MagicMock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from infrastructure.storage import StorageException, StorageFile
from marketplace.jobs.domain.services import JobApplicationService
from marketplace.models import JobApplication
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import JobApplicationFactory, JobFactory, ProductFactory, UserFactory
from marketplace.uploads.domain.services import UploadService


def make_resume(name="cv.pdf", content_type="application/pdf"):
    return SimpleUploadedFile(name, b"%PDF-1.4 resume body", content_type=content_type)


@pytest.mark.django_db
class TestJobApplicationService:
    @pytest.fixture(autouse=True)
    def setup(self, db):
        self.storage = MagicMock()
        self.storage.upload.return_value = StorageFile(
            key="markethub/resumes/resume_1.pdf",
            url="https://cdn.example.com/markethub/resumes/resume_1.pdf",
            size=20,
            content_type="application/pdf",
        )
        self.service = JobApplicationService(upload_service=UploadService(storage=self.storage))
        self.job = JobFactory()
        self.applicant = UserFactory()

    def test_apply_with_resume(self):
        result = self.service.apply(
            self.applicant, self.job.id, {"cover_letter": "I am a great fit", "expected_salary": 3000}, make_resume()
        )

        assert result.ok
        application = result.value
        assert application.employer_id == self.job.seller_id
        assert application.resume == "https://cdn.example.com/markethub/resumes/resume_1.pdf"
        assert application.resume_key == "markethub/resumes/resume_1.pdf"
        assert application.status == "pending"

    def test_apply_without_resume(self):
        result = self.service.apply(self.applicant, self.job.id, {"cover_letter": "Hello"})

        assert result.ok
        assert result.value.resume == ""
        self.storage.upload.assert_not_called()

    def test_storage_failure_keeps_application(self):
        self.storage.upload.side_effect = StorageException("down")

        result = self.service.apply(self.applicant, self.job.id, {"cover_letter": "Hello"}, make_resume())

        assert result.ok
        assert result.value.resume == ""

    def test_invalid_resume_rejects_application(self):
        resume = make_resume(name="cv.exe", content_type="application/x-msdownload")

        result = self.service.apply(self.applicant, self.job.id, {"cover_letter": "Hello"}, resume)

        assert result.error == ErrorCodes.UNSUPPORTED_FILE_TYPE
        assert not JobApplication.objects.exists()

    def test_apply_twice(self):
        self.service.apply(self.applicant, self.job.id, {"cover_letter": "Hello"})

        result = self.service.apply(self.applicant, self.job.id, {"cover_letter": "Hello again"})

        assert result.error == ErrorCodes.ALREADY_APPLIED

    def test_apply_to_non_job(self):
        product = ProductFactory()

        result = self.service.apply(self.applicant, product.id, {"cover_letter": "Hello"})

        assert result.error == ErrorCodes.NOT_A_JOB

    def test_apply_to_own_job(self):
        result = self.service.apply(self.job.seller, self.job.id, {"cover_letter": "Hello"})
        assert result.error == ErrorCodes.INVALID_INPUT

    def test_cover_letter_required(self):
        result = self.service.apply(self.applicant, self.job.id, {"cover_letter": "  "})
        assert result.error == ErrorCodes.VALIDATION_ERROR

    def test_list_job_applications_owner_only(self):
        JobApplicationFactory(job=self.job)

        owner = self.service.list_job_applications(self.job.id, self.job.seller)
        stranger = self.service.list_job_applications(self.job.id, UserFactory())

        assert len(owner.value) == 1
        assert stranger.error == ErrorCodes.JOB_NOT_FOUND

    def test_update_status_employer_only(self):
        application = JobApplicationFactory(job=self.job)

        denied = self.service.update_application_status(application.id, self.applicant, "reviewed")
        allowed = self.service.update_application_status(
            application.id, self.job.seller, "shortlisted", employer_notes="Call back"
        )
        invalid = self.service.update_application_status(application.id, self.job.seller, "approved")

        assert denied.error == ErrorCodes.PERMISSION_DENIED
        assert allowed.value.status == "shortlisted"
        assert allowed.value.employer_notes == "Call back"
        assert invalid.error == ErrorCodes.INVALID_STATUS

    def test_employer_and_applicant_lists(self):
        JobApplicationFactory(job=self.job, applicant=self.applicant)
        JobApplicationFactory(job=self.job, status="hired")

        mine = self.service.list_my_applications(self.applicant).value
        received = self.service.list_employer_applications(self.job.seller).value
        hired = self.service.list_employer_applications(self.job.seller, status="hired").value

        assert mine["count"] == 1
        assert received["count"] == 2
        assert hired["count"] == 1
