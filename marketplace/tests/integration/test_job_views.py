from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.jobs.domain.models import JobApplication
from marketplace.tests.factories import JobApplicationFactory, JobFactory, SellerFactory, UserFactory


class JobApplicationViewsIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.employer = SellerFactory()
        self.job = JobFactory(seller=self.employer)
        self.applicant = UserFactory()
        self.apply_url = reverse("marketplace:job-apply")

    def tearDown(self):
        container.reset()

    def test_apply_with_resume(self):
        self.client.force_authenticate(user=self.applicant)
        resume = SimpleUploadedFile("cv.pdf", b"%PDF-1.4 resume", content_type="application/pdf")

        response = self.client.post(
            self.apply_url,
            {"job_id": str(self.job.id), "cover_letter": "Hire me", "expected_salary": "2500", "resume": resume},
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["employer"]["id"], str(self.employer.id))
        self.assertIn("markethub/resumes/", response.data["resume"])

    def test_apply_with_unsupported_resume(self):
        self.client.force_authenticate(user=self.applicant)
        resume = SimpleUploadedFile("cv.exe", b"MZ", content_type="application/x-msdownload")

        response = self.client.post(
            self.apply_url,
            {"job_id": str(self.job.id), "cover_letter": "Hire me", "resume": resume},
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(JobApplication.objects.exists())

    def test_apply_twice(self):
        JobApplicationFactory(job=self.job, applicant=self.applicant)
        self.client.force_authenticate(user=self.applicant)

        response = self.client.post(
            self.apply_url, {"job_id": str(self.job.id), "cover_letter": "Again"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_apply_requires_authentication(self):
        response = self.client.post(self.apply_url, {"job_id": str(self.job.id), "cover_letter": "Hi"})

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_my_applications(self):
        JobApplicationFactory(job=self.job, applicant=self.applicant)
        JobApplicationFactory()
        self.client.force_authenticate(user=self.applicant)

        response = self.client.get(reverse("marketplace:job-my-applications"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["job"]["id"], str(self.job.id))

    def test_received_and_per_job(self):
        JobApplicationFactory(job=self.job)
        JobApplicationFactory(job=self.job, status="reviewed")

        self.client.force_authenticate(user=self.employer)
        received = self.client.get(reverse("marketplace:job-received"), {"status": "reviewed"})
        per_job = self.client.get(reverse("marketplace:job-applications", args=[self.job.id]))

        self.assertEqual(received.data["count"], 1)
        self.assertEqual(len(per_job.data), 2)

        self.client.force_authenticate(user=self.applicant)
        not_owner = self.client.get(reverse("marketplace:job-applications", args=[self.job.id]))
        self.assertEqual(not_owner.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_status(self):
        application = JobApplicationFactory(job=self.job)
        url = reverse("marketplace:job-application-status", kwargs={"application_id": application.id})

        self.client.force_authenticate(user=self.applicant)
        self.assertEqual(self.client.patch(url, {"status": "hired"}, format="json").status_code, 403)

        self.client.force_authenticate(user=self.employer)
        response = self.client.patch(url, {"status": "shortlisted", "employer_notes": "Call Monday"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "shortlisted")
        self.assertEqual(response.data["employer_notes"], "Call Monday")
