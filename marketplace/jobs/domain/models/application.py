from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator
from django.db import models

from marketplace.catalog.domain.models.catalog import Product

User = get_user_model()


class JobApplication(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("reviewed", "Reviewed"),
        ("shortlisted", "Shortlisted"),
        ("rejected", "Rejected"),
        ("hired", "Hired"),
    ]

    job = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="applications")
    applicant = models.ForeignKey(User, on_delete=models.CASCADE, related_name="job_applications")
    employer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="received_applications")

    cover_letter = models.TextField(max_length=2000)
    resume = models.URLField(max_length=2000, blank=True)
    resume_key = models.CharField(max_length=500, blank=True, help_text="Storage key of the uploaded resume")
    expected_salary = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    available_start_date = models.DateField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    employer_notes = models.TextField(max_length=1000, blank=True)

    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ["job", "applicant"]  # One application per job per applicant
        ordering = ["-applied_at"]
        app_label = "marketplace"
        indexes = [
            models.Index(fields=["employer", "status"], name="jobapp_employer_status_idx"),
            models.Index(fields=["applicant", "-applied_at"], name="jobapp_applicant_applied_idx"),
        ]

    def __str__(self):
        return f"{self.applicant.username} -> {self.job.title}"
