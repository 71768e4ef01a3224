from .job_application_service import JobApplicationService

__all__ = ["JobApplicationService"]
