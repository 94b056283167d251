"""Job posting services."""

from .models import JOB_STATUSES, JobPostingPatch, PatientInfo
from .posting_service import PostingService

__all__ = ["JOB_STATUSES", "JobPostingPatch", "PatientInfo", "PostingService"]
