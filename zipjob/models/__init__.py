"""
Data Models Layer.

This package contains the Pydantic configuration model and the job records
shared across the application.
"""

from .config import MAX_ITEMS, ServiceConfig
from .job import Job, JobSnapshot, JobState

__all__ = ["MAX_ITEMS", "Job", "JobSnapshot", "JobState", "ServiceConfig"]
