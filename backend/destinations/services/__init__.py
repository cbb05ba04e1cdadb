"""
Services Package

Business logic layer for the Destinations service.
"""

from .job_tracker import Job, JobStatus, JobTracker
from .city_service import CityService
from .season_service import SeasonService

__all__ = [
    "Job",
    "JobStatus",
    "JobTracker",
    "CityService",
    "SeasonService",
]
