"""
Job management for the site exporter.

Contains the job model and registry. Background execution lives in jobs.runner.
"""

from .models import ExportJob, JobOptions, JobStatus
from .registry import JobRegistry

__all__ = [
    "ExportJob",
    "JobOptions",
    "JobStatus",
    "JobRegistry",
]
