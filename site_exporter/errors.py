"""
Exception types raised by the site exporter.

Only ArchiveWriteError is fatal to a running job. RenderError and
LinkResolutionError are recovered inside the traversal loop, and
InvalidInput is raised before any traversal starts.
"""

from typing import Optional


class SiteExporterError(Exception):
    """Base class for all site exporter errors."""


class InvalidInput(SiteExporterError):
    """A job request has a malformed seed URL or out-of-range option."""


class RenderError(SiteExporterError):
    """A single page could not be navigated to or rendered."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class LinkResolutionError(SiteExporterError):
    """A discovered href does not resolve to a usable URL."""

    def __init__(self, href: str, reason: Optional[str] = None):
        super().__init__(f"Cannot resolve link {href!r}" + (f": {reason}" if reason else ""))
        self.href = href


class ArchiveWriteError(SiteExporterError):
    """Writing to the output archive failed."""


class ArchiveClosedError(ArchiveWriteError):
    """The archive was already finalized."""


class JobNotFound(SiteExporterError):
    """No job is registered under the given id."""

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class DownloadInProgress(SiteExporterError):
    """The job's archive is already being delivered to another client."""

    def __init__(self, job_id: str):
        super().__init__(f"Archive for job {job_id} is already being downloaded")
        self.job_id = job_id
