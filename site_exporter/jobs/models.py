"""
Export job state.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..crawler.scope import ScopeMode
from ..errors import InvalidInput
from ..export.exporter import ExportMode
from ..utils.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGE_DELAY_MS,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_RESOLUTION,
    MAX_DEPTH,
    MAX_PAGES,
    MAX_VIEWPORT_WIDTH,
    MIN_DEPTH,
    MIN_PAGES,
    MIN_VIEWPORT_WIDTH,
)
from ..utils.paths import get_origin


def _flag(value: Any, name: str) -> bool:
    # JSON true/false only; strings like "false" are truthy
    if not isinstance(value, bool):
        raise InvalidInput(f"{name} must be true or false")
    return value


class JobStatus(str, Enum):
    """Lifecycle states of an export job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.CANCELLED, JobStatus.FAILED)


@dataclass
class JobOptions:
    """Per-job crawl and export settings."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_pages: int = DEFAULT_MAX_PAGES
    scope: ScopeMode = ScopeMode.CHILDREN
    page_delay_ms: int = DEFAULT_PAGE_DELAY_MS
    export_mode: ExportMode = ExportMode.PDF
    resolution: int = DEFAULT_RESOLUTION
    timeout_ms: int = DEFAULT_PAGE_TIMEOUT
    respect_robots: bool = False

    def validate(self) -> "JobOptions":
        """
        Check option ranges and coerce enum fields.

        Returns:
            self, for chaining

        Raises:
            InvalidInput: If any value is out of range
        """
        self.scope = ScopeMode.parse(self.scope)
        self.export_mode = ExportMode.parse(self.export_mode)

        if not MIN_DEPTH <= self.max_depth <= MAX_DEPTH:
            raise InvalidInput(f"Depth must be between {MIN_DEPTH} and {MAX_DEPTH}")
        if not MIN_PAGES <= self.max_pages <= MAX_PAGES:
            raise InvalidInput(f"Max pages must be between {MIN_PAGES} and {MAX_PAGES}")
        if self.page_delay_ms < 0:
            raise InvalidInput("Page delay must not be negative")
        if not MIN_VIEWPORT_WIDTH <= self.resolution <= MAX_VIEWPORT_WIDTH:
            raise InvalidInput(
                f"Resolution must be between {MIN_VIEWPORT_WIDTH} and {MAX_VIEWPORT_WIDTH} pixels"
            )
        if self.timeout_ms <= 0:
            raise InvalidInput("Timeout must be positive")
        return self

    @classmethod
    def from_request(cls, data: Dict[str, Any]) -> "JobOptions":
        """
        Build options from a JSON request body.

        Raises:
            InvalidInput: If a value has the wrong type or range
        """
        try:
            options = cls(
                max_depth=int(data.get('depth', DEFAULT_MAX_DEPTH)),
                max_pages=int(data.get('maxPages', DEFAULT_MAX_PAGES)),
                scope=data.get('scope', ScopeMode.CHILDREN.value),
                page_delay_ms=int(data.get('pageDelayMs', DEFAULT_PAGE_DELAY_MS)),
                export_mode=data.get('mode', ExportMode.PDF.value),
                resolution=int(data.get('resolution', DEFAULT_RESOLUTION)),
                timeout_ms=int(data.get('timeoutMs', DEFAULT_PAGE_TIMEOUT)),
                respect_robots=_flag(data.get('respectRobots', False), 'respectRobots'),
            )
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Invalid parameter value: {e}") from e
        return options.validate()


@dataclass
class ExportJob:
    """
    One crawl-and-export job.

    Mutated only by the job's own thread, except for the cancel flag.
    """

    job_id: str
    seed_url: str
    options: JobOptions
    scratch_dir: Optional[str] = None
    origin: str = ""
    status: JobStatus = JobStatus.PENDING
    pages_exported: int = 0
    pages_failed: int = 0
    artifacts_written: int = 0
    archive_complete: bool = False
    message: str = "Queued"
    errors: List[Dict[str, str]] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    completed_at: Optional[float] = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)
    done_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def __post_init__(self):
        if not self.origin:
            self.origin = get_origin(self.seed_url)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def done(self) -> bool:
        return self.done_event.is_set()

    @property
    def pages_processed(self) -> int:
        return self.pages_exported + self.pages_failed

    def cancel(self) -> None:
        self.cancel_event.set()

    def log(self, message: str) -> None:
        self.logs.append(message)

    def record_error(self, url: str, error: str, error_type: str) -> None:
        self.errors.append({'url': url, 'error': error, 'type': error_type})

    def finish(self, status: JobStatus, message: str) -> None:
        self.status = status
        self.message = message
        self.completed_at = time.time()
        self.log(message)
        self.done_event.set()

    def to_dict(self, include_logs: bool = True) -> Dict[str, Any]:
        """Summary suitable for JSON responses."""
        data = {
            'id': self.job_id,
            'url': self.seed_url,
            'origin': self.origin,
            'status': self.status.value,
            'done': self.done,
            'depth': self.options.max_depth,
            'scope': self.options.scope.value,
            'mode': self.options.export_mode.value,
            'maxPages': self.options.max_pages,
            'pagesExported': self.pages_exported,
            'pagesFailed': self.pages_failed,
            'artifacts': self.artifacts_written,
            'message': self.message,
            'errors': self.errors[:100],
            'startedAt': self.started_at,
            'completedAt': self.completed_at,
        }
        if include_logs:
            data['logs'] = list(self.logs)
        return data
