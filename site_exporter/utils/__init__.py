"""
Utility modules for the site exporter.

Contains logging, URL and path handling, robots.txt parsing utilities, and constants.
"""

from .log import setup_logger, get_logger
from .paths import (
    normalize_url,
    get_origin,
    is_same_origin,
    url_to_page_name,
    ensure_dir,
)
from .robots import RobotsHandler
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_MAX_PAGES,
    DEFAULT_MAX_DEPTH,
    DEFAULT_RESOLUTION,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "normalize_url",
    "get_origin",
    "is_same_origin",
    "url_to_page_name",
    "ensure_dir",
    "RobotsHandler",
    "DEFAULT_USER_AGENT",
    "DEFAULT_PAGE_TIMEOUT",
    "DEFAULT_MAX_PAGES",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_RESOLUTION",
]
