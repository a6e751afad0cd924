"""
Path and URL utilities for the site exporter.

Provides URL normalization, origin handling, page naming, and scratch
directory management.
"""

import os
import re
import shutil
from typing import Optional
from urllib.parse import urlparse, urlunparse, urljoin

from .constants import SCRATCH_ROOT


DEFAULT_PORTS = {"http": 80, "https": 443}

# Anything outside this set is replaced in derived page names
_UNSAFE_NAME_CHARS = re.compile(r'[^A-Za-z0-9_-]')


def _netloc(scheme: str, host: str, port: Optional[int]) -> str:
    if ':' in host:
        host = f"[{host}]"
    if port is None or DEFAULT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Normalize a URL by resolving relative paths and removing fragments.

    Scheme and host are lowercased and default ports are dropped, so two
    spellings of the same page compare equal.

    Args:
        url: URL to normalize
        base_url: Base URL for resolving relative URLs

    Returns:
        Normalized URL string, or "" for non-navigable links

    Raises:
        ValueError: If the URL has an invalid port
    """
    # Handle empty or non-navigable URLs
    if not url or url.startswith(('javascript:', 'data:', 'mailto:', 'tel:', '#')):
        return ""

    url = url.strip()

    # Resolve relative and protocol-relative URLs
    if base_url:
        url = urljoin(base_url, url)

    parsed = urlparse(url)
    if parsed.scheme not in DEFAULT_PORTS or not parsed.hostname:
        return ""

    scheme = parsed.scheme.lower()
    netloc = _netloc(scheme, parsed.hostname.lower(), parsed.port)

    path = parsed.path or '/'
    # Remove trailing slash for consistency (except for root path)
    if len(path) > 1 and path.endswith('/'):
        path = path.rstrip('/') or '/'

    return urlunparse((scheme, netloc, path, parsed.params, parsed.query, ''))


def get_origin(url: str) -> str:
    """
    Extract the origin (scheme, host and port) from a URL.

    Args:
        url: Absolute URL

    Returns:
        Origin string (e.g., 'https://example.com:8443')

    Raises:
        ValueError: If the URL has no http(s) scheme or host
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parsed.hostname:
        raise ValueError(f"Not an absolute http(s) URL: {url!r}")
    return f"{scheme}://{_netloc(scheme, parsed.hostname.lower(), parsed.port)}"


def is_same_origin(url: str, origin: str) -> bool:
    """
    Check whether a URL belongs to the given origin.

    This is an exact scheme+host+port comparison; 'example.com.evil.net'
    does not match 'example.com'.
    """
    try:
        return get_origin(url) == origin
    except ValueError:
        return False


def url_to_page_name(url: str) -> str:
    """
    Derive a filesystem-safe page name from a URL.

    The origin is dropped, leading/trailing slashes are trimmed, inner
    slashes become underscores and any other unsafe character becomes an
    underscore. The site root maps to 'index'.

    Args:
        url: Page URL

    Returns:
        Page base name without extension
    """
    parsed = urlparse(url)
    remainder = parsed.path
    if parsed.query:
        remainder = f"{remainder}?{parsed.query}"

    name = remainder.strip('/').replace('/', '_')
    name = _UNSAFE_NAME_CHARS.sub('_', name)
    return name or "index"


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def job_scratch_dir(job_id: str, root: Optional[str] = None) -> str:
    """Return the scratch directory reserved for a job."""
    return os.path.join(root or SCRATCH_ROOT, f"site_export_{job_id}")


def remove_dir(path: str) -> None:
    """Remove a directory tree if it exists."""
    shutil.rmtree(path, ignore_errors=True)
