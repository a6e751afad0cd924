"""
Shared constants for the site exporter.

Contains common configuration values used across multiple modules.
"""

import os
import tempfile

# Default user agent string for all HTTP requests
# Used by both the browser renderer and the robots.txt fetcher
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Default request timeout in seconds
DEFAULT_TIMEOUT = 10

# Default page navigation timeout in milliseconds (for Playwright)
DEFAULT_PAGE_TIMEOUT = 15000

# Delay between exported pages in milliseconds
DEFAULT_PAGE_DELAY_MS = 0

# Crawl depth bounds
MIN_DEPTH = 1
MAX_DEPTH = 3
DEFAULT_MAX_DEPTH = 2

# Page count bounds
MIN_PAGES = 1
MAX_PAGES = 500000
DEFAULT_MAX_PAGES = 200

# Viewport used for navigation before any resize
DEFAULT_VIEWPORT = {"width": 1280, "height": 800}

# Target viewport width for tiled screenshots, and its bounds
DEFAULT_RESOLUTION = 1280
MIN_VIEWPORT_WIDTH = 640
MAX_VIEWPORT_WIDTH = 3840

# Chromium refuses viewports and captures taller than this
ENGINE_MAX_HEIGHT = 16384

# Height of one A4 page at 96 DPI (297mm / 25.4 * 96)
REFERENCE_PAGE_HEIGHT_PX = 1123

# Paper format for document exports
PDF_FORMAT = "A4"

# DEFLATE level for the output archive
ARCHIVE_COMPRESS_LEVEL = 6

# Name of the archive offered to the client
ARCHIVE_FILENAME = "site-export.zip"

# Chunk size used when streaming the archive to a client
STREAM_CHUNK_SIZE = 64 * 1024

# Root directory for per-job scratch storage
SCRATCH_ROOT = os.environ.get("SITE_EXPORTER_SCRATCH", tempfile.gettempdir())

# Seconds between cancellation checks while waiting out a page delay
CANCEL_POLL_INTERVAL = 0.1

# Seconds a finished job and its archive are kept when nobody collects them
JOB_RETENTION_SECONDS = int(os.environ.get("SITE_EXPORTER_RETENTION", 3600))
