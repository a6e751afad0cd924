"""
Site Exporter - crawl a website and export its pages into one ZIP archive.

Pages are rendered with Playwright and saved either as A4 PDF documents or
as tiled full-page PNG screenshots.
"""

__version__ = "1.0.0"
__author__ = "Site Exporter Team"
