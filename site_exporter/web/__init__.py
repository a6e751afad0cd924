"""
Web module for the site exporter.

Provides a Flask-based web interface for running export jobs.
"""

from .app import create_app

__all__ = ["create_app"]
