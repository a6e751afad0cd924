"""
Export module for the site exporter.

Contains the page exporter, screenshot tile planning and archive streaming.
"""

from .archive import ArchiveStreamer, SpoolWriter, iter_spool
from .exporter import ExportMode, ExportArtifact, PageExport, PageExporter, PageNameAllocator
from .tiling import TilePlan, plan_tiles

__all__ = [
    "ArchiveStreamer",
    "SpoolWriter",
    "iter_spool",
    "ExportMode",
    "ExportArtifact",
    "PageExport",
    "PageExporter",
    "PageNameAllocator",
    "TilePlan",
    "plan_tiles",
]
