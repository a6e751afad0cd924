"""
Crawler module for the site exporter.

Contains components for scoping, queueing, rendering and link discovery.
The traversal loop itself lives in crawler.crawler.
"""

from .scope import ScopeMode, FrontierEntry, build_frontier
from .frontier import FrontierQueue
from .links import LinkDiscoverer
from .renderer import PageRenderer

__all__ = [
    "ScopeMode",
    "FrontierEntry",
    "build_frontier",
    "FrontierQueue",
    "LinkDiscoverer",
    "PageRenderer",
]
