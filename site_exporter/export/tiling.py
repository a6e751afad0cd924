"""
Tile planning for full-page screenshot exports.

A rendered page can be far taller than the browser will capture in one call,
so the page is cut into bounded-height tiles, each roughly one printed page
tall at the export's scale.
"""

import math
from dataclasses import dataclass, field
from typing import List, Tuple

from ..utils.constants import (
    ENGINE_MAX_HEIGHT,
    MAX_VIEWPORT_WIDTH,
    MIN_VIEWPORT_WIDTH,
    REFERENCE_PAGE_HEIGHT_PX,
)


@dataclass
class TilePlan:
    """Viewport size and tile rectangles for one page."""

    viewport_width: int
    viewport_height: int
    tile_height: int
    scale: float
    # (y offset, height) pairs, top to bottom
    tiles: List[Tuple[int, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tiles)


def clamp_width(width: int) -> int:
    """Clamp a requested viewport width to the supported range."""
    return max(MIN_VIEWPORT_WIDTH, min(MAX_VIEWPORT_WIDTH, int(width)))


def plan_tiles(
    scroll_width: int,
    scroll_height: int,
    target_width: int,
    reference_height: int = REFERENCE_PAGE_HEIGHT_PX,
    max_height: int = ENGINE_MAX_HEIGHT,
) -> TilePlan:
    """
    Work out how to capture a page as a stack of tiles.

    Args:
        scroll_width: Full scrollable width of the rendered document
        scroll_height: Full scrollable height of the rendered document
        target_width: Requested output width in pixels
        reference_height: Pixel height of one output page at the reference DPI
        max_height: Largest viewport/capture height the engine accepts

    Returns:
        TilePlan whose tile heights sum to exactly viewport_height
    """
    viewport_width = clamp_width(target_width)
    scale = viewport_width / max(1, scroll_width)

    viewport_height = min(math.ceil(max(0, scroll_height) * scale), max_height)
    viewport_height = max(1, viewport_height)

    tile_height = min(max(1, math.ceil(reference_height * scale)), max_height)

    tiles = []
    y = 0
    while y < viewport_height:
        tiles.append((y, min(tile_height, viewport_height - y)))
        y += tile_height

    return TilePlan(
        viewport_width=viewport_width,
        viewport_height=viewport_height,
        tile_height=tile_height,
        scale=scale,
        tiles=tiles,
    )
