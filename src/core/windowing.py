# core/windowing.py
"""
Viewport windowing for long, fixed-row-height lists.

Only the rows intersecting the viewport (plus an overscan margin on each side)
get materialized, so render cost follows the window size instead of the list
size. Every row is placed at `index * item_extent` from the list origin, which
lets the host skip indices without shifting siblings.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Tuple

DEFAULT_OVERSCAN = 5


class VisibleRange(NamedTuple):
    start: int  # inclusive
    end: int    # exclusive

    @property
    def count(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    def indices(self) -> range:
        return range(self.start, self.end)


@dataclass
class Viewport:
    scroll_offset: float = 0.0
    viewport_extent: float = 600.0
    item_extent: float = 40.0
    overscan: int = DEFAULT_OVERSCAN

    def visible_range(self, total_count: int) -> VisibleRange:
        return compute_visible_range(
            total_count,
            self.item_extent,
            self.viewport_extent,
            self.scroll_offset,
            self.overscan,
        )


def compute_visible_range(
    total_count: int,
    item_extent: float,
    viewport_extent: float,
    scroll_offset: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> VisibleRange:
    if total_count <= 0 or item_extent <= 0:
        return VisibleRange(0, 0)

    scroll_offset = max(0.0, float(scroll_offset))
    viewport_extent = max(0.0, float(viewport_extent))
    overscan = max(0, int(overscan))

    first = int(scroll_offset // item_extent)
    visible_count = int(math.ceil(viewport_extent / item_extent))

    end = min(total_count, first + visible_count + overscan)
    start = min(max(0, first - overscan), end)
    return VisibleRange(start, end)


def item_offset(index: int, item_extent: float) -> float:
    """Absolute offset of a row from the list origin."""
    return index * item_extent


def content_extent(total_count: int, item_extent: float) -> float:
    return max(0, total_count) * item_extent


def max_scroll_offset(total_count: int, item_extent: float, viewport_extent: float) -> float:
    return max(0.0, content_extent(total_count, item_extent) - viewport_extent)


def layout_window(
    total_count: int,
    item_extent: float,
    viewport_extent: float,
    scroll_offset: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> List[Tuple[int, float]]:
    """(index, absolute_offset) for every row that must be materialized."""
    rng = compute_visible_range(total_count, item_extent, viewport_extent, scroll_offset, overscan)
    return [(i, item_offset(i, item_extent)) for i in rng.indices()]
