"""Boundary segmentation of a text region.

Splits a region into elementary segments whose endpoints are exactly the
union of the interval offsets falling inside it, so that the set of active
intervals never changes within a segment.
"""

from __future__ import annotations

from itertools import pairwise
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from layermark.models import Interval, TextRegion


def clamp(offset: int, region: TextRegion) -> int:
    """Clamp *offset* into ``[region.begin, region.end]``."""
    return min(max(offset, region.begin), region.end)


def intersects(interval: Interval, region: TextRegion) -> bool:
    """Whether *interval* contributes to the rendering of *region*.

    Ranged intervals must share at least one character with the region.
    Point intervals count anywhere from the region's begin to its end
    inclusive, so a marker at the very end of a text is still drawn.
    """
    if interval.zero_width:
        return region.begin <= interval.begin <= region.end
    return interval.begin < region.end and interval.end > region.begin


def boundaries(region: TextRegion, intervals: Iterable[Interval]) -> list[int]:
    """Sorted, deduplicated boundary offsets for *region*.

    Always includes the region's own begin and end. Each intersecting
    interval adds its clamped begin and end; a zero-width interval adds one
    offset.
    """
    offsets = {region.begin, region.end}
    for interval in intervals:
        if intersects(interval, region):
            offsets.add(clamp(interval.begin, region))
            offsets.add(clamp(interval.end, region))
    return sorted(offsets)


def segments(
    region: TextRegion, intervals: Iterable[Interval]
) -> Iterator[tuple[int, int]]:
    """Yield ``(sub_begin, sub_end)`` pairs covering *region* contiguously.

    Pure function of its inputs: call it again to restart. An empty region
    yields nothing; a region no interval touches yields one segment.

    Example:
        >>> from layermark.models import Interval, TextRegion
        >>> region = TextRegion("t", 0, 5)
        >>> list(segments(region, [Interval("a", 0, 3), Interval("b", 1, 5)]))
        [(0, 1), (1, 3), (3, 5)]
    """
    return pairwise(boundaries(region, intervals))
