"""Layer resolution: the active-interval state machine.

Walks the boundaries of one primary selection and, at each, reports which
intervals close (with their display label), which zero-width markers sit
there, which intervals open, and which highlight layers are active on either
side.

Architecture:
    Intervals are interned into a per-selection arena sorted by
    ``(begin, end, insertion index)``; the ActiveSet and every event refer
    to arena indices rather than to the intervals themselves. Iteration
    never depends on hash order, so the same input always yields the same
    events.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from layermark.render.segments import boundaries, clamp, intersects

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from layermark.models import Interval, Layer, TextRegion


# ---------------------------------------------------------------------------
# Active set
# ---------------------------------------------------------------------------


class ActiveSet:
    """Currently open interval indices, in the order they were opened."""

    __slots__ = ("_members",)

    def __init__(self) -> None:
        self._members: dict[int, None] = {}

    def add(self, index: int) -> None:
        self._members.setdefault(index, None)

    def discard(self, index: int) -> None:
        self._members.pop(index, None)

    def clear(self) -> None:
        self._members.clear()

    def __contains__(self, index: object) -> bool:
        return index in self._members

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._members))

    def __len__(self) -> int:
        return len(self._members)

    def layers(self, arena: Sequence[Interval]) -> tuple[int, ...]:
        """Sorted layer indices with at least one open interval."""
        found = {arena[i].layer for i in self._members}
        return tuple(sorted(layer for layer in found if layer is not None))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Closing:
    """An interval closing (or a zero-width marker) at a boundary.

    Attributes:
        index: Arena index of the interval.
        interval: The interval itself.
        label: Display label, or None when nothing should be shown.
    """

    index: int
    interval: Interval
    label: str | None


@dataclass(frozen=True, slots=True)
class BoundaryEvent:
    """Everything that happens at one boundary offset.

    Emitters process the fields in declaration order: text up to ``offset``
    has already been written, then ``closing`` (oldest-opened first), then
    ``markers``, then ``opening``.

    Attributes:
        offset: Absolute offset of the boundary.
        closing: Intervals whose range ends here.
        markers: Zero-width intervals located here.
        opening: Arena indices of intervals starting here.
        layers_before: Layers active on the segment that ends here.
        layers_after: Layers active on the segment that starts here.
        active_after: Arena indices open on the segment that starts here.
        final: This is the region's end; nothing opens here.
    """

    offset: int
    closing: tuple[Closing, ...]
    markers: tuple[Closing, ...]
    opening: tuple[int, ...]
    layers_before: tuple[int, ...]
    layers_after: tuple[int, ...]
    active_after: tuple[int, ...]
    final: bool


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class LayerResolver:
    """Resolve per-boundary layer state for one primary selection.

    Args:
        region: The region being rendered.
        intervals: Intervals to render, in insertion order. Intervals that
            do not intersect *region* are ignored.
        layers: Configured highlight layers.
    """

    def __init__(
        self,
        region: TextRegion,
        intervals: Sequence[Interval],
        layers: Sequence[Layer],
    ) -> None:
        self.region = region
        self.layers = tuple(layers)
        order = sorted(
            range(len(intervals)),
            key=lambda i: (intervals[i].begin, intervals[i].end, i),
        )
        self.arena: tuple[Interval, ...] = tuple(
            intervals[i] for i in order if intersects(intervals[i], region)
        )
        self.active = ActiveSet()

        self._opening: dict[int, list[int]] = defaultdict(list)
        self._markers: dict[int, list[int]] = defaultdict(list)
        for index, interval in enumerate(self.arena):
            if interval.zero_width:
                self._markers[interval.begin].append(index)
            else:
                self._opening[clamp(interval.begin, region)].append(index)

    def label_for(self, interval: Interval) -> str | None:
        """Display label for *interval* as it closes, or None.

        Intervals outside any layer, in hidden layers, or cut off by the end
        of the region get no label; neither do tags that serialise to ``""``.
        """
        if interval.layer is None:
            return None
        layer = self.layers[interval.layer]
        if layer.hide or interval.end > self.region.end:
            return None
        return layer.tag_text(interval) or None

    def resolve(self) -> Iterator[BoundaryEvent]:
        """Yield one event per boundary, in document order.

        The ActiveSet is reset first, so each call starts a fresh traversal.
        """
        self.active.clear()
        for offset in boundaries(self.region, self.arena):
            yield self._step(offset)

    def _step(self, offset: int) -> BoundaryEvent:
        region = self.region
        arena = self.arena
        layers_before = self.active.layers(arena)

        closing: list[Closing] = []
        for index in self.active:
            interval = arena[index]
            if clamp(interval.end, region) == offset:
                self.active.discard(index)
                closing.append(Closing(index, interval, self.label_for(interval)))

        markers = tuple(
            Closing(index, arena[index], self.label_for(arena[index]))
            for index in self._markers.get(offset, ())
        )

        final = offset == region.end
        opening: tuple[int, ...] = ()
        if not final:
            opening = tuple(self._opening.get(offset, ()))
            for index in opening:
                self.active.add(index)

        return BoundaryEvent(
            offset=offset,
            closing=tuple(closing),
            markers=markers,
            opening=opening,
            layers_before=layers_before,
            layers_after=self.active.layers(arena),
            active_after=tuple(self.active),
            final=final,
        )
