"""Data models for layered annotation rendering.

These are plain dataclasses for in-memory use: the annotation store that
produces them (and its query language) lives outside this package.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from layermark.selection import Selection

ValueLookup: TypeAlias = "Callable[[Interval], str | None]"
IntervalSource: TypeAlias = "Callable[[Selection], Iterable[Interval]]"


@dataclass(frozen=True, slots=True)
class TextRegion:
    """A contiguous span ``[begin, end)`` of a base text.

    Attributes:
        resource: Identifier of the text resource the region belongs to.
        begin: Start offset in Unicode code points (inclusive).
        end: End offset in Unicode code points (exclusive).
    """

    resource: str
    begin: int
    end: int

    def __post_init__(self) -> None:
        if self.begin < 0 or self.end < self.begin:
            msg = f"Invalid region [{self.begin}, {self.end}) on {self.resource!r}"
            raise ValueError(msg)

    def __len__(self) -> int:
        return self.end - self.begin


@dataclass(frozen=True, slots=True)
class Interval:
    """One labelled range over the base text.

    Attributes:
        id: Public identifier of the underlying annotation, if it has one.
        begin: Start offset (inclusive), absolute in the base text.
        end: End offset (exclusive). Equal to ``begin`` for point annotations.
        layer: Index of the highlight layer this interval belongs to, or None
            for intervals that are only part of the segmentation.
        data: Key/value data consulted by tag rules.
    """

    id: str | None
    begin: int
    end: int
    layer: int | None = None
    data: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if self.end < self.begin:
            msg = f"Invalid interval [{self.begin}, {self.end}) for {self.id!r}"
            raise ValueError(msg)

    @property
    def zero_width(self) -> bool:
        return self.begin == self.end


# ---------------------------------------------------------------------------
# Tag rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NoTag:
    """Highlight only, no tag."""


@dataclass(frozen=True, slots=True)
class IdTag:
    """Tag with the interval's public identifier."""


@dataclass(frozen=True, slots=True)
class KeyTag:
    """Tag with the key name (or the layer's label override)."""

    key: str


@dataclass(frozen=True, slots=True)
class KeyValueTag:
    """Tag with ``key: value``; falls back to the key when there is no value."""

    key: str
    value: ValueLookup | None = None


@dataclass(frozen=True, slots=True)
class ValueTag:
    """Tag with the value for a key; falls back to the key when absent."""

    key: str
    value: ValueLookup | None = None


TagRule: TypeAlias = "NoTag | IdTag | KeyTag | KeyValueTag | ValueTag"


def _lookup(rule: KeyValueTag | ValueTag, interval: Interval) -> str | None:
    if rule.value is not None:
        return rule.value(interval)
    value = interval.data.get(rule.key)
    return None if value is None else str(value)


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Layer:
    """An independent highlight category.

    Attributes:
        name: Bound variable name of the highlight (shown in the legend).
        tag: How to label intervals of this layer when they close.
        label: Display override for the legend and for key names in tags.
        style: Extra CSS class applied while this layer is active.
        hide: Track the layer's intervals but draw nothing for them.
        source: Interval source for this layer; called once per selection.
    """

    name: str | None = None
    tag: TagRule = NoTag()
    label: str | None = None
    style: str | None = None
    hide: bool = False
    source: IntervalSource | None = field(default=None, compare=False)

    @property
    def display_name(self) -> str:
        """Name shown in legends, with underscores rendered as spaces."""
        return (self.label or self.name or "(untitled)").replace("_", " ")

    def tag_text(self, interval: Interval) -> str:
        """Serialise this layer's tag for *interval*; empty means no tag."""
        match self.tag:
            case NoTag():
                return ""
            case IdTag():
                return interval.id or ""
            case KeyTag(key=key):
                return self.label or key
            case KeyValueTag(key=key):
                value = _lookup(self.tag, interval)
                if value is None:
                    return self.label or key
                return f"{self.label or key}: {value}"
            case ValueTag(key=key):
                value = _lookup(self.tag, interval)
                return self.label or key if value is None else value
        return ""
