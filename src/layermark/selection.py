"""Primary selections and interval collection.

A primary selection is the text region currently being rendered, together
with the base intervals the segmentation oracle reported over it. Highlight
layers contribute further intervals through their ``source`` callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, TypeAlias

from layermark.models import Interval, TextRegion

if TYPE_CHECKING:
    from layermark.models import Layer

logger = logging.getLogger(__name__)


class MalformedSelectionError(Exception):
    """A primary selection has no single extractable text."""

    def __init__(self, message: str, identifier: str | None = None) -> None:
        self.identifier = identifier
        super().__init__(message)

    def __str__(self) -> str:
        if self.identifier is None:
            return self.args[0]
        return f"{self.args[0]} ({self.identifier})"


class UnresolvedBindingError(LookupError):
    """A highlight layer could not bind to the current selection."""


SelectionItem: TypeAlias = "Selection | Callable[[], Selection]"


@dataclass(frozen=True, slots=True)
class Selection:
    """A primary selection to render.

    Attributes:
        region: The text region being rendered.
        text: Literal text content of *region*.
        identifier: Title shown above the selection, if any.
        whole_resource: The region covers an entire text resource.
        intervals: Base intervals over the region (layer membership optional).
    """

    region: TextRegion
    text: str
    identifier: str | None = None
    whole_resource: bool = False
    intervals: Sequence[Interval] = field(default=(), compare=False)

    def check(self) -> None:
        """Verify the text matches the region before rendering it.

        Raises:
            MalformedSelectionError: If the text length and region disagree.
        """
        if len(self.text) != len(self.region):
            msg = (
                f"Text length {len(self.text)} does not match region "
                f"[{self.region.begin}, {self.region.end})"
            )
            raise MalformedSelectionError(msg, self.identifier)

    @classmethod
    def from_targets(
        cls,
        targets: Sequence[tuple[TextRegion, str]],
        identifier: str | None = None,
        intervals: Sequence[Interval] = (),
    ) -> Selection:
        """Build a selection from an upstream result's text targets.

        An annotation used as a primary selection must reference exactly one
        stretch of text.

        Raises:
            MalformedSelectionError: If *targets* is empty or has more than
                one entry.
        """
        if not targets:
            msg = "Resulting annotation does not reference any text"
            raise MalformedSelectionError(msg, identifier)
        if len(targets) > 1:
            msg = "Resulting annotation references more than one text"
            raise MalformedSelectionError(msg, identifier)
        region, text = targets[0]
        return cls(region=region, text=text, identifier=identifier, intervals=intervals)

    @classmethod
    def whole(
        cls,
        resource: str,
        text: str,
        intervals: Sequence[Interval] = (),
    ) -> Selection:
        """Select an entire text resource, titled by its identifier."""
        return cls(
            region=TextRegion(resource, 0, len(text)),
            text=text,
            identifier=resource,
            whole_resource=True,
            intervals=intervals,
        )


def resolve_selection(item: SelectionItem) -> Selection:
    """Resolve a stream item (a selection or a deferred resolver) and check it.

    Raises:
        MalformedSelectionError: If resolution fails or the result is invalid.
    """
    selection = item() if callable(item) else item
    selection.check()
    return selection


def _layer_intervals(
    selection: Selection, layer: Layer, index: int
) -> Iterable[Interval]:
    """Call the layer's interval source and re-home the results on *index*."""
    if layer.source is None:
        return ()
    try:
        found = list(layer.source(selection))
    except UnresolvedBindingError as exc:
        logger.warning(
            "Unable to resolve highlight %d (%s) for selection %s: %s",
            index + 1,
            layer.display_name,
            selection.identifier or selection.region,
            exc,
        )
        return ()
    except Exception as exc:
        msg = f"Interval source for highlight {index + 1} failed: {exc}"
        raise MalformedSelectionError(msg, selection.identifier) from exc
    return [replace(iv, layer=index) for iv in found]


def collect_intervals(
    selection: Selection,
    layers: Sequence[Layer],
    prune: bool = False,
) -> list[Interval]:
    """Gather every interval to render for *selection*, in insertion order.

    Base intervals come first, followed by each layer's contributions in
    layer order. A base interval whose identifier also appears in a layer is
    dropped in favour of the layered copy.

    Args:
        selection: The primary selection.
        layers: Configured highlight layers.
        prune: Drop intervals that belong to no highlight layer.

    Raises:
        MalformedSelectionError: If a layer source fails for a reason other
            than an unresolved binding.
    """
    layered: list[Interval] = []
    for index, layer in enumerate(layers):
        layered.extend(_layer_intervals(selection, layer, index))

    layered_ids = {iv.id for iv in layered if iv.id is not None}
    base: list[Interval] = []
    for iv in selection.intervals:
        if iv.layer is not None and not 0 <= iv.layer < len(layers):
            logger.warning(
                "Interval %s refers to unknown highlight %d, treating as unlayered",
                iv.id,
                iv.layer + 1,
            )
            iv = replace(iv, layer=None)
        if iv.layer is None and iv.id is not None and iv.id in layered_ids:
            continue
        if prune and iv.layer is None:
            continue
        base.append(iv)

    return base + layered
