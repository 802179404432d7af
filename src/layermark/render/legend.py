"""Per-layer style table and legend entries.

Layer ``K`` (1-based) is styled through the CSS classes ``hiK`` (highlight
active), ``lK`` (layer wrapper) and ``tagK`` (label), and through ANSI colour
``K`` modulo the six standard foreground colours. Hidden layers get none of
these.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from layermark.models import Interval, Layer

ANSI_PALETTE_SIZE = 6


@dataclass(frozen=True, slots=True)
class LegendEntry:
    """One line of the legend.

    Attributes:
        number: 1-based layer number.
        css_class: Swatch class (``hiK``).
        name: Display name of the layer.
    """

    number: int
    css_class: str
    name: str


class StyleTable:
    """Static styling configuration for one render invocation."""

    __slots__ = ("_closers", "_openers", "layers", "visible")

    def __init__(self, layers: Sequence[Layer]) -> None:
        self.layers = tuple(layers)
        self.visible: tuple[int, ...] = tuple(
            i for i, layer in enumerate(self.layers) if not layer.hide
        )
        self._openers = "".join(f'<span class="l{i + 1}">' for i in self.visible)
        self._closers = "</span>" * len(self.visible)

    def is_visible(self, interval: Interval) -> bool:
        """Whether *interval* belongs to a layer that draws anything."""
        layer = interval.layer
        return layer is not None and not self.layers[layer].hide

    def is_hidden(self, interval: Interval) -> bool:
        """Whether *interval* belongs to a hidden layer."""
        layer = interval.layer
        return layer is not None and self.layers[layer].hide

    def classes(self, active_layers: Iterable[int]) -> list[str]:
        """Highlight and style classes for a set of active layer indices."""
        result: list[str] = []
        for j in sorted(active_layers):
            layer = self.layers[j]
            if layer.hide:
                continue
            result.append(f"hi{j + 1}")
            if layer.style:
                result.append(layer.style)
        return result

    @property
    def layer_openers(self) -> str:
        """One ``<span class="lK">`` per visible layer, in layer order."""
        return self._openers

    @property
    def layer_closers(self) -> str:
        return self._closers

    @staticmethod
    def ansi_colour(layer: int) -> int:
        """Standard ANSI colour number (1-6) for a 0-based layer index."""
        return layer % ANSI_PALETTE_SIZE + 1

    def legend_entries(self) -> list[LegendEntry]:
        """Legend lines for the visible layers, in layer order."""
        return [
            LegendEntry(i + 1, f"hi{i + 1}", self.layers[i].display_name)
            for i in self.visible
        ]
