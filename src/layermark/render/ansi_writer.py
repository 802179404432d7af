"""ANSI terminal output for layered annotations.

Every interval of a visible layer is bracketed: a bold ``[`` in the layer's
colour where it opens and ``|label`` in the plain colour followed by a bold
``]`` where it closes. There is no nesting to keep balanced, so crossing
intervals simply interleave their brackets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from rich.color import Color, ColorSystem
from rich.style import Style

from layermark.render.layers import LayerResolver
from layermark.render.legend import StyleTable
from layermark.render.runs import split_trailing_newlines

if TYPE_CHECKING:
    from collections.abc import Sequence

    from layermark.config import RenderOptions
    from layermark.models import Interval, Layer
    from layermark.render.layers import Closing
    from layermark.selection import MalformedSelectionError, Selection

RULE = "-" * 35

_HEADER_STYLE = Style(color=Color.from_ansi(7), bold=True)
_ERROR_STYLE = Style(color=Color.from_ansi(1), bold=True)


def _sgr(style: Style, text: str) -> str:
    """Wrap *text* in the style's SGR sequence and a reset."""
    return style.render(text, color_system=ColorSystem.STANDARD)


class AnsiWriter:
    """Write coloured, bracketed text for a stream of primary selections.

    Args:
        layers: Configured highlight layers.
        options: Render knobs; HTML-only knobs are ignored.
    """

    def __init__(self, layers: Sequence[Layer], options: RenderOptions) -> None:
        self.styles = StyleTable(layers)
        self.options = options
        self._plain: list[Style] = []
        self._bold: list[Style] = []
        for j in range(len(self.styles.layers)):
            colour = Color.from_ansi(self.styles.ansi_colour(j))
            self._plain.append(Style(color=colour))
            self._bold.append(Style(color=colour, bold=True))

    def begin_document(self, out: TextIO) -> None:
        entries = self.styles.legend_entries()
        if not (self.options.legend and entries):
            return
        out.write("Legend:\n")
        for entry in entries:
            line = f"       {entry.number}. {entry.name}"
            out.write(_sgr(self._bold[entry.number - 1], line))
            out.write("\n")
        out.write("\n")

    def end_document(self, out: TextIO) -> None:
        """Nothing to close in a terminal stream."""

    def render_selection(
        self,
        number: int,
        selection: Selection,
        intervals: Sequence[Interval],
        out: TextIO,
    ) -> None:
        if self.options.titles and selection.identifier:
            title = f"{RULE} {number}. {selection.identifier} {RULE}"
            out.write(_sgr(_HEADER_STYLE, title))
            out.write("\n")
        self.write_body(selection, intervals, out)
        out.write("\n")

    def render_error(
        self, number: int, error: MalformedSelectionError, out: TextIO
    ) -> None:
        out.write(_sgr(_ERROR_STYLE, f"ERROR: {number}. {error}"))
        out.write("\n")

    def write_body(
        self,
        selection: Selection,
        intervals: Sequence[Interval],
        out: TextIO,
    ) -> None:
        """Write the bracketed text of *selection*."""
        region = selection.region
        base = region.begin
        resolver = LayerResolver(region, intervals, self.styles.layers)
        begin = base

        for event in resolver.resolve():
            held = ""
            if event.offset > begin:
                body, held = split_trailing_newlines(
                    selection.text[begin - base : event.offset - base]
                )
                out.write(body)
                begin = event.offset

            for closing in event.closing:
                self._close(closing, out)

            # a line break never comes before the bracket it terminates
            out.write(held)

            for marker in event.markers:
                if self.styles.is_visible(marker.interval):
                    self._open(marker.interval, out)
                    self._close(marker, out)

            for index in event.opening:
                self._open(resolver.arena[index], out)

    def _open(self, interval: Interval, out: TextIO) -> None:
        if interval.layer is None or not self.styles.is_visible(interval):
            return
        out.write(_sgr(self._bold[interval.layer], "["))

    def _close(self, closing: Closing, out: TextIO) -> None:
        interval = closing.interval
        if interval.layer is None or not self.styles.is_visible(interval):
            return
        if closing.label:
            out.write(_sgr(self._plain[interval.layer], f"|{closing.label}"))
        out.write(_sgr(self._bold[interval.layer], "]"))
