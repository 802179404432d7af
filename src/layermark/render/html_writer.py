"""HTML output for layered annotations.

Each segment of the text is wrapped in one outer ``<span class="a hiK ...">``
carrying the classes of the active layers, followed by one nested
``<span class="lK">`` per visible layer so the DOM depth stays the same no
matter which layers are active. Labels are written as ``<label>`` elements
right after the segment in which their interval closes.

Line breaks are pulled out of the open spans: the spans are closed, the
breaks written at top level, and the buffered opening tags replayed.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from layermark.render.css import build_stylesheet, build_toggle_script
from layermark.render.layers import LayerResolver
from layermark.render.legend import StyleTable
from layermark.render.runs import RunKind, count_line_breaks, split_runs

if TYPE_CHECKING:
    from collections.abc import Sequence

    from layermark.config import RenderOptions
    from layermark.models import Interval, Layer
    from layermark.render.layers import BoundaryEvent, Closing
    from layermark.selection import MalformedSelectionError, Selection

TAB_WIDTH = 4

HTML_HEADER = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8" />
    <meta name="generator" content="layermark" />
    <style type="text/css">{css}</style>
</head>
<body>
"""

HTML_FOOTER = "\n</body></html>"


@dataclass(slots=True)
class _SpanState:
    """Mutable state owned by one selection's traversal.

    Attributes:
        opening_tags: Exact outer + layer opening tags of the current segment,
            replayed after a line break.
        open: Whether those tags are currently open in the output.
        pending_breaks: Line breaks held back until this boundary's labels
            have been written.
    """

    opening_tags: str = ""
    open: bool = False
    pending_breaks: str = ""


def _class_attr(tokens: Sequence[str]) -> str:
    """Join class tokens into an escaped attribute value."""
    return html.escape(" ".join(tokens))


def _whitespace_html(text: str) -> str:
    """Render inline whitespace so browsers do not collapse it.

    A lone space is left alone; longer runs become non-breaking spaces and
    tabs expand to ``TAB_WIDTH`` of them.
    """
    if text == " ":
        return text
    return text.replace(" ", "&nbsp;").replace("\t", "&nbsp;" * TAB_WIDTH)


class HtmlWriter:
    """Write a standalone HTML document for a stream of primary selections.

    Args:
        layers: Configured highlight layers.
        options: Render knobs.
        header: Document header; None generates one with the stylesheet,
            ``""`` suppresses it.
        footer: Document footer; None uses the default closing tags.
    """

    def __init__(
        self,
        layers: Sequence[Layer],
        options: RenderOptions,
        header: str | None = None,
        footer: str | None = None,
    ) -> None:
        self.styles = StyleTable(layers)
        self.options = options
        self.header = header
        self.footer = HTML_FOOTER if footer is None else footer
        self._closers = self.styles.layer_closers + "</span>"

    # -----------------------------------------------------------------------
    # Document level
    # -----------------------------------------------------------------------

    def begin_document(self, out: TextIO) -> None:
        if self.header is None:
            numbers = [i + 1 for i in self.styles.visible]
            out.write(HTML_HEADER.format(css=build_stylesheet(numbers)))
        else:
            out.write(self.header)
        if self.options.interactive:
            out.write(
                build_toggle_script(len(self.styles.layers), self.options.autocollapse)
            )
            out.write("\n")
        if self.options.legend:
            self._write_legend(out)

    def end_document(self, out: TextIO) -> None:
        out.write(self.footer)

    def _write_legend(self, out: TextIO) -> None:
        entries = self.styles.legend_entries()
        if not entries:
            return
        title = (
            ' title="Click to toggle visibility of tags (if any)"'
            if self.options.interactive
            else ""
        )
        out.write(
            '<div id="legend" title="Click the items in this legend to toggle '
            'visibility of tags (if any)"><ul>'
        )
        for entry in entries:
            name = html.escape(entry.name)
            out.write(
                f'<li id="legend{entry.number}"{title}>'
                f'<span class="{entry.css_class}"></span> {name}</li>'
            )
        out.write("</ul></div>\n")

    # -----------------------------------------------------------------------
    # Selection level
    # -----------------------------------------------------------------------

    def render_selection(
        self,
        number: int,
        selection: Selection,
        intervals: Sequence[Interval],
        out: TextIO,
    ) -> None:
        """Write one primary selection with its title and wrapper ``<div>``."""
        if self.options.titles and selection.identifier:
            title = html.escape(selection.identifier)
            out.write(f"<h2>{number}. <span>{title}</span></h2>\n")
        region = selection.region
        resource = html.escape(region.resource)
        if selection.whole_resource:
            out.write(f'<div class="resource" data-resource="{resource}">\n')
        else:
            out.write(
                f'<div class="textselection" data-resource="{resource}" '
                f'data-begin="{region.begin}" data-end="{region.end}">\n'
            )
        self.write_body(selection, intervals, out)
        out.write("\n</div>\n")

    def render_error(
        self, number: int, error: MalformedSelectionError, out: TextIO
    ) -> None:
        out.write(f'<span class="error">{number}. {html.escape(str(error))}</span>\n')

    def write_body(
        self,
        selection: Selection,
        intervals: Sequence[Interval],
        out: TextIO,
    ) -> None:
        """Write the marked-up text of *selection*, without any wrapper."""
        region = selection.region
        base = region.begin
        resolver = LayerResolver(region, intervals, self.styles.layers)
        state = _SpanState()
        begin = base

        for event in resolver.resolve():
            if event.offset > begin:
                text = selection.text[begin - base : event.offset - base]
                self._write_text(text, state, out)
                begin = event.offset

            if state.open:
                out.write(self._closers)
                state.open = False

            classes = self.styles.classes(event.layers_before)
            for closing in event.closing:
                if closing.label:
                    self._write_label(closing, classes, out)

            if state.pending_breaks:
                out.write(state.pending_breaks)
                state.pending_breaks = ""

            for marker in event.markers:
                if self.styles.is_hidden(marker.interval):
                    continue
                self._write_marker(marker, out)

            if event.active_after and not event.final:
                self._open(event, resolver.arena, state, out)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _write_text(self, text: str, state: _SpanState, out: TextIO) -> None:
        for run in split_runs(text):
            match run.kind:
                case RunKind.TEXT:
                    out.write(html.escape(run.text, quote=False))
                case RunKind.WHITESPACE:
                    out.write(_whitespace_html(run.text))
                case RunKind.NEWLINES:
                    breaks = "<br/>\n" * count_line_breaks(run.text)
                    if not state.open:
                        out.write(breaks)
                        continue
                    out.write(self._closers)
                    state.open = False
                    if run.is_last:
                        # labels closing at this boundary go before the break
                        state.pending_breaks = breaks
                    else:
                        out.write(breaks)
                        out.write(state.opening_tags)
                        state.open = True

    def _open(
        self,
        event: BoundaryEvent,
        arena: Sequence[Interval],
        state: _SpanState,
        out: TextIO,
    ) -> None:
        """Open the outer and layer spans for the segment starting at *event*."""
        classes = ["a", *self.styles.classes(event.layers_after)]
        tag = f'<span class="{_class_attr(classes)}"'
        if self.options.annotation_ids:
            ids = " ".join(
                html.escape(arena[i].id or "")
                for i in event.active_after
                if arena[i].id is not None
            )
            tag += f' data-annotations="{ids}"'
        out.write(tag)
        # not buffered: a replayed tag would carry a stale offset
        if self.options.offset_attr:
            out.write(f' data-offset="{event.offset}"')
        rest = ">" + self.styles.layer_openers
        out.write(rest)
        state.opening_tags = tag + rest
        state.open = True

    def _write_label(self, closing: Closing, classes: list[str], out: TextIO) -> None:
        interval = closing.interval
        tokens = [f"tag{(interval.layer or 0) + 1}"]
        if interval.zero_width:
            tokens.append("zw")
        tokens.extend(classes)
        out.write(
            f'<label class="{_class_attr(tokens)}">{self.styles.layer_openers}'
            f"<em>{html.escape(closing.label or '', quote=False)}</em>"
            f"{self.styles.layer_closers}</label>"
        )

    def _write_marker(self, marker: Closing, out: TextIO) -> None:
        """Write a zero-width interval: an empty span unit, then its label."""
        interval = marker.interval
        own = [] if interval.layer is None else [interval.layer]
        classes = self.styles.classes(own)
        tag = f'<span class="{_class_attr(["a", "zw", *classes])}"'
        if self.options.annotation_ids and interval.id is not None:
            tag += f' data-annotations="{html.escape(interval.id)}"'
        if self.options.offset_attr:
            tag += f' data-offset="{interval.begin}"'
        out.write(tag + ">" + self.styles.layer_openers + self._closers)
        if marker.label:
            self._write_label(marker, classes, out)
