"""Document driver: render a stream of primary selections.

Picks the emitter for the configured output format, writes the document
preamble once, then renders each primary selection with fresh traversal
state. Malformed selections are reported in place and do not stop the
stream; failures of the output sink propagate.

Usage:
    from layermark.render import render_to_string

    html = render_to_string(selections, layers)
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

from layermark.config import get_settings
from layermark.render.ansi_writer import AnsiWriter
from layermark.render.html_writer import HtmlWriter
from layermark.selection import (
    MalformedSelectionError,
    collect_intervals,
    resolve_selection,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from layermark.config import RenderOptions
    from layermark.models import Interval, Layer, TextRegion
    from layermark.selection import Selection, SelectionItem

__all__ = ["Emitter", "RenderReport", "get_emitter", "render", "render_to_string"]

logger = logging.getLogger(__name__)


@runtime_checkable
class Emitter(Protocol):
    """Protocol for an output format.

    Each emitter must implement:
    - begin_document(): Header, legend and anything written once
    - render_selection(): One primary selection with its title
    - render_error(): In-place marker for a malformed selection
    - end_document(): Footer
    """

    def begin_document(self, out: TextIO) -> None: ...

    def render_selection(
        self,
        number: int,
        selection: Selection,
        intervals: Sequence[Interval],
        out: TextIO,
    ) -> None: ...

    def render_error(
        self, number: int, error: MalformedSelectionError, out: TextIO
    ) -> None: ...

    def end_document(self, out: TextIO) -> None: ...


@dataclass(slots=True)
class RenderReport:
    """Outcome of one render call.

    Attributes:
        rendered: Number of selections written.
        skipped: Consecutive duplicates that were suppressed.
        errors: Malformed selections, keyed by their 1-based stream number.
    """

    rendered: int = 0
    skipped: int = 0
    errors: list[tuple[int, MalformedSelectionError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def get_emitter(
    layers: Sequence[Layer],
    options: RenderOptions,
    header: str | None = None,
    footer: str | None = None,
) -> Emitter:
    """Build the emitter for ``options.format``.

    Header and footer overrides only apply to HTML output.
    """
    match options.format:
        case "html":
            return HtmlWriter(layers, options, header=header, footer=footer)
        case "ansi":
            return AnsiWriter(layers, options)
    msg = f"Unknown output format: {options.format!r}"
    raise ValueError(msg)


def render(
    selections: Iterable[SelectionItem],
    layers: Sequence[Layer],
    out: TextIO,
    options: RenderOptions | None = None,
    *,
    header: str | None = None,
    footer: str | None = None,
) -> RenderReport:
    """Render every primary selection in *selections* to *out*.

    Args:
        selections: Selections, or zero-argument callables producing them.
            A callable that raises MalformedSelectionError is reported in
            place like any other malformed selection.
        layers: Configured highlight layers, in layer order.
        out: Text sink; written to incrementally.
        options: Render knobs; defaults to the ``render`` settings.
        header: HTML header override (``""`` suppresses it).
        footer: HTML footer override (``""`` suppresses it).

    Returns:
        A RenderReport with counts and the malformed selections.
    """
    if options is None:
        options = get_settings().render
    emitter = get_emitter(layers, options, header=header, footer=footer)
    report = RenderReport()
    previous: TextRegion | None = None

    emitter.begin_document(out)
    for number, item in enumerate(selections, start=1):
        try:
            selection = resolve_selection(item)
            if selection.region == previous:
                logger.debug("Skipping duplicate selection %d", number)
                report.skipped += 1
                continue
            previous = selection.region
            intervals = collect_intervals(selection, layers, prune=options.prune)
        except MalformedSelectionError as exc:
            logger.error("Selection %d is malformed: %s", number, exc)
            report.errors.append((number, exc))
            emitter.render_error(number, exc, out)
            continue
        emitter.render_selection(number, selection, intervals, out)
        report.rendered += 1
    emitter.end_document(out)

    logger.debug(
        "Rendered %d selections as %s (%d skipped, %d errors)",
        report.rendered,
        options.format,
        report.skipped,
        len(report.errors),
    )
    return report


def render_to_string(
    selections: Iterable[SelectionItem],
    layers: Sequence[Layer],
    options: RenderOptions | None = None,
    *,
    header: str | None = None,
    footer: str | None = None,
) -> str:
    """Render into a string instead of a caller-supplied sink."""
    buffer = io.StringIO()
    render(selections, layers, buffer, options, header=header, footer=footer)
    return buffer.getvalue()
