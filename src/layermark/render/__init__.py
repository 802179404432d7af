"""Layered annotation rendering to HTML and ANSI terminal output.

This package turns primary selections and their labelled intervals into
markup in which every interval is visibly delimited.
"""

from layermark.render.ansi_writer import AnsiWriter
from layermark.render.document import (
    Emitter,
    RenderReport,
    get_emitter,
    render,
    render_to_string,
)
from layermark.render.html_writer import HtmlWriter
from layermark.render.layers import ActiveSet, BoundaryEvent, LayerResolver
from layermark.render.segments import boundaries, segments

__all__ = [
    "ActiveSet",
    "AnsiWriter",
    "BoundaryEvent",
    "Emitter",
    "HtmlWriter",
    "LayerResolver",
    "RenderReport",
    "boundaries",
    "get_emitter",
    "render",
    "render_to_string",
    "segments",
]
