"""Tests for the HTML emitter.

Covers the worked "The cat sat" fragment, span balance, newline isolation,
text round-trip, zero-width markers, hidden layers and the document skeleton.
HTML is inspected with selectolax where structure matters and compared
literally where the exact bytes matter.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from selectolax.lexbor import LexborHTMLParser

from layermark.config import RenderOptions
from layermark.models import (
    Interval,
    KeyTag,
    KeyValueTag,
    Layer,
    NoTag,
    TextRegion,
)
from layermark.render.document import render_to_string
from layermark.render.html_writer import HtmlWriter
from layermark.selection import Selection

if TYPE_CHECKING:
    from collections.abc import Sequence

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _body(
    text: str,
    intervals: Sequence[Interval],
    layers: Sequence[Layer],
    options: RenderOptions,
    begin: int = 0,
) -> str:
    """Render just the marked-up body of one selection."""
    selection = Selection(TextRegion("doc", begin, begin + len(text)), text)
    out = io.StringIO()
    HtmlWriter(layers, options).write_body(selection, intervals, out)
    return out.getvalue()


def _outer_spans(html: str) -> list[tuple[str, str]]:
    """(class, text) of every outer annotation span."""
    tree = LexborHTMLParser(html)
    return [
        (node.attributes.get("class") or "", node.text() or "")
        for node in tree.css("span.a")
    ]


def _tagged(count: int) -> list[Layer]:
    return [Layer(name=f"h{i + 1}", tag=KeyTag(f"k{i + 1}")) for i in range(count)]


def _untagged(count: int) -> list[Layer]:
    return [Layer(name=f"h{i + 1}", tag=NoTag()) for i in range(count)]


POS_LAYER = Layer(name="pos", tag=KeyValueTag("pos"))
CAT = Interval("w1", 4, 7, layer=0, data={"pos": "noun"})


# ---------------------------------------------------------------------------
# Worked example
# ---------------------------------------------------------------------------


class TestTheCatSat:
    """One tagged interval over "The cat sat"."""

    def test_exact_fragment(self, bare_options: RenderOptions) -> None:
        """The noun is wrapped and labelled with 'pos: noun'."""
        html = _body("The cat sat", [CAT], [POS_LAYER], bare_options)
        assert html == (
            'The <span class="a hi1"><span class="l1">cat</span></span>'
            '<label class="tag1 hi1"><span class="l1"><em>pos: noun</em>'
            "</span></label> sat"
        )

    def test_offset_attribute(self) -> None:
        """data-offset carries the absolute offset of the segment start."""
        options = RenderOptions(interactive=False, legend=False)
        shifted = Interval("w1", 14, 17, layer=0, data={"pos": "noun"})
        html = _body("The cat sat", [shifted], [POS_LAYER], options, begin=10)
        assert '<span class="a hi1" data-offset="14"><span class="l1">cat' in html

    def test_value_fallback_to_key(self, bare_options: RenderOptions) -> None:
        """Without a value the label falls back to the key."""
        bare = Interval("w1", 4, 7, layer=0)
        html = _body("The cat sat", [bare], [POS_LAYER], bare_options)
        assert "<em>pos</em>" in html


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


class TestSpanStructure:
    """Outer spans follow the segmentation exactly."""

    def test_crossing_overlap_segments(self, bare_options: RenderOptions) -> None:
        """Crossing intervals over "abcde" give three flat outer spans."""
        intervals = [Interval("a", 0, 3, layer=0), Interval("b", 1, 5, layer=1)]
        html = _body("abcde", intervals, _untagged(2), bare_options)
        assert _outer_spans(html) == [
            ("a hi1", "a"),
            ("a hi1 hi2", "bc"),
            ("a hi2", "de"),
        ]

    def test_layer_wrappers_constant_depth(self, bare_options: RenderOptions) -> None:
        """Every outer span holds one wrapper per visible layer."""
        intervals = [Interval("a", 0, 3, layer=0), Interval("b", 1, 5, layer=1)]
        html = _body("abcde", intervals, _untagged(2), bare_options)
        tree = LexborHTMLParser(html)
        for node in tree.css("span.a"):
            assert node.css_first("span.l1") is not None
            assert node.css_first("span.l1 > span.l2") is not None

    def test_balanced_markup(self, bare_options: RenderOptions) -> None:
        """Opening and closing tags are balanced for heavy overlap."""
        intervals = [
            Interval("a", 0, 7, layer=0),
            Interval("b", 2, 9, layer=1),
            Interval("c", 2, 4, layer=2),
            Interval("d", 5, 5, layer=1),
            Interval("e", 8, 12, layer=0),
        ]
        html = _body("one two\nthree", intervals, _tagged(3), bare_options)
        assert html.count("<span") == html.count("</span>")
        assert html.count("<label") == html.count("</label>")

    def test_style_class_added(self, bare_options: RenderOptions) -> None:
        """A layer's style class rides along with its highlight class."""
        layers = [Layer(name="h", style="bold")]
        html = _body("abc", [Interval("x", 0, 3, layer=0)], layers, bare_options)
        assert _outer_spans(html) == [("a hi1 bold", "abc")]

    def test_unlayered_interval_plain_span(self, bare_options: RenderOptions) -> None:
        """Intervals outside any layer still segment the text."""
        html = _body("abcd", [Interval("x", 1, 3)], _tagged(1), bare_options)
        assert _outer_spans(html) == [("a", "bc")]


class TestLabels:
    """Labels appear where their interval closes."""

    def test_label_classes_from_closing_segment(
        self, bare_options: RenderOptions
    ) -> None:
        """A label carries the classes active just before it."""
        intervals = [Interval("a", 0, 3, layer=0), Interval("b", 1, 5, layer=1)]
        html = _body("abcde", intervals, _tagged(2), bare_options)
        tree = LexborHTMLParser(html)
        labels = [
            (node.attributes.get("class"), node.text()) for node in tree.css("label")
        ]
        assert labels == [("tag1 hi1 hi2", "k1"), ("tag2 hi2", "k2")]

    def test_truncated_interval_unlabelled(self, bare_options: RenderOptions) -> None:
        """An interval running past the region end gets no label."""
        region = TextRegion("doc", 0, 4)
        selection = Selection(region, "abcd")
        out = io.StringIO()
        HtmlWriter(_tagged(1), bare_options).write_body(
            selection, [Interval("x", 2, 10, layer=0)], out
        )
        assert "<label" not in out.getvalue()

    def test_label_escaped(self, bare_options: RenderOptions) -> None:
        """Label text is HTML-escaped."""
        layers = [Layer(name="h", tag=KeyTag("a<b"))]
        html = _body("abc", [Interval("x", 0, 3, layer=0)], layers, bare_options)
        assert "<em>a&lt;b</em>" in html


# ---------------------------------------------------------------------------
# Text content
# ---------------------------------------------------------------------------


class TestTextContent:
    """Text is escaped, whitespace kept, line breaks isolated."""

    def test_escaping(self, bare_options: RenderOptions) -> None:
        """Markup characters in the text are escaped."""
        assert _body("<b>&", [], [], bare_options) == "&lt;b&gt;&amp;"

    def test_whitespace_runs(self, bare_options: RenderOptions) -> None:
        """Runs of spaces and tabs become non-breaking spaces."""
        html = _body("a  b\tc d", [], [], bare_options)
        assert html == "a&nbsp;&nbsp;b" + "&nbsp;" * 4 + "c d"

    def test_crlf_is_one_break(self, bare_options: RenderOptions) -> None:
        """CRLF renders as a single line break."""
        assert _body("a\r\nb", [], [], bare_options) == "a<br/>\nb"

    def test_newline_reopens_spans(self, bare_options: RenderOptions) -> None:
        """A line break closes the open spans and replays them after."""
        html = _body("ab\ncd", [Interval("x", 0, 5, layer=0)], _tagged(1), bare_options)
        assert html == (
            '<span class="a hi1"><span class="l1">ab</span></span><br/>\n'
            '<span class="a hi1"><span class="l1">cd</span></span>'
            '<label class="tag1 hi1"><span class="l1"><em>k1</em></span></label>'
        )

    def test_trailing_newline_after_label(self, bare_options: RenderOptions) -> None:
        """A break at the end of an interval comes after its label."""
        html = _body("ab\n", [Interval("x", 0, 3, layer=0)], _tagged(1), bare_options)
        assert html.endswith("</label><br/>\n")

    def test_newline_isolation(self, bare_options: RenderOptions) -> None:
        """No annotation span or label ever contains a newline."""
        text = "first line\nsecond\r\nthird\n\nlast\n"
        intervals = [
            Interval("a", 0, 20, layer=0),
            Interval("b", 6, 30, layer=1),
            Interval("c", 11, 11, layer=1),
            Interval("d", 25, len(text), layer=0),
        ]
        html = _body(text, intervals, _tagged(2), bare_options)
        tree = LexborHTMLParser(html)
        for node in tree.css("span, label"):
            assert "\n" not in (node.text() or "")
            assert "\r" not in (node.text() or "")

    def test_text_round_trip(self, bare_options: RenderOptions) -> None:
        """Dropping labels from the output leaves exactly the input text."""
        text = "The <cat> sat\non the mat & slept.\nEnd"
        intervals = [
            Interval("a", 0, 9, layer=0),
            Interval("b", 4, 20, layer=1),
            Interval("c", 14, 14, layer=0),
            Interval("d", 30, len(text), layer=1),
        ]
        html = _body(text, intervals, _tagged(2), bare_options)
        tree = LexborHTMLParser(html)
        for label in tree.css("label"):
            label.decompose()
        assert tree.body is not None
        assert tree.body.text() == text


# ---------------------------------------------------------------------------
# Zero-width, hidden, pruned, identifiers
# ---------------------------------------------------------------------------


class TestSpecialIntervals:
    """Point annotations, hidden layers and annotation identifiers."""

    def test_zero_width_marker(self, bare_options: RenderOptions) -> None:
        """A point interval draws an empty marker unit and its label."""
        html = _body("abcd", [Interval("p", 2, 2, layer=0)], _tagged(1), bare_options)
        assert html == (
            'ab<span class="a zw hi1"><span class="l1"></span></span>'
            '<label class="tag1 zw hi1"><span class="l1"><em>k1</em></span></label>'
            "cd"
        )

    def test_zero_width_at_end(self, bare_options: RenderOptions) -> None:
        """A point interval at the end of the text is still drawn."""
        html = _body("abcd", [Interval("p", 4, 4, layer=0)], _tagged(1), bare_options)
        assert html.startswith("abcd<span class=\"a zw hi1\">")

    def test_hidden_layer_draws_nothing(self, bare_options: RenderOptions) -> None:
        """A hidden layer contributes no classes, wrappers or labels."""
        layers = [
            Layer(name="shown", tag=KeyTag("s")),
            Layer(name="hidden", tag=KeyTag("h"), hide=True),
        ]
        html = _body("abcd", [Interval("x", 0, 4, layer=1)], layers, bare_options)
        assert "hi2" not in html
        assert "l2" not in html
        assert "<label" not in html

    def test_hidden_zero_width_draws_nothing(
        self, bare_options: RenderOptions
    ) -> None:
        """A point interval on a hidden layer leaves no marker behind."""
        layers = [
            Layer(name="shown", tag=KeyTag("s")),
            Layer(name="hidden", tag=KeyTag("h"), hide=True),
        ]
        html = _body("abcd", [Interval("p", 2, 2, layer=1)], layers, bare_options)
        assert html == "abcd"

    def test_unlayered_zero_width_still_drawn(
        self, bare_options: RenderOptions
    ) -> None:
        """A point interval outside any layer keeps its plain marker."""
        html = _body("abcd", [Interval("p", 2, 2)], _tagged(1), bare_options)
        assert html == (
            'ab<span class="a zw"><span class="l1"></span></span>cd'
        )

    def test_style_class_escaped(self, bare_options: RenderOptions) -> None:
        """A style class cannot break out of the class attribute."""
        layers = [Layer(name="h", style='x" onclick="y')]
        html = _body("abc", [Interval("x", 0, 3, layer=0)], layers, bare_options)
        assert 'onclick="' not in html
        tree = LexborHTMLParser(html)
        span = tree.css_first("span.a")
        assert span is not None
        assert span.attributes.get("onclick") is None
        assert span.attributes["class"] == 'a hi1 x" onclick="y'

    def test_annotation_ids_replayed(self) -> None:
        """data-annotations survives a line break in the segment."""
        options = RenderOptions(
            legend=False, offset_attr=False, interactive=False, annotation_ids=True
        )
        html = _body("ab\ncd", [Interval("x", 0, 5, layer=0)], _tagged(1), options)
        assert html.count('data-annotations="x"') == 2

    def test_offset_not_replayed(self) -> None:
        """data-offset only appears where the segment actually starts."""
        options = RenderOptions(legend=False, interactive=False)
        html = _body("ab\ncd", [Interval("x", 0, 5, layer=0)], _tagged(1), options)
        assert html.count("data-offset") == 1


# ---------------------------------------------------------------------------
# Document skeleton
# ---------------------------------------------------------------------------


class TestDocument:
    """The full HTML document around the selections."""

    def test_full_document(self) -> None:
        """Header, legend, title, wrapper and footer are all present."""
        layers = [Layer(name="my_layer", tag=KeyTag("k"))]
        selection = Selection.whole("doc1", "hello", [Interval("x", 0, 5, layer=0)])
        html = render_to_string([selection], layers, RenderOptions())

        assert html.startswith("<!DOCTYPE html>")
        assert html.endswith("</body></html>")
        assert "layercount = 1;" in html
        tree = LexborHTMLParser(html)
        legend = tree.css_first("div#legend li#legend1")
        assert legend is not None
        assert legend.text().strip() == "my layer"
        title = tree.css_first("h2")
        assert title is not None
        assert title.text() == "1. doc1"
        wrapper = tree.css_first("div.resource")
        assert wrapper is not None
        assert wrapper.attributes["data-resource"] == "doc1"

    def test_stylesheet_per_visible_layer(self) -> None:
        """The stylesheet has rules for visible layers only."""
        layers = [Layer(name="a"), Layer(name="b", hide=True)]
        html = render_to_string([], layers, RenderOptions())
        assert ".hi1 span.l1" in html
        assert ".hi2" not in html

    def test_suppressed_header_and_footer(self) -> None:
        """Empty header and footer leave only the selection wrapper."""
        options = RenderOptions(legend=False, interactive=False)
        selection = Selection(TextRegion("doc", 0, 5), "hello")
        html = render_to_string([selection], [], options, header="", footer="")
        assert html == (
            '<div class="textselection" data-resource="doc" '
            'data-begin="0" data-end="5">\nhello\n</div>\n'
        )

    def test_no_script_when_not_interactive(self) -> None:
        """interactive=False leaves out the legend toggle script."""
        options = RenderOptions(interactive=False)
        html = render_to_string([], [Layer(name="a")], options)
        assert "<script" not in html

    def test_autocollapse_flag(self) -> None:
        """The toggle script carries the autocollapse setting."""
        layers = [Layer(name="a")]
        collapsed = render_to_string([], layers, RenderOptions())
        expanded = render_to_string([], layers, RenderOptions(autocollapse=False))
        assert "autocollapse = true;" in collapsed
        assert "autocollapse = false;" in expanded

    def test_idempotent(self) -> None:
        """Rendering the same input twice gives identical bytes."""
        intervals = [
            Interval("a", 0, 3, layer=0),
            Interval("b", 1, 5, layer=1),
            Interval("c", 2, 2, layer=1),
        ]
        selection = Selection.whole("doc", "abcde", intervals)
        layers = _tagged(2)
        first = render_to_string([selection], layers, RenderOptions())
        second = render_to_string([selection], layers, RenderOptions())
        assert first == second
