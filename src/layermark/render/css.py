"""Stylesheet and script for standalone HTML output.

Contains the static page CSS, per-layer rule generation from a fixed
palette, and the legend toggle script.
"""

from __future__ import annotations

# (light, dark) colour per layer; cycles past the end.
LAYER_PALETTE: tuple[tuple[str, str], ...] = (
    ("#b4e0aa", "#1d610d"),  # green
    ("#aaace0", "#181c6b"),  # blueish/purple
    ("#e19898", "#661818"),  # red
    ("#e1e098", "#585712"),  # yellow
    ("#98e1dd", "#126460"),  # cyan
    ("#dcc6da", "#5e1457"),  # pink
    ("#e1c398", "#5d3f14"),  # orange
    ("#6faa61", "#1a570b"),  # dark green
)

_PAGE_CSS = """
div.resource, div.textselection {
    color: black;
    background: white;
    font-family: monospace;
    border: 1px solid black;
    padding: 10px;
    margin: 10px;
    margin-right: 10%;
    line-height: 1.5em;
}
body {
    background: #b7c8c7;
}
body>h2 {
    color: black;
    font-size: 1.1em;
    font-family: sans-serif;
}
.a { /* annotation */
    vertical-align: bottom;
}
.error {
    color: #ff0000;
    font-weight: bold;
}
label {
    display: inline-block;
    margin-top: 10px;
    border-radius: 0px 20px 0px 0px;
}
label em {
    display: inline-block;
    font-size: 70%;
    padding-left: 5px;
    padding-right: 5px;
    vertical-align: bottom;
}
/* zero-width annotations: a marker, not an underline */
span.a.zw {
    display: inline-block;
    min-height: 1em;
    border-left: 2px dotted #555;
}
label.zw {
    border-radius: 0px;
}
label.h em {
    display: none;
}
span:hover + label.h em {
    position: absolute;
    display: block;
    padding: 2px;
    background: black;
}
div#legend {
    color: black;
    width: 40%;
    min-width: 320px;
    margin-left: auto;
    margin-right: auto;
    font-family: sans-serif;
    padding: 5px;
    border: 1px dashed #ccc;
    border-radius: 20px;
}
div#legend ul {
    list-style: none;
}
div#legend ul li span {
    display: inline-block;
    width: 15px;
    border-radius: 15px;
    border: 1px #555 solid;
    min-height: 15px;
}
div#legend li {
    cursor: pointer;
}
div#legend li:hover {
    font-weight: bold;
}
div#legend li.hidetags {
    text-decoration: line-through;
}
/* generic style classes */
.italic, .italics { font-style: italic; }
.bold { font-weight: bold; }
.normal { font-weight: normal; font-style: normal; }
.red { color: #ff0000; }
.green { color: #00ff00; }
.blue { color: #0000ff; }
.yellow { color: #ffff00; }
.super, .small { vertical-align: top; font-size: 60%; }
"""

_TOGGLE_SCRIPT = """<script>
document.addEventListener('DOMContentLoaded', function() {
    for (let i = 1; i <= layercount; i++) {
        let e = document.getElementById("legend" + i);
        if (e) {
            e.addEventListener('click', () => {
                if (e.classList.contains("hidetags")) {
                    document.querySelectorAll('label.tag' + i).forEach((tag) => { tag.classList.remove("h") });
                    e.classList.remove("hidetags");
                } else {
                    document.querySelectorAll('label.tag' + i).forEach((tag) => { tag.classList.add("h") });
                    e.classList.add("hidetags");
                }
            });
            if (autocollapse) {
                e.click();
            }
        }
    }
});
</script>"""


def layer_colours(number: int) -> tuple[str, str]:
    """(light, dark) palette entry for a 1-based layer number."""
    return LAYER_PALETTE[(number - 1) % len(LAYER_PALETTE)]


def _build_layer_css(numbers: list[int]) -> str:
    """Generate the underline, label and legend rules for each layer.

    Args:
        numbers: 1-based numbers of the visible layers.

    Returns:
        CSS string with one block of rules per layer.
    """
    css_rules: list[str] = []
    if numbers:
        wrappers = ", ".join(f"span.l{n}" for n in numbers)
        css_rules.append(
            f"{wrappers} {{\n"
            "    display: inline-block;\n"
            "    border-bottom: 3px solid white;\n"
            "}"
        )
    for n in numbers:
        light, dark = layer_colours(n)
        css_rules.append(
            f".hi{n} span.l{n} {{\n"
            f"    border-bottom: 3px solid {light};\n"
            "}\n"
            f"label.tag{n} {{\n"
            f"    color: {dark};\n"
            f"    border-right: 5px solid {light};\n"
            f"    background: {light}77;\n"
            "}\n"
            f"label.h.tag{n} em {{\n"
            f"    color: {light};\n"
            "    font-weight: bold;\n"
            "}\n"
            f"div#legend span.hi{n} {{\n"
            f"    background: {light};\n"
            "}"
        )
    return "\n".join(css_rules)


def build_stylesheet(numbers: list[int]) -> str:
    """Full stylesheet for a document with the given visible layer numbers."""
    return _PAGE_CSS + _build_layer_css(numbers) + "\n"


def build_toggle_script(layer_count: int, autocollapse: bool) -> str:
    """Legend click handlers that show/hide each layer's labels."""
    flags = (
        f"<script>autocollapse = {'true' if autocollapse else 'false'}; "
        f"layercount = {layer_count};</script>"
    )
    return flags + _TOGGLE_SCRIPT
