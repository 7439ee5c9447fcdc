"""Vector sink: replays a Layout as SVG nodes with lxml."""

from lxml import etree

from ean13.config import resolve_config
from ean13.encoder import encode
from ean13.errors import InvalidSurface
from ean13.layout import FillRect, TextRun, layout_encoding
from ean13.logging import audit, get_logger, trace

log = get_logger("vector")

SVG_NS = "http://www.w3.org/2000/svg"
SVG = "{%s}" % SVG_NS

TEXT_ANCHORS = {"left": "start", "center": "middle", "right": "end"}


def _num(value) -> str:
    """Format a coordinate without a trailing '.0'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def new_svg_surface() -> etree._Element:
    """Empty ``<svg>`` root ready for ``render_vector``."""
    return etree.Element(SVG + "svg", nsmap={None: SVG_NS})


@trace
def render_vector(surface, code, config=None):
    """Append the symbol for ``code`` to the lxml element ``surface``.

    On an ``<svg>`` root the width, height and viewBox are set to the
    symbol's size. Returns ``surface``.

    Raises:
        InvalidSurface: when ``surface`` is not an lxml element.
        InvalidCodeLength: when the code is not 12 or 13 digits.
    """
    if surface is None:
        raise InvalidSurface("Vector container not found")
    if not etree.iselement(surface):
        raise InvalidSurface(f"Not an lxml element: {type(surface).__name__}")

    cfg = resolve_config(config)
    layout = layout_encoding(encode(code), cfg)

    if etree.QName(surface).localname == "svg":
        width, height = _num(layout.width), _num(layout.height)
        surface.set("width", width)
        surface.set("height", height)
        surface.set("viewBox", f"0 0 {width} {height}")

    # Children go into the container's namespace so plain elements stay plain
    ns = etree.QName(surface).namespace
    tag = (lambda name: f"{{{ns}}}{name}") if ns else (lambda name: name)

    for cmd in layout.commands:
        if isinstance(cmd, FillRect):
            etree.SubElement(surface, tag("rect"), {
                "x": _num(cmd.x),
                "y": _num(cmd.y),
                "width": _num(cmd.width),
                "height": _num(cmd.height),
                "fill": cmd.color,
            })
        elif isinstance(cmd, TextRun):
            node = etree.SubElement(surface, tag("text"), {
                "x": _num(cmd.x),
                "y": _num(cmd.y),
                "text-anchor": TEXT_ANCHORS[cmd.align],
                "dominant-baseline": "hanging",
                "font-family": cmd.font,
                "font-size": _num(cmd.font_size),
                "fill": cmd.color,
            })
            node.text = cmd.text

    audit("barcode.rendered", logger=log, sink="vector", code=layout.full_code,
          size=f"{_num(layout.width)}x{_num(layout.height)}")
    return surface


def to_vector_markup(code, config=None, pretty: bool = True) -> str:
    """Render ``code`` into a standalone SVG document string."""
    root = render_vector(new_svg_surface(), code, config)
    return etree.tostring(root, encoding="unicode", pretty_print=pretty)
