"""Layout engine: turns an encoded symbol into sized draw commands.

All geometry lives here. The raster and vector sinks only replay the
command list, so both produce identical coordinates for the same input.
"""

from dataclasses import dataclass, field

from ean13.config import RenderConfig, resolve_config
from ean13.encoder import (
    CENTER_GUARD,
    DIGIT_WIDTH,
    END_GUARD,
    MODULE_COUNT,
    START_GUARD,
    EncodingResult,
    encode,
    normalize,
)
from ean13.errors import InvalidCodeLength
from ean13.logging import trace

ISBN_CAPTION_GAP = 4  # px between the ISBN caption line and the bars
ISBN_GROUPS = (3, 1, 2, 6, 1)

# Module offsets from the quiet-zone edge
LEFT_GROUP_START = len(START_GUARD)
CENTER_GUARD_START = LEFT_GROUP_START + 6 * DIGIT_WIDTH                   # 45
RIGHT_GROUP_START = CENTER_GUARD_START + len(CENTER_GUARD)                # 50
END_GUARD_START = MODULE_COUNT - len(END_GUARD)                           # 92


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass(frozen=True)
class TextRun:
    """A line of text. ``y`` is the top of the text box, ``x`` the anchor for ``align``."""
    x: float
    y: float
    text: str
    align: str  # "left" | "center" | "right"
    font_size: float
    font: str
    color: str


@dataclass(frozen=True)
class Dimensions:
    barcode_width: float
    guard_height: float
    content_width: float
    content_height: float
    isbn_prefix_height: float
    total_width: float
    total_height: float


@dataclass
class Layout:
    dimensions: Dimensions
    full_code: str
    encoding: str
    commands: list = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.dimensions.total_width

    @property
    def height(self) -> float:
        return self.dimensions.total_height

    @property
    def background(self) -> FillRect:
        return self.commands[0]

    @property
    def bars(self) -> list[FillRect]:
        return [c for c in self.commands[1:] if isinstance(c, FillRect)]

    @property
    def texts(self) -> list[TextRun]:
        return [c for c in self.commands if isinstance(c, TextRun)]


def format_isbn(code13) -> str:
    """Hyphenate a 13-digit code as 978-X-XX-XXXXXX-X.

    Fixed 3-1-2-6-1 grouping; registration-group boundaries are not looked up.
    """
    digits = normalize(code13)
    if len(digits) != 13:
        raise InvalidCodeLength(digits, expected="13")
    groups, pos = [], 0
    for size in ISBN_GROUPS:
        groups.append(digits[pos:pos + size])
        pos += size
    return "-".join(groups)


def is_guard_module(index: int) -> bool:
    """True for modules of the start, center and end guards."""
    return (index < LEFT_GROUP_START
            or CENTER_GUARD_START <= index < RIGHT_GROUP_START
            or index >= END_GUARD_START)


def compute_dimensions(config: RenderConfig) -> Dimensions:
    barcode_width = MODULE_COUNT * config.module_width
    guard_height = config.height + config.guard_extend
    content_width = barcode_width + 2 * config.quiet_zone
    isbn_prefix_height = config.isbn_font_size + ISBN_CAPTION_GAP if config.isbn_mode else 0
    content_height = guard_height + config.font_size + config.text_margin + isbn_prefix_height
    return Dimensions(
        barcode_width=barcode_width,
        guard_height=guard_height,
        content_width=content_width,
        content_height=content_height,
        isbn_prefix_height=isbn_prefix_height,
        total_width=content_width + config.padding_left + config.padding_right,
        total_height=content_height + config.padding_top + config.padding_bottom,
    )


def layout_encoding(result: EncodingResult, config: RenderConfig) -> Layout:
    """Lay out an already encoded symbol."""
    dims = compute_dimensions(config)
    mw = config.module_width
    layout = Layout(dimensions=dims, full_code=result.full_code, encoding=result.encoding)
    cmds = layout.commands

    cmds.append(FillRect(0, 0, dims.total_width, dims.total_height, config.background))

    offset_x = config.padding_left
    offset_y = config.padding_top + dims.isbn_prefix_height
    symbol_x = offset_x + config.quiet_zone

    for i, module in enumerate(result.encoding):
        if module == "1":
            bar_height = dims.guard_height if is_guard_module(i) else config.height
            cmds.append(FillRect(symbol_x + i * mw, offset_y, mw, bar_height, config.foreground))

    def text(x, y, value, align, size=config.font_size):
        cmds.append(TextRun(x, y, value, align, size, config.font, config.foreground))

    if config.isbn_mode:
        text(offset_x, config.padding_top, "ISBN " + format_isbn(result.full_code),
             "left", config.isbn_font_size)

    text_y = offset_y + config.height + config.text_margin
    code = result.full_code

    # First digit sits in the quiet zone, right-aligned against the start guard
    text(symbol_x - config.side_digit_gap, text_y, code[0], "right")

    cell = DIGIT_WIDTH * mw
    for group_start, digits in ((LEFT_GROUP_START, code[1:7]), (RIGHT_GROUP_START, code[7:13])):
        start = symbol_x + group_start * mw
        for i, digit in enumerate(digits):
            text(start + (i + 0.5) * cell, text_y, digit, "center")

    return layout


@trace
def compute_layout(code, config=None) -> Layout:
    """Encode ``code`` and lay it out with ``config`` (mapping, RenderConfig or None).

    Raises:
        InvalidCodeLength: when the code is not 12 or 13 digits.
        InvalidOption: when an option is unknown or invalid.
    """
    cfg = resolve_config(config)
    return layout_encoding(encode(code), cfg)
