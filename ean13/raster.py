"""Raster sink: paints a Layout onto a Pillow image and exports image bytes."""

import asyncio
import base64
import functools
import io
import math

from PIL import Image, ImageColor, ImageDraw, ImageFont

from ean13.config import font_families, resolve_config
from ean13.encoder import encode
from ean13.errors import EncodingFailure, InvalidSurface
from ean13.layout import FillRect, Layout, TextRun, layout_encoding
from ean13.logging import audit, get_logger, trace

log = get_logger("raster")

GENERIC_FONT_FILES = {
    "monospace": ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "cour.ttf"),
    "sans-serif": ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "arial.ttf"),
    "serif": ("DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "times.ttf"),
}

# Pillow anchors: horizontal l/m/r, vertical "a" = ascender (top of the text box)
TEXT_ANCHORS = {"left": "la", "center": "ma", "right": "ra"}


class RasterSurface:
    """Resizable raster drawing target, the counterpart of an HTML canvas.

    Setting the size replaces the backing image, just as assigning
    ``canvas.width`` clears a canvas.
    """

    def __init__(self, width: int = 0, height: int = 0, mode: str = "RGB"):
        self.mode = mode
        self.image = Image.new(mode, (width, height))

    @classmethod
    def from_image(cls, image: Image.Image) -> "RasterSurface":
        surface = cls.__new__(cls)
        surface.mode = image.mode
        surface.image = image
        return surface

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def set_size(self, width: int, height: int, color=0, mode: str | None = None):
        """Replace the image with a blank one; ``mode`` overrides the surface mode for this image only."""
        self.image = Image.new(mode or self.mode, (width, height), color)

    def get_draw(self) -> ImageDraw.ImageDraw:
        return ImageDraw.Draw(self.image)


def _check_surface(surface):
    if surface is None:
        raise InvalidSurface("Drawing surface not found")
    if not (callable(getattr(surface, "set_size", None)) and callable(getattr(surface, "get_draw", None))):
        raise InvalidSurface(f"Not a raster drawing surface: {type(surface).__name__}")


@functools.lru_cache(maxsize=64)
def load_font(font: str, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """Resolve a CSS-style font list to a Pillow font, first match wins.

    Falls back to Pillow's bundled default font at ``size``.
    """
    for family in font_families(font):
        candidates = GENERIC_FONT_FILES.get(family.lower(), (family, f"{family}.ttf", f"{family.replace(' ', '')}.ttf"))
        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
    log.debug("font.fallback font=%s size=%s", font, size)
    return ImageFont.load_default(size=size)


def _paint(draw: ImageDraw.ImageDraw, layout: Layout):
    for cmd in layout.commands:
        if isinstance(cmd, FillRect):
            if cmd.width <= 0 or cmd.height <= 0:
                continue
            # Pillow rectangles include their end coordinates
            draw.rectangle(
                [cmd.x, cmd.y,
                 max(cmd.x, cmd.x + cmd.width - 1), max(cmd.y, cmd.y + cmd.height - 1)],
                fill=cmd.color,
            )
        elif isinstance(cmd, TextRun):
            size = round(cmd.font_size)
            if size <= 0:
                continue
            draw.text(
                (cmd.x, cmd.y),
                cmd.text,
                fill=cmd.color,
                font=load_font(cmd.font, size),
                anchor=TEXT_ANCHORS[cmd.align],
            )


@trace
def render(surface: RasterSurface, code, config=None) -> RasterSurface:
    """Draw the symbol for ``code`` onto ``surface``, resizing it to fit.

    The surface is only touched once encoding and layout have succeeded.

    Raises:
        InvalidSurface: when ``surface`` is missing or not a RasterSurface.
        InvalidCodeLength: when the code is not 12 or 13 digits.
    """
    _check_surface(surface)
    cfg = resolve_config(config)
    layout = layout_encoding(encode(code), cfg)

    # The canvas starts in the background colour so fractional edges are covered
    mode = "RGBA" if len(ImageColor.getrgb(cfg.background)) == 4 else None
    surface.set_size(math.ceil(layout.width), math.ceil(layout.height), color=cfg.background, mode=mode)
    _paint(surface.get_draw(), layout)

    audit("barcode.rendered", logger=log, sink="raster", code=layout.full_code,
          size=f"{surface.width}x{surface.height}")
    return surface


def render_image(code, config=None) -> Image.Image:
    """Render ``code`` onto a fresh surface and return the Pillow image."""
    return render(RasterSurface(), code, config).image


@trace
def to_raster_bytes(code, config=None, image_format: str = "PNG") -> bytes:
    """Render ``code`` and encode it as ``image_format`` (PNG by default).

    Raises:
        EncodingFailure: when Pillow cannot write the image.
    """
    image = render_image(code, config)
    buf = io.BytesIO()
    try:
        image.save(buf, format=image_format)
    except (KeyError, ValueError, OSError) as e:
        raise EncodingFailure(f"Failed to encode barcode as {image_format}: {e}") from e

    data = buf.getvalue()
    if not data:
        raise EncodingFailure(f"Failed to encode barcode as {image_format}: empty output")
    audit("barcode.exported", logger=log, format=image_format.upper(), bytes=len(data))
    return data


async def to_raster_blob(code, config=None, image_format: str = "PNG") -> bytes:
    """Awaitable ``to_raster_bytes``; the encode runs in the loop's default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, functools.partial(to_raster_bytes, code, config, image_format),
    )


def to_data_url(code, config=None, image_format: str = "PNG") -> str:
    """Render ``code`` as a ``data:`` URL, e.g. for an HTML ``<img src>``."""
    data = to_raster_bytes(code, config, image_format)
    mime = Image.MIME.get(image_format.upper(), f"image/{image_format.lower()}")
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
