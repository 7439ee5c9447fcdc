import asyncio
import base64
import io

import numpy as np
import pytest
from PIL import Image

from ean13.encoder import encode
from ean13.errors import EncodingFailure, InvalidCodeLength, InvalidOption, InvalidSurface
from ean13.raster import RasterSurface, load_font, render, render_image, to_data_url, to_raster_blob, to_raster_bytes

CODE = "9780201379624"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _is_black(pixel) -> bool:
    return tuple(pixel[:3]) == (0, 0, 0)


def _is_white(pixel) -> bool:
    return tuple(pixel[:3]) == (255, 255, 255)


def test_render_sizes_surface() -> None:
    surface = RasterSurface()
    result = render(surface, CODE)
    assert result is surface
    assert surface.size == (214, 96)


def test_render_bars_match_modules() -> None:
    encoding = encode(CODE).encoding
    pixels = np.asarray(render_image(CODE))
    assert pixels.shape == (96, 214, 3)

    for i, module in enumerate(encoding):
        for x in (12 + 2 * i, 12 + 2 * i + 1):
            mid_row = pixels[35, x]
            assert _is_black(mid_row) if module == "1" else _is_white(mid_row)


def test_render_guard_bars_extend_below_data_bars() -> None:
    encoding = encode(CODE).encoding
    pixels = np.asarray(render_image(CODE))
    # rows 70-71: below the data bars, above the digits
    for row in (70, 71):
        for i, module in enumerate(encoding):
            guard = i < 3 or 45 <= i < 50 or i >= 92
            pixel = pixels[row, 12 + 2 * i]
            assert _is_black(pixel) if (guard and module == "1") else _is_white(pixel)


def test_render_quiet_zone_and_background() -> None:
    pixels = np.asarray(render_image(CODE, {"background": "#FF0000"}))
    assert tuple(pixels[0, 0]) == (255, 0, 0)
    assert tuple(pixels[35, 5]) == (255, 0, 0)
    assert tuple(pixels[35, 210]) == (255, 0, 0)


def test_render_draws_digits() -> None:
    pixels = np.asarray(render_image(CODE))
    dark = (pixels < 128).all(axis=2)
    # left digit group sits below the data bars, clear of the guards
    assert dark[80:96, 20:100].any()
    # first digit stays inside the left quiet zone
    assert dark[72:96, :12].any()
    assert not dark[:, 202:].any()


def test_render_padding_and_isbn() -> None:
    surface = render(RasterSurface(), CODE, {"padding_left": 4, "padding_top": 6, "isbn_mode": True})
    assert surface.size == (218, 96 + 6 + 16)
    pixels = np.asarray(surface.image)
    # start guard module 0 after padding, quiet zone and caption line
    assert _is_black(pixels[6 + 16 + 1, 4 + 12])
    assert _is_white(pixels[6 + 16 + 1, 4 + 12 + 2])


def test_render_transparent_background() -> None:
    image = render_image(CODE, {"background": "#FFFFFF00"})
    assert image.mode == "RGBA"
    assert image.getpixel((0, 0))[3] == 0


@pytest.mark.parametrize("surface", [None, "canvas", Image.new("RGB", (10, 10))])
def test_render_invalid_surface(surface) -> None:
    with pytest.raises(InvalidSurface):
        render(surface, CODE)


def test_render_leaves_surface_untouched_on_bad_code() -> None:
    surface = RasterSurface(5, 5)
    with pytest.raises(InvalidCodeLength):
        render(surface, "12345")
    assert surface.size == (5, 5)


def test_surface_from_image() -> None:
    surface = RasterSurface.from_image(Image.new("L", (3, 3)))
    render(surface, CODE)
    assert surface.image.mode == "L"
    assert surface.size == (214, 96)


def test_fractional_module_width() -> None:
    image = render_image(CODE, {"module_width": 1.5, "quiet_zone": 10})
    assert image.size == (163, 96)


def test_load_font_falls_back() -> None:
    font = load_font('"No Such Font Family"', 14)
    assert font is not None
    assert font.getbbox("0")[2] > 0


def test_to_raster_bytes_png() -> None:
    data = to_raster_bytes(CODE)
    assert data.startswith(PNG_SIGNATURE)
    assert Image.open(io.BytesIO(data)).size == (214, 96)


def test_to_raster_bytes_jpeg() -> None:
    data = to_raster_bytes(CODE, image_format="JPEG")
    assert Image.open(io.BytesIO(data)).format == "JPEG"


@pytest.mark.parametrize(
    "config, image_format",
    [
        ({"background": "#FFFFFF00"}, "JPEG"),  # RGBA cannot be written as JPEG
        (None, "NOT-A-FORMAT"),
    ],
)
def test_to_raster_bytes_failure(config, image_format: str) -> None:
    with pytest.raises(EncodingFailure):
        to_raster_bytes(CODE, config, image_format)


def test_to_raster_blob() -> None:
    data = asyncio.run(to_raster_blob("978020137962"))
    assert data == to_raster_bytes("9780201379624")


def test_to_raster_blob_rejects() -> None:
    with pytest.raises(EncodingFailure):
        asyncio.run(to_raster_blob(CODE, {"background": "#FFFFFF00"}, "JPEG"))
    with pytest.raises(InvalidCodeLength):
        asyncio.run(to_raster_blob("1"))


def test_to_data_url() -> None:
    url = to_data_url(CODE)
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]).startswith(PNG_SIGNATURE)


def test_fractional_size_edges_use_background() -> None:
    image = render_image(CODE, {"module_width": 1.5, "height": 70.5, "background": "#00FF00"})
    width, height = image.size
    assert (width, height) == (167, 97)
    for y in range(height):
        assert image.getpixel((width - 1, y)) == (0, 255, 0)
    for x in range(width):
        assert image.getpixel((x, height - 1)) == (0, 255, 0)


def test_transparent_render_keeps_surface_mode() -> None:
    surface = RasterSurface()
    render(surface, CODE, {"background": "#FFFFFF00"})
    assert surface.image.mode == "RGBA"
    assert surface.mode == "RGB"
    render(surface, CODE)
    assert surface.image.mode == "RGB"

    gray = RasterSurface.from_image(Image.new("L", (1, 1)))
    render(gray, CODE, {"background": "#FFFFFF00"})
    render(gray, CODE)
    assert gray.image.mode == "L"


def test_non_finite_option_rejected_before_drawing() -> None:
    surface = RasterSurface(4, 4)
    with pytest.raises(InvalidOption):
        render(surface, CODE, {"height": float("nan")})
    assert surface.size == (4, 4)
