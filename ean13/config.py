"""Render options: defaults, merging and validation."""

import json
import math
import numbers
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from types import MappingProxyType

from PIL import ImageColor

from ean13.errors import InvalidOption
from ean13.logging import get_logger

log = get_logger("config")


@dataclass(frozen=True)
class RenderConfig:
    """Geometry and styling of a rendered symbol. Sizes are in pixels."""
    module_width: float = 2        # width of a single bar module
    height: float = 70             # main bar height
    guard_extend: float = 10       # how far guard bars extend below main bars
    font_size: float = 14
    text_margin: float = 2         # gap between bars and digits
    quiet_zone: float = 12         # blank margin each side, holds the first digit
    side_digit_gap: float = 2      # gap between first digit and start guard
    padding_left: float = 0
    padding_right: float = 0
    padding_top: float = 0
    padding_bottom: float = 0
    background: str = "#FFFFFF"
    foreground: str = "#000000"
    font: str = '"OCR-B", "Courier New", monospace'
    isbn_mode: bool = False        # draw an "ISBN ..." caption above the bars
    isbn_font_size: float = 12


DEFAULTS = MappingProxyType(asdict(RenderConfig()))

SIZE_OPTIONS = tuple(name for name, value in DEFAULTS.items()
                     if isinstance(value, numbers.Number) and not isinstance(value, bool))
COLOR_OPTIONS = ("background", "foreground")

# Option names as spelled by the JavaScript-style API
CAMEL_CASE_ALIASES = {
    "moduleWidth": "module_width",
    "guardExtend": "guard_extend",
    "fontSize": "font_size",
    "textMargin": "text_margin",
    "quietZone": "quiet_zone",
    "sideDigitGap": "side_digit_gap",
    "paddingLeft": "padding_left",
    "paddingRight": "padding_right",
    "paddingTop": "padding_top",
    "paddingBottom": "padding_bottom",
    "isbnMode": "isbn_mode",
    "isbnFontSize": "isbn_font_size",
}


def _check_option(name: str, value):
    if name in SIZE_OPTIONS:
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidOption(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise InvalidOption(f"{name} must be finite, got {value!r}")
        if value < 0:
            raise InvalidOption(f"{name} must be non-negative, got {value!r}")
    elif name in COLOR_OPTIONS:
        try:
            ImageColor.getrgb(value)
        except (ValueError, AttributeError, TypeError) as e:
            raise InvalidOption(f"{name} is not a colour: {value!r}") from e
    elif name == "isbn_mode":
        if not isinstance(value, bool):
            raise InvalidOption(f"isbn_mode must be true or false, got {value!r}")
    elif name == "font":
        if not isinstance(value, str) or not value.strip():
            raise InvalidOption(f"font must be a non-empty string, got {value!r}")


def resolve_config(config=None, **overrides) -> RenderConfig:
    """Merge defaults, ``config`` and keyword overrides into a RenderConfig.

    ``config`` may be None, a RenderConfig, or a mapping of option names.
    Both snake_case and camelCase option names are accepted.

    Raises:
        InvalidOption: for unknown names or unusable values.
    """
    if config is None:
        base, options = RenderConfig(), {}
    elif isinstance(config, RenderConfig):
        base, options = config, {}
    elif hasattr(config, "items"):
        base, options = RenderConfig(), dict(config)
    else:
        raise InvalidOption(f"Render options must be a mapping or RenderConfig, got {type(config).__name__}")

    options.update(overrides)
    merged = {}
    for key, value in options.items():
        name = CAMEL_CASE_ALIASES.get(key, key)
        if name not in DEFAULTS:
            raise InvalidOption(f"Unknown render option: {key!r}")
        _check_option(name, value)
        merged[name] = value

    if not merged:
        return base
    return replace(base, **merged)


def load_config(path: str | Path) -> RenderConfig:
    """Read render options from a JSON object file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidOption(f"Cannot read render options from {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidOption(f"{path} must contain a JSON object of render options")
    log.debug("config.loaded path=%s keys=%s", path, sorted(data))
    return resolve_config(data)


def font_families(font: str) -> list[str]:
    """Split a CSS-style font list ('"OCR-B", monospace') into bare family names."""
    families = []
    for part in font.split(","):
        name = part.strip().strip("\"'").strip()
        if name:
            families.append(name)
    return families

