"""Exception types raised by the EAN-13 renderer."""


class Ean13Error(Exception):
    """Base class for every error raised by this package."""


class InvalidSurface(Ean13Error, TypeError):
    """The drawing target is missing or cannot be drawn on."""


class InvalidCodeLength(Ean13Error, ValueError):
    """The code does not reduce to 12 or 13 digits."""

    def __init__(self, digits: str, expected: str = "12 or 13"):
        self.digits = digits
        super().__init__(f"EAN-13 requires {expected} digits, got {len(digits)}")


class InvalidCharacter(Ean13Error, ValueError):
    """A checksum input contains something other than ASCII digits."""


class InvalidOption(Ean13Error, ValueError):
    """A render option is unknown or has an unusable value."""


class EncodingFailure(Ean13Error, RuntimeError):
    """The raster image could not be encoded to bytes."""
