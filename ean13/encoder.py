"""EAN-13 encoder: GS1 check digit and the 95-module bar pattern."""

import re
import string
from dataclasses import dataclass

from ean13.errors import InvalidCharacter, InvalidCodeLength
from ean13.logging import trace

# 7-module digit patterns, indexed by digit value
L_CODES = (
    "0001101", "0011001", "0010011", "0111101", "0100011",
    "0110001", "0101111", "0111011", "0110111", "0001011",
)
G_CODES = (
    "0100111", "0110011", "0011011", "0100001", "0011101",
    "0111001", "0000101", "0010001", "0001001", "0010111",
)
R_CODES = (
    "1110010", "1100110", "1101100", "1000010", "1011100",
    "1001110", "1010000", "1000100", "1001000", "1110100",
)

# L/G parity of the six left digits, indexed by the first digit
STRUCTURE = (
    "LLLLLL", "LLGLGG", "LLGGLG", "LLGGGL", "LGLLGG",
    "LGGLLG", "LGGGLL", "LGLGLG", "LGLGGL", "LGGLGL",
)

START_GUARD = "101"
CENTER_GUARD = "01010"
END_GUARD = "101"

DIGIT_WIDTH = 7
MODULE_COUNT = len(START_GUARD) + 12 * DIGIT_WIDTH + len(CENTER_GUARD) + len(END_GUARD)  # 95

_NON_DIGIT = re.compile(r"[^0-9]")


@dataclass(frozen=True)
class EncodingResult:
    """Module string plus the 13-digit code it was built from."""
    encoding: str
    full_code: str


def normalize(code) -> str:
    """Return ``code`` as a string with every non-digit character removed."""
    return _NON_DIGIT.sub("", str(code))


def calculate_checksum(code12: str) -> int:
    """GS1 mod-10 check digit for a 12-digit string (weights 1,3,1,3,...)."""
    if len(code12) != 12:
        raise InvalidCodeLength(code12, expected="12")
    if any(ch not in string.digits for ch in code12):
        raise InvalidCharacter(f"Checksum input must be digits only: {code12!r}")

    total = sum(int(ch) * (3 if i % 2 else 1) for i, ch in enumerate(code12))
    return (10 - total % 10) % 10


@trace
def validate(code) -> bool:
    """Check a 12 or 13 digit code.

    Non-digits are stripped first. Any 12-digit value is accepted as-is,
    since its check digit has not been supplied yet. A 13-digit value is
    valid when its last digit matches the checksum of the first twelve.
    Never raises.
    """
    digits = normalize(code)
    if len(digits) == 12:
        return True
    if len(digits) == 13:
        return int(digits[12]) == calculate_checksum(digits[:12])
    return False


@trace
def encode(code) -> EncodingResult:
    """Encode a 12 or 13 digit code into its 95-module pattern.

    A 12-digit input gets its check digit appended. The supplied check
    digit of a 13-digit input is used as given (see ``validate``).

    Raises:
        InvalidCodeLength: when the stripped input is not 12 or 13 digits.
    """
    digits = normalize(code)
    if len(digits) == 12:
        digits += str(calculate_checksum(digits))
    if len(digits) != 13:
        raise InvalidCodeLength(digits)

    structure = STRUCTURE[int(digits[0])]

    parts = [START_GUARD]
    for parity, ch in zip(structure, digits[1:7]):
        table = L_CODES if parity == "L" else G_CODES
        parts.append(table[int(ch)])
    parts.append(CENTER_GUARD)
    parts.extend(R_CODES[int(ch)] for ch in digits[7:13])
    parts.append(END_GUARD)

    return EncodingResult(encoding="".join(parts), full_code=digits)
