"""
Input helpers for the values callers collect from users.

parse_number is lenient: it accepts "." or "," as decimal separator and
strips currency symbols, unit suffixes and stray punctuation. validate_number_input
is the strict variant that rejects anything other than digits, separators and
(optionally) a leading minus sign.
"""

import re
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import CircleSpec

LEADING_CURRENCY = re.compile(r"^[€£¥$][a-z%]*\s*", re.IGNORECASE)
TRAILING_UNITS = re.compile(r"[a-z]+$", re.IGNORECASE)
TRAILING_PERCENT = re.compile(r"%$")
TRAILING_DOLLARS = re.compile(r"[$]+$")
MISTYPED_SEPARATORS = re.compile(r"[?;:+@]")
DISALLOWED = re.compile(r"[^0-9,.\-]")
SEPARATORS = re.compile(r"[.,]")

INCOMPLETE_NUMBERS = ("", ".", "-", "-.")
MIN_DIAMETER = 0.01


def _to_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def parse_number(text: str) -> Optional[float]:
    """Parse a user-typed number, returning None when nothing sensible remains."""
    if text == "":
        return None

    clean = text.strip()
    clean = LEADING_CURRENCY.sub("", clean)
    clean = TRAILING_UNITS.sub("", clean)
    clean = TRAILING_PERCENT.sub("", clean)
    clean = TRAILING_DOLLARS.sub("", clean)
    clean = clean.strip()

    clean = MISTYPED_SEPARATORS.sub(".", clean)
    clean = DISALLOWED.sub("", clean)

    # With both separators present the last one is the decimal point
    if "." in clean and "," in clean:
        last = "." if clean.rfind(".") > clean.rfind(",") else ","
        parts = SEPARATORS.split(clean)
        tail = parts.pop()
        clean = "".join(parts) + last + tail

    clean = clean.replace(",", ".")
    if clean.count(".") > 1:
        return None
    if clean in INCOMPLETE_NUMBERS:
        return None

    return _to_number(clean)


def is_allowed_character(char: str, allow_negative: bool = False) -> bool:
    if char == "" or (char.isdigit() and char.isascii()):
        return True
    if char in ".,":
        return True
    return allow_negative and char == "-"


def filter_allowed_characters(text: str, allow_negative: bool = False) -> str:
    return "".join(c for c in text if is_allowed_character(c, allow_negative))


@dataclass
class NumberValidation:
    is_valid: bool
    cleaned_value: str
    numeric_value: Optional[float] = None


def validate_number_input(text: str, allow_negative: bool = False) -> NumberValidation:
    """Strict check: any character outside digits, separators and a leading minus is an error."""
    if text.strip() == "":
        return NumberValidation(True, "")

    cleaned = filter_allowed_characters(text, allow_negative)
    if cleaned != text:
        return NumberValidation(False, cleaned)

    if cleaned in INCOMPLETE_NUMBERS:
        return NumberValidation(True, cleaned)

    normalized = cleaned.replace(",", ".")
    if normalized.count(".") > 1:
        return NumberValidation(False, cleaned)

    if cleaned.startswith("-"):
        if not allow_negative or normalized[1:] in ("", ".", "-"):
            return NumberValidation(False, cleaned)

    value = _to_number(normalized)
    if value is None:
        return NumberValidation(False, cleaned)
    return NumberValidation(True, cleaned, value)


class CircleInput(BaseModel):
    """Schema for one requested circle."""
    model_config = ConfigDict(from_attributes=True)

    diameter: float = Field(gt=0, ge=MIN_DIAMETER)
    color: str


CircleList = TypeAdapter(Annotated[List[CircleInput], Field(min_length=1)])


def _describe(error: Dict[str, Any]) -> str:
    loc = error["loc"]
    if not loc:
        return "At least one circle is required" if error["type"] == "too_short" else error["msg"]
    fields = ".".join(str(part) for part in loc[1:])
    prefix = f"Circle {loc[0] + 1}" if isinstance(loc[0], int) else str(loc[0])
    return f"{prefix}: {fields}: {error['msg']}" if fields else f"{prefix}: {error['msg']}"


def validate_circles(circles: Sequence[CircleSpec]) -> Tuple[bool, List[str]]:
    """Check a circle list before handing it to the engine."""
    try:
        CircleList.validate_python(list(circles), from_attributes=True)
    except ValidationError as exc:
        return False, [_describe(error) for error in exc.errors()]
    return True, []
