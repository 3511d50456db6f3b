"""Scalar normalizers for untyped assistant JSON.

Total functions: malformed input yields None, never an exception.
"""

import math
import re
from typing import Any, Optional

_NON_NUMERIC_RE = re.compile(r"[^\d.\-]")
_THOUSANDS_COMMA_RE = re.compile(r"\d,\d{3}(?!\d)")


def _unify_separators(text: str) -> str:
    """Rewrite group/decimal separators so only a decimal dot remains.

    "5 000,50" -> "5 000.50", "1,200" -> "1200", "1.234,56" -> "1234.56".
    """
    commas = text.count(",")
    dots = text.count(".")
    if commas and dots:
        # The separator that comes last is the decimal one
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if commas > 1:
        return text.replace(",", "")
    if commas == 1:
        if _THOUSANDS_COMMA_RE.search(text):
            return text.replace(",", "")
        return text.replace(",", ".")
    if dots > 1:
        return text.replace(".", "")
    return text


def parse_number(value: Any) -> Optional[float]:
    """Parse a number the way an LLM tends to write it ("5 000,00", "$5000", 5000)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    normalized = _NON_NUMERIC_RE.sub("", _unify_separators(value)).strip()
    if not normalized:
        return None
    try:
        parsed = float(normalized)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def parse_int_safe(value: Any) -> Optional[int]:
    number = parse_number(value)
    if number is None:
        return None
    return math.trunc(number)


def parse_string(value: Any) -> Optional[str]:
    """Trimmed string or None. Numbers are not coerced."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def parse_bool(value: Any, default: bool = True) -> bool:
    """Accept true/false as booleans, numbers (0 is false) or common spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return value != 0 if math.isfinite(value) else default
    text = parse_string(value)
    if text is None:
        return default
    lowered = text.lower()
    if lowered in ("true", "1", "yes", "да"):
        return True
    if lowered in ("false", "0", "no", "нет"):
        return False
    return default
