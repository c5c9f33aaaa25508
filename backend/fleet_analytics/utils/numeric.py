"""
Numeric field extraction.

Devices report battery and temperature either as numbers or as strings with
units and noise ("85%", "34.14 c", "-5.5C"). All of those go through
extract_numeric, which applies one stripping rule: keep digits, the first
decimal point and a leading minus sign, drop everything else.
"""

import math
import re
from typing import Any, Optional

import numpy as np

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def extract_numeric(value: Any) -> Optional[float]:
    """
    Strip units/noise from a field and parse it as a float.

    Returns None when nothing parseable is left.

    >>> extract_numeric("34.14 c")
    34.14
    >>> extract_numeric("85%")
    85.0
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.number)):
        return _finite_or_none(float(value))

    text = _NON_NUMERIC.sub("", str(value))
    negative = text.startswith("-")
    text = text.replace("-", "")

    whole, dot, fraction = text.partition(".")
    text = whole + dot + fraction.replace(".", "")

    if not any(ch.isdigit() for ch in text):
        return None

    number = float(text)
    return _finite_or_none(-number if negative else number)


def coerce_number(value: Any) -> Optional[float]:
    """
    Plain numeric coercion for coordinates, speed and signal.

    Unlike extract_numeric, no characters are stripped: "12.5" parses,
    "12.5 km/h" does not.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.number)):
        return _finite_or_none(float(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return _finite_or_none(float(text))
        except ValueError:
            return None
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up."""
    return int(math.floor(value + 0.5))


def _finite_or_none(number: float) -> Optional[float]:
    return number if math.isfinite(number) else None
