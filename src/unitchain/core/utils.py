"""
unitchain.core.utils
====================

Helpers for showing numbers: significant-digit counting, the number of
fractional digits to print, and the fixed/scientific switch used for
conversion results. None of these hold engine state.
"""

from __future__ import annotations

import math

_NOT_DIGITS = "0.+-"


def count_significant_digits(text: str) -> int:
    """
    Count significant digits in a numeric literal such as ``"0.00250"``.

    The exponent part is ignored, leading zeros, signs and the decimal
    point never count, and trailing zeros are dropped. Returns 0 when
    ``text`` is not a number.
    """
    text = text.strip()
    try:
        float(text)
    except ValueError:
        return 0

    mantissa = text
    for marker in ("e", "E"):
        if marker in mantissa:
            mantissa = mantissa[: mantissa.index(marker)]
            break

    first = 0
    while first < len(mantissa) and mantissa[first] in _NOT_DIGITS:
        first += 1

    last = len(mantissa) - 1
    while last > first and mantissa[last] in _NOT_DIGITS:
        last -= 1

    if "." in mantissa[first + 1 : last]:
        first += 1

    return max(last - first + 1, 0)


def precision_for(value: float, significant_digits: int, drop_trailing_zeros: bool = True) -> int:
    """Fractional digits needed to show ``value`` with ``significant_digits``."""
    if value == 0 or not math.isfinite(value):
        return 0

    precision = significant_digits - math.floor(math.log10(abs(value))) - 1
    precision = max(precision, 0)
    if not drop_trailing_zeros:
        return precision

    text = f"{value:.{precision}f}"
    for ch in reversed(text):
        if ch != "0":
            break
        precision -= 1
    return max(precision, 0)


def format_value(value: float) -> str:
    """Scientific notation for very small/large magnitudes, fixed otherwise."""
    if value == 0 or not math.isfinite(value):
        return f"{value:f}"
    order = math.floor(math.log10(abs(value)))
    if order < -3 or order > 6:
        return f"{value:e}"
    return f"{value:f}"


__all__ = [
    "count_significant_digits",
    "precision_for",
    "format_value",
]
