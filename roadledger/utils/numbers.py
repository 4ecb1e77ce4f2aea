"""Mini README: Locale-tolerant numeric parsing.

Form fields and stored documents arrive as strings typed by hand
("1,5", " 200 ", "") or as numbers. ``parse_number`` turns all of them into
floats and maps anything unusable to ``0.0``. It never raises: garbage in,
zero out.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: object) -> float:
    """Coerce ``value`` into a finite float, defaulting to ``0.0``.

    Commas are treated as decimal separators and only the leading numeric
    prefix of a string is read, so ``"12.5 gal"`` yields ``12.5``.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.replace(",", "."))
        if not match:
            return 0.0
        value = match.group(1)
    elif not isinstance(value, (int, float, Decimal)):
        return 0.0
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number
