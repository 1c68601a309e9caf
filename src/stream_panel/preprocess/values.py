from __future__ import annotations

import math
import numbers
import re
from typing import Any, Literal

from stream_panel.errors import InvalidValueError

NumericPolicy = Literal["zero", "error"]

# Leading decimal number; trailing text such as "%" or ",234" is ignored.
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_float(text: str) -> float:
    """Read the numeric prefix of *text* (``"12%"`` -> 12.0); ``nan`` when there is none."""
    match = _LEADING_FLOAT.match(text)
    if match is None:
        return math.nan
    return float(match.group(1))


def coerce_value(raw_value: Any, policy: NumericPolicy = "zero") -> float:
    """Coerce a metric cell to float.

    Under the ``zero`` policy anything without a numeric prefix becomes ``0.0``.
    Under ``error`` the same input raises :class:`InvalidValueError`.
    """
    if isinstance(raw_value, numbers.Real):
        number = float(raw_value)
    elif isinstance(raw_value, str):
        number = parse_leading_float(raw_value)
    else:
        number = math.nan

    if math.isnan(number):
        if policy == "error":
            raise InvalidValueError(raw_value)
        return 0.0
    return number
