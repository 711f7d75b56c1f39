"""
Strict number parsing shared by the stats and policy models
"""

import math
import re
from typing import Optional

_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def parse_decimal(value: str) -> float:
    """
    Parse a plain decimal literal such as "70", "12.5" or "1e2".

    Raises:
        ValueError: on whitespace, underscores, nan/inf or any other garbage
    """
    if not _DECIMAL_RE.match(value):
        raise ValueError(f"not a decimal number: {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def parse_integer(value: str) -> int:
    """Parse a base-10 integer literal, raising ValueError otherwise"""
    if not _INTEGER_RE.match(value):
        raise ValueError(f"not an integer: {value!r}")
    return int(value)


def parse_percentage(value: str) -> Optional[float]:
    """
    Parse a percentage as printed by `docker stats` ("12.34%").

    Returns None when the source did not report a number (e.g. "--" while a
    container is starting).
    """
    try:
        return parse_decimal(value.strip().removesuffix("%"))
    except ValueError:
        return None
