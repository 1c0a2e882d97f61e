from __future__ import annotations

import json
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

"""Loose cell value coercion shared by validators, search and commands.

Cells arrive as text (CSV), numbers (XLSX) or JSON text embedded in a cell.
The helpers here turn them into typed checks without ever raising on a
malformed cell:

- to_number: empty text counts as 0, missing (None) and garbage become NaN.
  NaN fails every comparison, so a bad cell never satisfies a range check.
  Unsigned 0x / 0b / 0o integer literals are accepted; digits are ASCII only.
- to_text: falsy cells (None, "", 0, NaN, False) read as "".
- display_text: the text a cell shows in messages and in substring search.
"""

__all__ = [
    "JSONParseError",
    "to_number",
    "to_text",
    "display_text",
    "is_integral",
    "to_fixed",
    "parse_json",
    "is_integer_array",
]

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
_PREFIXED_INT_RE = re.compile(r"^0([xX][0-9a-fA-F]+|[bB][01]+|[oO][0-7]+)$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")


class JSONParseError(ValueError):
    """Raised when a cell does not hold strict JSON."""


def to_number(value: Any) -> float:
    """Coerce a cell to float. Never raises; unparseable cells give NaN."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        s = value.strip()
        if s == "":
            return 0.0
        if _NUMBER_RE.match(s):
            return float(s)
        if _PREFIXED_INT_RE.match(s):
            return float(int(s, 0))
        if _INFINITY_RE.match(s):
            return -math.inf if s.startswith("-") else math.inf
        return math.nan
    return math.nan


def _is_falsy(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or math.isnan(value)
    return value == ""


def display_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value == int(value):
            return str(int(value))
    return str(value)


def to_text(value: Any) -> str:
    """Text form of a cell where any falsy cell reads as empty."""
    if _is_falsy(value):
        return ""
    return display_text(value)


def is_integral(number: float) -> bool:
    return math.isfinite(number) and number == int(number)


def to_fixed(number: float, digits: int = 1) -> str:
    """Format with a fixed number of decimals, halves rounded away from zero.

    >>> to_fixed(3.25)
    '3.3'
    >>> to_fixed(3.0)
    '3.0'
    """
    if not math.isfinite(number) or abs(number) >= 1e21:
        return display_text(number)
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(number).quantize(quantum, rounding=ROUND_HALF_UP))


def _reject_constant(name: str) -> Any:
    raise JSONParseError(f"non-standard JSON constant: {name}")


def parse_json(text: str) -> Any:
    """Parse strict JSON (NaN / Infinity literals are rejected)."""
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except JSONParseError:
        raise
    except (json.JSONDecodeError, TypeError) as e:
        raise JSONParseError(str(e)) from e


def is_integer_array(value: Any) -> bool:
    """True when value is a list whose every element coerces to an integer."""
    if not isinstance(value, list):
        return False
    for item in value:
        # JSON null は 0 として扱う
        number = 0.0 if item is None else to_number(item)
        if not is_integral(number):
            return False
    return True
