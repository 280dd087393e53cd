"""
Value coercion rules.

Fixed conversions of arbitrary context values to boolean, number and
string, used by condition evaluation, filters and final output.
The rules follow Liquid/JavaScript semantics rather than Python's own
truthiness: ``"0"`` and ``"false"`` are false, ``3.0`` prints as ``3``.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from typing import Any, Optional, Union

Number = Union[int, float]

# Leading numeric prefix accepted by JS parseFloat
_FLOAT_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)

COMPARISON_OPERATORS = ("==", "!=", "<>", "<", ">", "<=", ">=", "contains")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def to_boolean(value: Any) -> bool:
    """Liquid truthiness."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return len(value) > 0 and value != "false" and value != "0"
    if _is_number(value):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) > 0
    if isinstance(value, Mapping):
        return len(value) > 0
    return bool(value)


def parse_float(text: str) -> Optional[float]:
    """
    Parses the leading numeric prefix of a string.

    Returns:
        The parsed number or None when no numeric prefix exists
    """
    m = _FLOAT_PREFIX.match(text)
    if not m:
        return None
    raw = m.group(1)
    if raw.lstrip("+-") == "Infinity":
        return float("-inf") if raw.startswith("-") else float("inf")
    return float(raw)


def to_number(value: Any) -> Optional[Number]:
    """Numeric coercion; None when the value has no numeric reading."""
    if isinstance(value, bool):
        return 1 if value else 0
    if _is_number(value):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value
    if isinstance(value, str):
        return parse_float(value)
    return None


def format_number(value: Number) -> str:
    """Renders a number the way JavaScript's String() does."""
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    exp = int(exponent)
    if -7 < exp < 0:
        # JS switches to exponent form only below 1e-6
        sign = "-" if mantissa.startswith("-") else ""
        digits = mantissa.lstrip("-").replace(".", "")
        return f"{sign}0.{'0' * (-exp - 1)}{digits}"
    return f"{mantissa}e{'-' if exp < 0 else '+'}{abs(exp)}"


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def to_string(value: Any) -> str:
    """Output coercion."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return format_number(value)
    if _is_sequence(value):
        return "".join(to_string(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """Identity-style equality without coercion."""
    if left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, (list, dict, set)) or isinstance(right, (list, dict, set)):
        return left is right
    if type(left) is not type(right):
        return False
    return left == right


def compare_values(left: Any, operator: str, right: Any) -> bool:
    """
    Compares two values using Liquid comparison rules.

    Args:
        left: Left operand
        operator: One of ==, !=, <>, <, >, <=, >=, contains
        right: Right operand

    Returns:
        Comparison result; unknown operators yield False
    """
    if operator == "==":
        return strict_equals(left, right)
    if operator in ("!=", "<>"):
        return not strict_equals(left, right)
    if operator in ("<", ">", "<=", ">="):
        left_num = to_number(left)
        right_num = to_number(right)
        if left_num is not None and right_num is not None:
            a, b = left_num, right_num
        else:
            a, b = to_string(left), to_string(right)
        if operator == "<":
            return a < b
        if operator == ">":
            return a > b
        if operator == "<=":
            return a <= b
        return a >= b
    if operator == "contains":
        return to_string(right) in to_string(left)
    return False


__all__ = [
    "COMPARISON_OPERATORS",
    "to_boolean",
    "to_number",
    "to_string",
    "parse_float",
    "format_number",
    "strict_equals",
    "compare_values",
]
