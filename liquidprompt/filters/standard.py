"""
Standard Liquid filters.

String, list, math and date transformations. Every filter receives the
piped value first and its template arguments positionally after it.
Inputs are coerced with the engine's value rules, so filters never
fail on unexpected types except where noted (division by zero,
malformed URL escapes).
"""

from __future__ import annotations

import html
import json
import math
import re
from collections.abc import Mapping
from datetime import date as date_type, datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote

from ..errors import FilterError
from ..template.base import FilterFunction
from ..values import resolve_variable, strict_equals, to_boolean, to_number, to_string

# encodeURIComponent leaves these unescaped
_URI_SAFE = "-_.!~*'()"

_HTML_TAG = re.compile(r"<[^>]*>")
_UNESCAPED_AMP = re.compile(r"&(?!amp;|lt;|gt;|quot;|#39;)")


def _num(value: Any, default: float = 0) -> Any:
    result = to_number(value)
    return default if result is None else result


def _as_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return None


def _integral(value: Any) -> Any:
    """Collapses integral floats back to int."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# ---- String filters ---------------------------------------------------------

def upcase(value: Any) -> str:
    return to_string(value).upper()


def downcase(value: Any) -> str:
    return to_string(value).lower()


def capitalize(value: Any) -> str:
    text = to_string(value)
    if not text:
        return ""
    return text[0].upper() + text[1:].lower()


def strip(value: Any) -> str:
    return to_string(value).strip()


def lstrip(value: Any) -> str:
    return to_string(value).lstrip()


def rstrip(value: Any) -> str:
    return to_string(value).rstrip()


def strip_html(value: Any) -> str:
    return _HTML_TAG.sub("", to_string(value))


def strip_newlines(value: Any) -> str:
    return to_string(value).replace("\r\n", "").replace("\n", "")


def newline_to_br(value: Any) -> str:
    return to_string(value).replace("\n", "<br>")


def escape(value: Any) -> str:
    return html.escape(to_string(value), quote=True).replace("&#x27;", "&#39;")


def escape_once(value: Any) -> str:
    text = _UNESCAPED_AMP.sub("&amp;", to_string(value))
    return (
        text.replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def url_encode(value: Any) -> str:
    return quote(to_string(value), safe=_URI_SAFE)


def url_decode(value: Any) -> str:
    try:
        return unquote(to_string(value), errors="strict")
    except UnicodeDecodeError as e:
        raise FilterError(f"Failed to decode URL: {e}", "url_decode", cause=e) from e


def truncate(value: Any, length: Any = 50, ellipsis: Any = "...") -> str:
    """
    Shortens text to ``length`` characters including the ellipsis.
    """
    text = to_string(value)
    limit = _num(length, 50)
    marker = to_string(ellipsis)

    if len(text) <= limit:
        return text

    keep = max(0, int(math.floor(limit)) - len(marker))
    return text[:keep] + marker


def truncatewords(value: Any, words: Any = 15, ellipsis: Any = "...") -> str:
    text = to_string(value)
    count = max(1, int(_num(words, 15)))
    marker = to_string(ellipsis)
    parts = text.split()

    if len(parts) <= count:
        return text
    return " ".join(parts[:count]) + marker


def prepend(value: Any, prefix: Any = "") -> str:
    return to_string(prefix) + to_string(value)


def append(value: Any, suffix: Any = "") -> str:
    return to_string(value) + to_string(suffix)


def replace(value: Any, search: Any = "", replacement: Any = "") -> str:
    return to_string(value).replace(to_string(search), to_string(replacement))


def replace_first(value: Any, search: Any = "", replacement: Any = "") -> str:
    return to_string(value).replace(to_string(search), to_string(replacement), 1)


def remove(value: Any, needle: Any = "") -> str:
    return to_string(value).replace(to_string(needle), "")


def remove_first(value: Any, needle: Any = "") -> str:
    return to_string(value).replace(to_string(needle), "", 1)


def slice_filter(value: Any, offset: Any = 0, length: Any = None) -> Any:
    """
    Substring (or sub-list) starting at ``offset``.

    Negative offsets count from the end.
    """
    items = _as_list(value)
    source = items if items is not None else to_string(value)
    start = int(_num(offset, 0))

    if length is None:
        return source[start:]

    end = start + int(_num(length, 0))
    if start < 0 <= end:
        return source[start:]
    return source[start:end]


def split(value: Any, separator: Any = " ") -> List[str]:
    text = to_string(value)
    sep = to_string(separator)
    if not text:
        return []
    if sep == "":
        return list(text)
    if sep == " ":
        return text.split()
    return text.split(sep)


# ---- List filters -----------------------------------------------------------

def first(value: Any) -> Any:
    items = _as_list(value)
    return items[0] if items else None


def last(value: Any) -> Any:
    items = _as_list(value)
    return items[-1] if items else None


def join(value: Any, separator: Any = " ") -> str:
    items = _as_list(value)
    if items is None:
        return to_string(value)
    return to_string(separator).join(to_string(item) for item in items)


def size(value: Any) -> int:
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value)
    return 0


def sort(value: Any, key: Any = None) -> List[Any]:
    items = _as_list(value)
    if items is None:
        return [value]
    if key is None:
        return sorted(items, key=to_string)
    prop = to_string(key)
    return sorted(items, key=lambda item: to_string(_property(item, prop)))


def reverse(value: Any) -> List[Any]:
    items = _as_list(value)
    if items is None:
        return [value]
    return items[::-1]


def uniq(value: Any) -> List[Any]:
    items = _as_list(value)
    if items is None:
        return [value]

    seen = set()
    result = []
    for item in items:
        key = json.dumps(item, sort_keys=True, default=str)
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


def _property(item: Any, prop: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(prop)
    if isinstance(item, (str, int, float, bool, list, tuple)) or item is None:
        return None
    return resolve_variable(item, prop)


def map_filter(value: Any, prop: Any = "") -> List[Any]:
    items = _as_list(value)
    if items is None:
        return []
    name = to_string(prop)
    return [_property(item, name) for item in items]


def where(value: Any, prop: Any = "", *expected: Any) -> List[Any]:
    """
    Items whose ``prop`` equals ``expected``.

    With no expected value, items whose property is truthy.
    """
    items = _as_list(value)
    if items is None:
        return []
    name = to_string(prop)

    if not expected:
        return [item for item in items if to_boolean(_property(item, name))]
    return [item for item in items if strict_equals(_property(item, name), expected[0])]


def compact(value: Any) -> List[Any]:
    items = _as_list(value)
    if items is None:
        return [] if value is None else [value]
    return [item for item in items if item is not None]


# ---- Math filters -----------------------------------------------------------

def plus(value: Any, operand: Any = 0) -> Any:
    return _num(value) + _num(operand)


def minus(value: Any, operand: Any = 0) -> Any:
    return _num(value) - _num(operand)


def times(value: Any, operand: Any = 1) -> Any:
    return _num(value) * _num(operand)


def divided_by(value: Any, operand: Any = None) -> int:
    """Floor division; dividing by zero is an error."""
    divisor = _num(operand)
    if divisor == 0:
        raise FilterError("Division by zero", "divided_by")
    return math.floor(_num(value) / divisor)


def modulo(value: Any, operand: Any = None) -> Any:
    """Remainder with the sign of the dividend."""
    dividend = _num(value)
    divisor = _num(operand)
    if divisor == 0:
        raise FilterError("Modulo by zero", "modulo")
    result = math.fmod(dividend, divisor)
    if isinstance(dividend, int) and isinstance(divisor, int):
        return int(result)
    return result


def round_filter(value: Any, precision: Any = 0) -> Any:
    """Rounds half up to ``precision`` decimal places."""
    number = _num(value)
    digits = int(_num(precision, 0))
    factor = 10 ** digits
    result = math.floor(number * factor + 0.5) / factor
    return _integral(result) if digits <= 0 else result


def ceil(value: Any) -> int:
    return math.ceil(_num(value))


def floor(value: Any) -> int:
    return math.floor(_num(value))


def abs_filter(value: Any) -> Any:
    return abs(_num(value))


# ---- Date and default -------------------------------------------------------

def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date_type):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)

    text = to_string(value).strip()
    if text in ("now", "today"):
        return datetime.now()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def date(value: Any, fmt: Any = "%Y-%m-%d") -> str:
    """
    Formats a date with strftime directives.

    Accepts datetime/date objects, Unix timestamps, ISO 8601 strings and
    ``now``/``today``; anything else renders as an empty string.
    """
    moment = _to_datetime(value)
    if moment is None:
        return ""
    return moment.strftime(to_string(fmt))


def default(value: Any, fallback: Any = "") -> Any:
    if value is None or value == "" or (isinstance(value, (list, tuple)) and not value):
        return fallback
    return value


STANDARD_FILTERS: Dict[str, FilterFunction] = {
    "upcase": upcase,
    "downcase": downcase,
    "capitalize": capitalize,
    "strip": strip,
    "lstrip": lstrip,
    "rstrip": rstrip,
    "strip_html": strip_html,
    "strip_newlines": strip_newlines,
    "newline_to_br": newline_to_br,
    "escape": escape,
    "escape_once": escape_once,
    "url_encode": url_encode,
    "url_decode": url_decode,
    "truncate": truncate,
    "truncatewords": truncatewords,
    "prepend": prepend,
    "append": append,
    "replace": replace,
    "replace_first": replace_first,
    "remove": remove,
    "remove_first": remove_first,
    "slice": slice_filter,
    "split": split,
    "first": first,
    "last": last,
    "join": join,
    "size": size,
    "sort": sort,
    "reverse": reverse,
    "uniq": uniq,
    "map": map_filter,
    "where": where,
    "compact": compact,
    "plus": plus,
    "minus": minus,
    "times": times,
    "divided_by": divided_by,
    "modulo": modulo,
    "round": round_filter,
    "ceil": ceil,
    "floor": floor,
    "abs": abs_filter,
    "date": date,
    "default": default,
}

__all__ = ["STANDARD_FILTERS"]
