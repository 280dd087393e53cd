"""
Value handling: coercion rules and context path resolution.
"""

from __future__ import annotations

from .coercion import (
    compare_values,
    format_number,
    strict_equals,
    to_boolean,
    to_number,
    to_string,
)
from .resolver import ObjectScope, resolve_variable

__all__ = [
    "compare_values",
    "format_number",
    "strict_equals",
    "to_boolean",
    "to_number",
    "to_string",
    "resolve_variable",
    "ObjectScope",
]
