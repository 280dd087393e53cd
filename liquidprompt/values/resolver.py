"""
Variable path resolution against a render context.

Paths are dotted (``user.address.city``); list indices appear as numeric
segments (``items.0.name``). Missing data resolves to None, malformed
traversal raises ContextError.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterator, Optional, Sequence, Union

from ..errors import ContextError

# parseInt-style prefix: optional sign followed by digits
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

_SCALARS = (str, bytes, int, float, bool)


def parse_index(segment: str) -> Optional[int]:
    """Reads a base-10 integer prefix from a path segment."""
    m = _INT_PREFIX.match(segment)
    return int(m.group(1)) if m else None


def _step(current: Any, segment: str, path: str) -> Any:
    if isinstance(current, (list, tuple)):
        index = parse_index(segment)
        if index is None:
            raise ContextError(
                f"Failed to resolve variable '{path}': invalid array index '{segment}'",
                path,
            )
        if 0 <= index < len(current):
            return current[index]
        return None

    if isinstance(current, Mapping):
        return current.get(segment)

    if isinstance(current, _SCALARS):
        raise ContextError(
            f"Failed to resolve variable '{path}': cannot access property "
            f"'{segment}' on non-object",
            path,
        )

    # Plain objects (dataclasses, models): public attributes only
    if segment.startswith("_"):
        return None
    return getattr(current, segment, None)


class ObjectScope(Mapping):
    """
    Read-only mapping view over an object's public attributes.

    Lets object contexts serve as the parent of derived scopes.
    """

    _MISSING = object()

    def __init__(self, obj: Any):
        self.obj = obj

    def __getitem__(self, key: str) -> Any:
        if not isinstance(key, str) or key.startswith("_"):
            raise KeyError(key)
        value = getattr(self.obj, key, self._MISSING)
        if value is self._MISSING:
            raise KeyError(key)
        return value

    def __iter__(self) -> Iterator[str]:
        return (name for name in dir(self.obj) if not name.startswith("_"))

    def __len__(self) -> int:
        return sum(1 for _ in self)


def resolve_variable(context: Any, path: Union[str, Sequence[str]]) -> Any:
    """
    Resolves a variable path against the context.

    Args:
        context: Nested mapping/list/object tree
        path: Dotted path or pre-split segments

    Returns:
        The resolved value, or None when any step is missing

    Raises:
        ContextError: On an invalid list index or property access on a scalar
    """
    if isinstance(path, str):
        path_text = path
        segments = path.split(".")
    else:
        segments = list(path)
        path_text = ".".join(segments)

    current = context
    for segment in segments:
        if current is None:
            return None
        current = _step(current, segment, path_text)
    return current


__all__ = ["resolve_variable", "parse_index", "ObjectScope"]
