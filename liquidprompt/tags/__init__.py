"""
Built-in tag handlers.
"""

from .composition import extends_tag, include_tag
from .control import (
    CASE_BRANCHES,
    FOR_BRANCHES,
    IF_BRANCHES,
    capture_tag,
    case_tag,
    comment_tag,
    for_tag,
    if_tag,
    make_assign_tag,
    unless_tag,
)

__all__ = [
    "IF_BRANCHES",
    "FOR_BRANCHES",
    "CASE_BRANCHES",
    "if_tag",
    "unless_tag",
    "for_tag",
    "case_tag",
    "make_assign_tag",
    "capture_tag",
    "comment_tag",
    "extends_tag",
    "include_tag",
]
