"""
Prompt-oriented filters.

Token counting and truncation backed by the engine's TokenService, plus
text clean-up helpers for preparing model input.
"""

from __future__ import annotations

import json
import re
import unicodedata
from typing import Any, Dict

from ..stats import TokenService
from ..template.base import FilterFunction
from ..values import to_number, to_string

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_MULTI_SPACE = re.compile(r"  +")

# Markdown clean-up rules, applied in order
_MARKDOWN_RULES = [
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"[*_]{1,3}([^*_]+)[*_]{1,3}"), r"\1"),
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"`([^`]+)`"), r"\1"),
]


def sanitize(value: Any) -> str:
    """
    Cleans text for model consumption.

    Drops control characters other than newline/tab, applies NFKC
    normalization, collapses runs of spaces and trims.
    """
    text = _CONTROL_CHARS.sub("", to_string(value))
    text = unicodedata.normalize("NFKC", text)
    return _MULTI_SPACE.sub(" ", text).strip()


def strip_markdown(value: Any) -> str:
    text = to_string(value)
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text


def json_escape(value: Any) -> str:
    """Escapes text for embedding inside a JSON string literal."""
    return json.dumps(to_string(value), ensure_ascii=False)[1:-1]


def to_numbered_list(value: Any, start: Any = 1) -> str:
    if not isinstance(value, (list, tuple)):
        return to_string(value)
    first = to_number(start)
    first = 1 if first is None else int(first)
    return "\n".join(f"{first + i}. {to_string(item)}" for i, item in enumerate(value))


def to_bulleted_list(value: Any, bullet: Any = "-") -> str:
    if not isinstance(value, (list, tuple)):
        return to_string(value)
    marker = to_string(bullet)
    return "\n".join(f"{marker} {to_string(item)}" for item in value)


class TokenFilters:
    """Filters that need a tokenizer; bound to one TokenService."""

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def token_count(self, value: Any) -> int:
        return self.token_service.count_text_cached(to_string(value))

    def truncate_to_tokens(self, value: Any, max_tokens: Any = 1000, ellipsis: Any = "...") -> str:
        """
        Cuts text at a word boundary to fit ``max_tokens`` including
        the ellipsis.
        """
        limit = to_number(max_tokens)
        limit = 1000 if limit is None else int(limit)
        return self.token_service.truncate_to_tokens(to_string(value), limit, to_string(ellipsis))


def build_prompt_filters(token_service: TokenService) -> Dict[str, FilterFunction]:
    """
    Builds the prompt filter table bound to a token service.

    Args:
        token_service: Service used by tokenCount/truncateToTokens

    Returns:
        Mapping from filter name to callable
    """
    tokens = TokenFilters(token_service)
    return {
        "tokenCount": tokens.token_count,
        "truncateToTokens": tokens.truncate_to_tokens,
        "sanitize": sanitize,
        "stripMarkdown": strip_markdown,
        "jsonEscape": json_escape,
        "toNumberedList": to_numbered_list,
        "toBulletedList": to_bulleted_list,
    }


__all__ = [
    "TokenFilters",
    "build_prompt_filters",
    "sanitize",
    "strip_markdown",
    "json_escape",
    "to_numbered_list",
    "to_bulleted_list",
]
