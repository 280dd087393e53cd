"""
Conversation filters.

Operate on lists of chat messages: mappings (or objects) with ``role``,
``content`` and an optional ``name``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Dict, List

from ..errors import FilterError
from ..stats import TokenService
from ..template.base import FilterFunction
from ..values import to_string

CONVERSATION_FORMATS = ("openai", "anthropic", "plain")

# Per-message overhead added by chat formats (role markers, separators)
MESSAGE_OVERHEAD_TOKENS = 4


def _field(message: Any, key: str) -> Any:
    if isinstance(message, Mapping):
        return message.get(key)
    return getattr(message, key, None)


def format_conversation(messages: Any, fmt: Any = "openai") -> str:
    """
    Renders messages for a model provider.

    Formats:
        openai: JSON array of {role, content[, name]} objects
        anthropic: ``Human:``/``Assistant:`` turns separated by blank lines
        plain: ``[ROLE]: content`` lines separated by blank lines

    Raises:
        FilterError: If the input is not a list or the format is unknown
    """
    if not isinstance(messages, (list, tuple)):
        raise FilterError(
            "Conversation formatting failed: formatConversation requires an array of messages",
            "formatConversation",
        )

    format_type = to_string(fmt)

    if format_type == "openai":
        payload = []
        for msg in messages:
            entry = {"role": _field(msg, "role"), "content": _field(msg, "content")}
            name = _field(msg, "name")
            if name:
                entry["name"] = name
            payload.append(entry)
        return json.dumps(payload, indent=2, ensure_ascii=False)

    if format_type == "anthropic":
        turns = []
        for msg in messages:
            prefix = "Human:" if _field(msg, "role") == "user" else "Assistant:"
            turns.append(f"{prefix} {to_string(_field(msg, 'content'))}")
        return "\n\n".join(turns)

    if format_type == "plain":
        return "\n\n".join(
            f"[{to_string(_field(msg, 'role')).upper()}]: {to_string(_field(msg, 'content'))}"
            for msg in messages
        )

    raise FilterError(
        f"Conversation formatting failed: Unknown format: {format_type}",
        "formatConversation",
    )


def filter_by_role(messages: Any, role: Any = "") -> List[Any]:
    if not isinstance(messages, (list, tuple)):
        return []
    target = to_string(role)
    return [msg for msg in messages if _field(msg, "role") == target]


def build_conversation_filters(token_service: TokenService) -> Dict[str, FilterFunction]:
    """
    Builds the conversation filter table bound to a token service.
    """

    def conversation_tokens(messages: Any) -> int:
        if not isinstance(messages, (list, tuple)):
            return 0
        return sum(
            token_service.count_text_cached(to_string(_field(msg, "content"))) + MESSAGE_OVERHEAD_TOKENS
            for msg in messages
        )

    return {
        "formatConversation": format_conversation,
        "filterByRole": filter_by_role,
        "conversationTokens": conversation_tokens,
    }


__all__ = [
    "CONVERSATION_FORMATS",
    "MESSAGE_OVERHEAD_TOKENS",
    "format_conversation",
    "filter_by_role",
    "build_conversation_filters",
]
