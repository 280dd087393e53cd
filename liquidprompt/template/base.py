"""
Base interfaces and abstractions for the template engine.

Defines the parsing context used by the parser, the filter/tag
callable contracts and the plugin interface through which filters and
tags are contributed to an engine's registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .handlers import TemplateHandlers
from .nodes import TagArg, TemplateNode
from .tokens import Token, TokenType
from ..errors import ParseError

# Filter: fn(value, *args) -> new value
FilterFunction = Callable[..., Any]

# Render callback handed to tag handlers: render(nodes, context) -> str
RenderCallback = Callable[[Sequence[TemplateNode], Any], str]

# Tag handler: handler(args, body, context, render) -> str
TagHandler = Callable[[Tuple[TagArg, ...], Tuple[TemplateNode, ...], Any, RenderCallback], str]


@dataclass(frozen=True)
class TagSpec:
    """
    Registration record for a tag.

    Attributes:
        name: Tag name as written in templates
        handler: Callable that renders the tag
        block: Whether the tag has a body closed by ``end<name>``
        branches: Marker tags allowed directly inside the body
                  (``else``, ``elsif``, ``when``)
    """
    name: str
    handler: TagHandler
    block: bool = True
    branches: Tuple[str, ...] = ()

    @property
    def end_name(self) -> str:
        return f"end{self.name}"


class ParsingContext:
    """
    Token navigation for the parser.

    Provides methods to move through the token list and manage the
    position during syntactic analysis.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.position = 0
        self.length = len(tokens)

    def current(self) -> Token:
        """Returns the current token (EOF past the end)."""
        if self.position >= self.length:
            last = self.tokens[-1] if self.tokens else None
            return Token(
                TokenType.EOF, "",
                last.position if last else 0,
                last.line if last else 1,
                last.column if last else 1,
            )
        return self.tokens[self.position]

    def peek(self, offset: int = 1) -> Token:
        """Returns the token at the given offset from the current one."""
        pos = self.position + offset
        if pos >= self.length:
            return self.current() if self.position >= self.length else self.tokens[-1]
        return self.tokens[pos]

    def advance(self) -> Token:
        """Moves to the next token and returns the previous one."""
        current = self.current()
        if self.position < self.length:
            self.position += 1
        return current

    def is_at_end(self) -> bool:
        """Checks whether the token stream is exhausted."""
        return self.position >= self.length or self.current().type == TokenType.EOF

    def match(self, *token_types: TokenType) -> bool:
        """Checks whether the current token is one of the given types."""
        return self.current().type in token_types

    def consume(self, expected_type: TokenType, what: str = "") -> Token:
        """
        Consumes a token of the expected type.

        Raises:
            ParseError: If the current token has another type
        """
        current = self.current()
        if current.type != expected_type:
            expected = what or expected_type.value
            found = current.value or current.type.value
            raise ParseError(
                f"Expected {expected}, got {found!r}",
                current.position, current.line, current.column,
            )
        return self.advance()


class TemplatePlugin(ABC):
    """
    Base interface for engine plugins.

    A plugin contributes a group of related filters and tags to an
    engine's registry in one step.
    """

    def __init__(self):
        """Initializes the plugin."""
        self._handlers: Optional[TemplateHandlers] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the plugin name."""
        pass

    def set_handlers(self, handlers: TemplateHandlers) -> None:
        """
        Sets the engine core handlers.

        Args:
            handlers: Core functions available to the plugin's tags
        """
        self._handlers = handlers

    @property
    def handlers(self) -> TemplateHandlers:
        """
        Returns the engine core handlers.

        Raises:
            RuntimeError: If handlers are not set
        """
        if self._handlers is None:
            raise RuntimeError(f"Handlers not set for plugin '{self.name}'")
        return self._handlers

    def register_filters(self) -> Mapping[str, FilterFunction]:
        """
        Filters contributed by the plugin.

        Returns:
            Mapping from filter name to callable
        """
        return {}

    def register_tags(self) -> List[TagSpec]:
        """
        Tags contributed by the plugin.

        Returns:
            List of tag specs
        """
        return []

    def initialize(self) -> None:
        """
        Called once after the plugin's filters and tags are registered.
        """
        pass


# Convenience types
FilterMap = Dict[str, FilterFunction]
TagMap = Dict[str, TagSpec]

__all__ = [
    "FilterFunction",
    "RenderCallback",
    "TagHandler",
    "TagSpec",
    "ParsingContext",
    "TemplatePlugin",
    "FilterMap",
    "TagMap",
]
