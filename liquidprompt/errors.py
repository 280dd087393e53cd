"""
Error taxonomy for the template engine.

All expected errors that should be displayed to the user as clean
messages (without stack traces) inherit from LiquidPromptError.

Template errors carry an optional ``cause``. Wrapping layers raise
with ``from`` as well, so both the attribute and ``__cause__`` point
at the original failure.
"""

from __future__ import annotations

from typing import Optional


class LiquidPromptError(Exception):
    """
    Base class for all user-facing errors in liquidprompt.

    These errors indicate problems that the user can fix:
    malformed templates, bad context data, invalid configuration.
    """
    pass


class ConfigError(LiquidPromptError):
    """Invalid or unsupported configuration file."""
    pass


class TemplateError(LiquidPromptError):
    """
    Base class for parse and render failures.

    Attributes:
        message: Human-readable description
        cause: The wrapped lower-level error, if any
    """

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def root_cause(self) -> BaseException:
        """Follows the cause chain down to the innermost error."""
        err: BaseException = self
        seen = set()
        while id(err) not in seen:
            seen.add(id(err))
            nxt = getattr(err, "cause", None) or err.__cause__
            if nxt is None:
                break
            err = nxt
        return err


class ParseError(TemplateError):
    """Malformed template syntax. Always raised before rendering starts."""

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        *,
        cause: Optional[BaseException] = None,
    ):
        self.position = position
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} at {line}:{column}"
        super().__init__(message, cause=cause)


class ContextError(TemplateError):
    """Invalid traversal of a variable path."""

    def __init__(self, message: str, path: str, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.path = path


class FilterError(TemplateError):
    """A named filter failed or does not exist."""

    def __init__(self, message: str, filter_name: str, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.filter_name = filter_name


class TagError(TemplateError):
    """A named tag handler failed, including dispatch to an unknown tag."""

    def __init__(self, message: str, tag_name: str, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.tag_name = tag_name


class RenderError(TemplateError):
    """Rendering failure propagated through a tag's render callback."""

    def __init__(
        self,
        message: str,
        tag_name: Optional[str] = None,
        *,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.tag_name = tag_name


__all__ = [
    "LiquidPromptError",
    "ConfigError",
    "TemplateError",
    "ParseError",
    "ContextError",
    "FilterError",
    "TagError",
    "RenderError",
]
