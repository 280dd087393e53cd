"""
Core handlers exposed to plugins.

Gives tag implementations typed access to engine functionality
without handing them the whole engine.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from .nodes import FilterCall


@runtime_checkable
class TemplateHandlers(Protocol):
    """
    Engine functions callable from plugins.
    """

    def apply_filters(self, value: Any, filters: Sequence[FilterCall], context: Any) -> Any:
        """
        Runs a filter chain left to right.

        Args:
            value: Input of the first filter
            filters: Filter calls; path arguments resolve against ``context``
            context: Current render scope

        Returns:
            Output of the last filter
        """
        ...
