"""
Built-in plugins.

Each plugin contributes one group of filters and tags to an engine.
``create_engine`` enables them by name from the configuration.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping

from .filters import STANDARD_FILTERS, build_conversation_filters, build_prompt_filters
from .stats import TokenService
from .tags import (
    CASE_BRANCHES,
    FOR_BRANCHES,
    IF_BRANCHES,
    capture_tag,
    case_tag,
    comment_tag,
    extends_tag,
    for_tag,
    if_tag,
    include_tag,
    make_assign_tag,
    unless_tag,
)
from .template.base import FilterFunction, TagSpec, TemplatePlugin


class StandardFiltersPlugin(TemplatePlugin):
    """
    Standard Liquid filters: string, list, math, date and ``default``.
    """

    @property
    def name(self) -> str:
        return "standard"

    def register_filters(self) -> Mapping[str, FilterFunction]:
        return dict(STANDARD_FILTERS)


class ControlFlowPlugin(TemplatePlugin):
    """
    Control-flow tags: if/unless, for, case, assign, capture, comment.
    """

    @property
    def name(self) -> str:
        return "control"

    def register_tags(self) -> List[TagSpec]:
        return [
            TagSpec("if", if_tag, branches=IF_BRANCHES),
            TagSpec("unless", unless_tag, branches=IF_BRANCHES),
            TagSpec("for", for_tag, branches=FOR_BRANCHES),
            TagSpec("case", case_tag, branches=CASE_BRANCHES),
            TagSpec("assign", make_assign_tag(lambda: self.handlers), block=False),
            TagSpec("capture", capture_tag),
            TagSpec("comment", comment_tag),
        ]


class PromptPlugin(TemplatePlugin):
    """
    Prompt-building filters: token counting and truncation, text
    clean-up, list formatting and conversation rendering.
    """

    def __init__(self, token_service: TokenService):
        """
        Args:
            token_service: Tokenizer backing tokenCount and friends
        """
        super().__init__()
        self.token_service = token_service

    @property
    def name(self) -> str:
        return "prompt"

    def register_filters(self) -> Mapping[str, FilterFunction]:
        filters: Dict[str, FilterFunction] = {}
        filters.update(build_prompt_filters(self.token_service))
        filters.update(build_conversation_filters(self.token_service))
        return filters


class CompositionPlugin(TemplatePlugin):
    """
    ``extends``/``include`` placeholders.
    """

    @property
    def name(self) -> str:
        return "composition"

    def register_tags(self) -> List[TagSpec]:
        return [
            TagSpec("extends", extends_tag),
            TagSpec("include", include_tag),
        ]


# Plugin name -> factory taking the engine's token service
BUILTIN_PLUGINS: Dict[str, Callable[[TokenService], TemplatePlugin]] = {
    "standard": lambda tokens: StandardFiltersPlugin(),
    "control": lambda tokens: ControlFlowPlugin(),
    "prompt": lambda tokens: PromptPlugin(tokens),
    "composition": lambda tokens: CompositionPlugin(),
}


def create_builtin_plugin(name: str, token_service: TokenService) -> TemplatePlugin:
    """
    Instantiates a built-in plugin by name.

    Raises:
        ValueError: If the name is unknown
    """
    factory = BUILTIN_PLUGINS.get(name)
    if factory is None:
        raise ValueError(
            f"Unknown plugin: '{name}'. Supported: {', '.join(BUILTIN_PLUGINS)}"
        )
    return factory(token_service)


__all__ = [
    "StandardFiltersPlugin",
    "ControlFlowPlugin",
    "PromptPlugin",
    "CompositionPlugin",
    "BUILTIN_PLUGINS",
    "create_builtin_plugin",
]
