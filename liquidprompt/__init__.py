"""
liquidprompt: a Liquid template engine for building structured prompts.
"""

from __future__ import annotations

from .config import EngineConfig, load_config
from .errors import (
    ConfigError,
    ContextError,
    FilterError,
    LiquidPromptError,
    ParseError,
    RenderError,
    TagError,
    TemplateError,
)
from .template import (
    CompiledTemplate,
    TagNode,
    TemplateAST,
    TemplateEngine,
    TemplatePlugin,
    TextNode,
    VariableNode,
    create_engine,
)
from .values import compare_values, resolve_variable, to_boolean, to_number, to_string
from .version import tool_version

__all__ = [
    "TemplateEngine",
    "create_engine",
    "EngineConfig",
    "load_config",
    "CompiledTemplate",
    "TemplateAST",
    "TemplatePlugin",
    "TextNode",
    "VariableNode",
    "TagNode",
    "LiquidPromptError",
    "ConfigError",
    "TemplateError",
    "ParseError",
    "ContextError",
    "FilterError",
    "TagError",
    "RenderError",
    "resolve_variable",
    "compare_values",
    "to_boolean",
    "to_number",
    "to_string",
    "tool_version",
]
