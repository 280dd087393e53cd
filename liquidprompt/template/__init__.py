"""
Liquid template engine core: lexer, parser, registry, renderer.
"""

from __future__ import annotations

from .base import ParsingContext, TagSpec, TemplatePlugin
from .handlers import TemplateHandlers
from .lexer import TemplateLexer, tokenize
from .nodes import (
    Branch,
    CompiledTemplate,
    FilterCall,
    Literal,
    PathRef,
    TagArg,
    TagNode,
    TemplateAST,
    TemplateNode,
    TextNode,
    VariableNode,
    node_to_dict,
    split_branches,
    walk,
)
from .parser import TemplateParser, parse_template
from .processor import TemplateEngine, create_engine
from .registry import FilterRegistry, TagRegistry, TemplateRegistry
from .renderer import Renderer
from .tokens import Token, TokenType

__all__ = [
    "TemplateEngine",
    "create_engine",
    "TemplateParser",
    "parse_template",
    "TemplateLexer",
    "tokenize",
    "Renderer",
    "TemplateRegistry",
    "FilterRegistry",
    "TagRegistry",
    "TemplatePlugin",
    "TemplateHandlers",
    "TagSpec",
    "ParsingContext",
    "Token",
    "TokenType",
    "TemplateNode",
    "TextNode",
    "VariableNode",
    "TagNode",
    "TemplateAST",
    "CompiledTemplate",
    "FilterCall",
    "Literal",
    "PathRef",
    "TagArg",
    "Branch",
    "split_branches",
    "walk",
    "node_to_dict",
]
