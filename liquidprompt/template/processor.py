"""
Template engine façade.

Orchestrates lexing, parsing, caching and rendering, and owns the
per-engine registry of filters, tags and plugins.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any, Iterable, List, Optional

from .base import FilterFunction, TagHandler, TemplatePlugin
from .nodes import CompiledTemplate, TemplateAST
from .parser import TemplateParser
from .registry import TemplateRegistry
from .renderer import Renderer
from ..config import EngineConfig
from ..stats import TokenService, default_tokenizer

logger = logging.getLogger(__name__)


class TemplateEngine:
    """
    Liquid template engine.

    Parsed templates are cached by source text in a bounded LRU cache.
    Registration is expected to happen before rendering starts; it is
    not synchronized against concurrent renders.
    """

    def __init__(
        self,
        *,
        cache_size: int = 256,
        strict_filters: bool = True,
        token_service: Optional[TokenService] = None,
    ):
        """
        Initializes the engine with an empty registry.

        Args:
            cache_size: Maximum number of compiled templates kept (0 disables)
            strict_filters: Unknown filters raise instead of passing values through
            token_service: Tokenizer for count_tokens (tiktoken cl100k_base by default)
        """
        self.registry = TemplateRegistry()
        self.renderer = Renderer(self.registry, strict_filters=strict_filters)
        self.registry.set_handlers(self.renderer)

        self.token_service = token_service or default_tokenizer()

        self.cache_size = cache_size
        self._template_cache: "OrderedDict[str, CompiledTemplate]" = OrderedDict()
        self._cache_lock = threading.Lock()

    # ---- Parsing -----------------------------------------------------------

    def parse(self, template: str) -> TemplateAST:
        """
        Parses template text into an AST.

        Raises:
            ParseError: On malformed syntax
        """
        if not isinstance(template, str):
            raise TypeError(f"Template must be a string, got {type(template).__name__}")
        return TemplateParser(self.registry).parse(template)

    def compile(self, template: str) -> CompiledTemplate:
        """
        Parses a template once and caches the result by source text.

        Raises:
            ParseError: On malformed syntax
        """
        with self._cache_lock:
            cached = self._template_cache.get(template)
            if cached is not None:
                self._template_cache.move_to_end(template)
                return cached

        compiled = CompiledTemplate(ast=self.parse(template), source=template)

        if self.cache_size > 0:
            with self._cache_lock:
                self._template_cache[template] = compiled
                while len(self._template_cache) > self.cache_size:
                    self._template_cache.popitem(last=False)

        return compiled

    def clear_cache(self) -> None:
        """Drops all compiled templates."""
        with self._cache_lock:
            self._template_cache.clear()
        logger.debug("Template cache cleared")

    # ---- Rendering ---------------------------------------------------------

    def render(self, template: str, context: Any = None) -> str:
        """
        Parses (through the cache) and renders a template.

        Args:
            template: Template source
            context: Variables, normally a mapping

        Returns:
            Rendered text

        Raises:
            ParseError: On malformed syntax
            TemplateError: On render failures
        """
        return self.render_compiled(self.compile(template), context)

    def render_compiled(self, compiled: CompiledTemplate, context: Any = None) -> str:
        """
        Renders a previously compiled template.

        Raises:
            TemplateError: On render failures
        """
        return self.renderer.render(compiled.ast, context)

    # ---- Registration ------------------------------------------------------

    def register_filter(self, name: str, fn: FilterFunction) -> None:
        self.registry.register_filter(name, fn)

    def register_tag(
        self,
        name: str,
        handler: TagHandler,
        *,
        block: bool = True,
        branches: Iterable[str] = (),
    ) -> None:
        """
        Registers a tag handler.

        Args:
            name: Tag name
            handler: ``handler(args, body, context, render) -> str``
            block: Whether the tag has a body closed by ``end<name>``
            branches: Marker tags accepted directly inside the body
        """
        self.registry.register_tag(name, handler, block=block, branches=branches)
        # Block structure changes how cached sources parse
        self.clear_cache()

    def register_plugin(self, plugin: TemplatePlugin) -> None:
        self.registry.register_plugin(plugin)
        self.clear_cache()

    def filter_names(self) -> List[str]:
        return self.registry.filters.names()

    def tag_names(self) -> List[str]:
        return self.registry.tags.names()

    # ---- Tokens ------------------------------------------------------------

    def count_tokens(self, text: str) -> int:
        """Counts tokens in text with the engine's tokenizer."""
        return self.token_service.count_text_cached(text)


def create_engine(config: Optional[EngineConfig] = None) -> TemplateEngine:
    """
    Builds an engine with the configured built-in plugins.

    Args:
        config: Engine configuration (defaults when None)

    Returns:
        Ready-to-use engine

    Raises:
        ValueError: On unknown plugin or tokenizer library names
    """
    from ..plugins import create_builtin_plugin

    cfg = config or EngineConfig()
    token_service = TokenService(lib=cfg.tokenizer_lib, encoder=cfg.tokenizer_encoder)

    engine = TemplateEngine(
        cache_size=cfg.cache_size,
        strict_filters=cfg.strict_filters,
        token_service=token_service,
    )
    for name in cfg.plugins:
        engine.register_plugin(create_builtin_plugin(name, token_service))

    logger.debug(f"Engine created with plugins: {', '.join(cfg.plugins)}")
    return engine


__all__ = ["TemplateEngine", "create_engine"]
