"""
Per-engine registry of filters, tags and plugins.

Each TemplateEngine owns exactly one TemplateRegistry; nothing is
registered process-wide.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .base import FilterFunction, FilterMap, TagHandler, TagMap, TagSpec, TemplatePlugin
from .handlers import TemplateHandlers

logger = logging.getLogger(__name__)


class FilterRegistry:
    """Name -> filter callable. Names are case-sensitive; last write wins."""

    def __init__(self):
        self._filters: FilterMap = {}

    def register(self, name: str, fn: FilterFunction) -> None:
        if not name:
            raise ValueError("Filter name must not be empty")
        if not callable(fn):
            raise ValueError(f"Filter '{name}' is not callable")
        if name in self._filters:
            logger.warning(f"Filter '{name}' overwrites existing filter")
        self._filters[name] = fn
        logger.debug(f"Registered filter: {name}")

    def get(self, name: str) -> Optional[FilterFunction]:
        return self._filters.get(name)

    def names(self) -> List[str]:
        return sorted(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def __len__(self) -> int:
        return len(self._filters)


class TagRegistry:
    """
    Name -> TagSpec. Also answers block/branch questions for the parser.

    Names are stored lower-cased, matching how the parser reads tag names.
    """

    def __init__(self):
        self._tags: TagMap = {}

    def register(self, spec: TagSpec) -> None:
        if not spec.name:
            raise ValueError("Tag name must not be empty")
        spec = replace(spec, name=spec.name.lower(), branches=tuple(b.lower() for b in spec.branches))
        if spec.name in self._tags:
            logger.warning(f"Tag '{spec.name}' overwrites existing tag")
        self._tags[spec.name] = spec
        logger.debug(
            f"Registered tag: {spec.name} "
            f"(block={spec.block}, branches={list(spec.branches)})"
        )

    def get(self, name: str) -> Optional[TagSpec]:
        return self._tags.get(name.lower())

    def is_block(self, name: str) -> bool:
        spec = self.get(name)
        return spec is not None and spec.block

    def names(self) -> List[str]:
        return sorted(self._tags)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._tags

    def __len__(self) -> int:
        return len(self._tags)


class TemplateRegistry:
    """
    Registry of all engine extensions.

    Holds the filter and tag registries and the list of plugins that
    contributed to them.
    """

    def __init__(self):
        self.filters = FilterRegistry()
        self.tags = TagRegistry()
        self.plugins: List[TemplatePlugin] = []
        self._handlers: Optional[TemplateHandlers] = None

        logger.debug("TemplateRegistry initialized")

    def set_handlers(self, handlers: TemplateHandlers) -> None:
        """
        Sets core handlers for registered and future plugins.

        Args:
            handlers: Engine functions exposed to plugins
        """
        self._handlers = handlers
        for plugin in self.plugins:
            plugin.set_handlers(handlers)
            logger.debug(f"Handlers set for plugin '{plugin.name}'")

    def register_filter(self, name: str, fn: FilterFunction) -> None:
        self.filters.register(name, fn)

    def register_tag(
        self,
        name: str,
        handler: TagHandler,
        *,
        block: bool = True,
        branches: Iterable[str] = (),
    ) -> None:
        self.tags.register(TagSpec(name=name, handler=handler, block=block, branches=tuple(branches)))

    def register_plugin(self, plugin: TemplatePlugin) -> None:
        """
        Registers a plugin and all of its filters and tags.

        Args:
            plugin: Plugin to register

        Raises:
            ValueError: If a plugin with the same name is already registered
        """
        if any(p.name == plugin.name for p in self.plugins):
            raise ValueError(f"Plugin '{plugin.name}' already registered")

        logger.debug(f"Registering plugin: {plugin.name}")
        self.plugins.append(plugin)

        if self._handlers is not None:
            plugin.set_handlers(self._handlers)

        for name, fn in plugin.register_filters().items():
            self.filters.register(name, fn)
        for spec in plugin.register_tags():
            self.tags.register(spec)

        try:
            plugin.initialize()
        except Exception as e:
            logger.error(f"Failed to initialize plugin '{plugin.name}': {e}")
            raise

        logger.debug(f"Plugin '{plugin.name}' registered successfully")

    def get_plugin_by_name(self, name: str) -> Optional[TemplatePlugin]:
        return next((p for p in self.plugins if p.name == name), None)

    def get_stats(self) -> Dict[str, int]:
        """
        Returns counts of registered components.

        Returns:
            Dictionary with statistics
        """
        return {
            "plugins": len(self.plugins),
            "filters": len(self.filters),
            "tags": len(self.tags),
        }


__all__ = ["FilterRegistry", "TagRegistry", "TemplateRegistry"]
