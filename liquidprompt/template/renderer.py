"""
AST renderer.

Walks the tree depth-first: text is emitted as is, variables are
resolved, filtered and converted to strings, tags are dispatched to
their registered handlers with a render callback for their bodies.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, List, Sequence

from .nodes import FilterCall, Literal, PathRef, TagNode, TemplateNode, TextNode, VariableNode
from .registry import TemplateRegistry
from ..errors import FilterError, RenderError, TagError, TemplateError
from ..values import resolve_variable, to_string

logger = logging.getLogger(__name__)


class Renderer:
    """
    Evaluates a TemplateAST against a context.

    Holds no per-render state, so one instance can serve concurrent
    renders. Also serves as the core handlers object for plugins.
    """

    def __init__(self, registry: TemplateRegistry, *, strict_filters: bool = True):
        """
        Initializes the renderer.

        Args:
            registry: Filters and tags to dispatch to
            strict_filters: Unknown filters raise FilterError when True,
                            are skipped with a warning when False
        """
        self.registry = registry
        self.strict_filters = strict_filters

    def render(self, ast: Sequence[TemplateNode], context: Any) -> str:
        """
        Renders an AST.

        The caller's context is never mutated: rendering works on a
        shallow copy that ``assign``/``capture`` write into.

        Args:
            ast: Nodes to render
            context: Variables for the render

        Returns:
            Rendered text

        Raises:
            TemplateError: ContextError, FilterError, TagError or RenderError
        """
        return self._render_nodes(ast, self._make_scope(context))

    @staticmethod
    def _make_scope(context: Any) -> Any:
        if context is None:
            return {}
        if isinstance(context, Mapping):
            return dict(context)
        return context

    def _render_nodes(self, nodes: Sequence[TemplateNode], scope: Any) -> str:
        parts: List[str] = []
        for node in nodes:
            parts.append(self._render_node(node, scope))
        return "".join(parts)

    def _render_node(self, node: TemplateNode, scope: Any) -> str:
        if isinstance(node, TextNode):
            return node.text
        elif isinstance(node, VariableNode):
            return self._render_variable(node, scope)
        elif isinstance(node, TagNode):
            return self._render_tag(node, scope)
        else:
            raise RenderError(f"Unknown node type: {type(node).__name__}")

    # ---- Variables ---------------------------------------------------------

    def _render_variable(self, node: VariableNode, scope: Any) -> str:
        if node.literal is not None:
            value = node.literal.value
        else:
            value = resolve_variable(scope, node.name)

        if node.filters:
            value = self.apply_filters(value, node.filters, scope)

        return to_string(value)

    def _argument_value(self, arg: Any, scope: Any) -> Any:
        if isinstance(arg, PathRef):
            return resolve_variable(scope, arg.path)
        if isinstance(arg, Literal):
            return arg.value
        return arg

    def apply_filters(self, value: Any, filters: Sequence[FilterCall], context: Any) -> Any:
        """
        Runs a filter chain left to right.

        Raises:
            FilterError: For unknown filters (in strict mode) and for any
                         failure inside a filter
        """
        for call in filters:
            fn = self.registry.filters.get(call.name)
            if fn is None:
                if self.strict_filters:
                    raise FilterError(f"Unknown filter '{call.name}'", call.name)
                logger.warning(f"Unknown filter '{call.name}' skipped")
                continue

            args = [self._argument_value(arg, context) for arg in call.args]
            try:
                value = fn(value, *args)
            except FilterError:
                raise
            except Exception as e:
                raise FilterError(f"Filter '{call.name}' failed: {e}", call.name, cause=e) from e

        return value

    # ---- Tags --------------------------------------------------------------

    def _render_tag(self, node: TagNode, scope: Any) -> str:
        spec = self.registry.tags.get(node.name)
        if spec is None:
            raise TagError(f"Unknown tag '{node.name}'", node.name)

        def render_body(nodes: Sequence[TemplateNode], context: Any) -> str:
            try:
                return self._render_nodes(nodes, context)
            except TemplateError as e:
                raise RenderError(
                    f"Error inside '{node.name}' at {node.line}:{node.column}: {e.message}",
                    node.name,
                    cause=e,
                ) from e

        try:
            result = spec.handler(node.args, node.body, scope, render_body)
        except TemplateError:
            raise
        except Exception as e:
            raise TagError(f"Tag '{node.name}' failed: {e}", node.name, cause=e) from e

        return result if isinstance(result, str) else to_string(result)


__all__ = ["Renderer"]
