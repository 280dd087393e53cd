"""
AST nodes.

A closed set of immutable node classes representing a parsed template:
text, variable output and tag. Tag bodies are tuples so a parsed tree
can be shared between concurrent renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Literal:
    """Constant value written in the template (string, number, true/false/nil)."""
    value: Any


@dataclass(frozen=True)
class PathRef:
    """Reference to a context variable by dotted path."""
    path: str


# Filter argument: literal or path resolved at render time
Argument = Union[Literal, PathRef]


@dataclass(frozen=True)
class FilterCall:
    """Single filter application in a variable's filter chain."""
    name: str
    args: Tuple[Argument, ...] = ()


@dataclass(frozen=True)
class TagArg:
    """
    Free-form tag argument token.

    Attributes:
        kind: IDENTIFIER, STRING, NUMBER, OPERATOR or PUNCT
        value: Path string for identifiers, unquoted text for strings,
               int/float for numbers, operator/punctuation text otherwise
    """
    kind: str
    value: Any

    def is_word(self, word: str) -> bool:
        """True for a bare identifier equal to ``word``."""
        return self.kind == "IDENTIFIER" and self.value == word


@dataclass(frozen=True)
class TemplateNode:
    """Base class for all template AST nodes."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Plain text content.

    Static text that needs no processing and is emitted as is.
    """
    text: str


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """
    Output expression: ``{{ name | filter: arg }}``.

    ``literal`` is set when the expression head is a constant rather
    than a context path; ``name`` then keeps its source text.
    """
    name: str
    filters: Tuple[FilterCall, ...] = ()
    literal: Optional[Literal] = None
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class TagNode(TemplateNode):
    """
    Tag: ``{% name args %}body{% endname %}``.

    Block tags hold the nodes up to (not including) their end marker.
    Branch markers such as ``else`` appear in the owning block's body
    as bodiless TagNodes.
    """
    name: str
    args: Tuple[TagArg, ...] = ()
    body: Tuple[TemplateNode, ...] = ()
    markup: str = ""
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)


# Alias for a node sequence (AST)
TemplateAST = Tuple[TemplateNode, ...]


@dataclass(frozen=True)
class CompiledTemplate:
    """Parsed template cached for repeated rendering."""
    ast: TemplateAST
    source: str = ""


@dataclass(frozen=True)
class Branch:
    """Section of a block body opened by the block tag or a branch marker."""
    name: str
    args: Tuple[TagArg, ...]
    body: TemplateAST


def split_branches(
    name: str,
    args: Iterable[TagArg],
    body: Iterable[TemplateNode],
    markers: Iterable[str],
) -> List[Branch]:
    """
    Splits a block body at its branch markers.

    The first branch belongs to the opening tag itself; each marker
    (``elsif``, ``else``, ``when``...) starts a new branch carrying the
    marker's own arguments.

    Args:
        name: Opening tag name
        args: Opening tag arguments
        body: Block body as produced by the parser
        markers: Tag names that act as branch separators

    Returns:
        Branches in document order
    """
    marker_names = set(markers)
    branches: List[Branch] = []
    current_name, current_args = name, tuple(args)
    current_body: List[TemplateNode] = []

    for node in body:
        if isinstance(node, TagNode) and node.name in marker_names:
            branches.append(Branch(current_name, current_args, tuple(current_body)))
            current_name, current_args, current_body = node.name, node.args, []
        else:
            current_body.append(node)

    branches.append(Branch(current_name, current_args, tuple(current_body)))
    return branches


def walk(ast: Iterable[TemplateNode]) -> Iterator[TemplateNode]:
    """Depth-first iteration over all nodes."""
    for node in ast:
        yield node
        if isinstance(node, TagNode):
            yield from walk(node.body)


def _argument_to_dict(arg: Argument) -> Dict[str, Any]:
    if isinstance(arg, PathRef):
        return {"path": arg.path}
    return {"literal": arg.value}


def node_to_dict(node: TemplateNode) -> Dict[str, Any]:
    """
    JSON-ready representation of a node and its subtree.
    """
    if isinstance(node, TextNode):
        return {"type": "text", "text": node.text}
    if isinstance(node, VariableNode):
        data: Dict[str, Any] = {"type": "variable", "name": node.name}
        if node.literal is not None:
            data["literal"] = node.literal.value
        data["filters"] = [
            {"name": f.name, "args": [_argument_to_dict(a) for a in f.args]}
            for f in node.filters
        ]
        data["line"], data["column"] = node.line, node.column
        return data
    if isinstance(node, TagNode):
        return {
            "type": "tag",
            "name": node.name,
            "args": [{"kind": a.kind, "value": a.value} for a in node.args],
            "markup": node.markup,
            "body": [node_to_dict(child) for child in node.body],
            "line": node.line,
            "column": node.column,
        }
    raise TypeError(f"Unknown node type: {type(node).__name__}")


__all__ = [
    "Literal",
    "PathRef",
    "Argument",
    "FilterCall",
    "TagArg",
    "TemplateNode",
    "TextNode",
    "VariableNode",
    "TagNode",
    "TemplateAST",
    "CompiledTemplate",
    "Branch",
    "split_branches",
    "walk",
    "node_to_dict",
]
