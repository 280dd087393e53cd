"""
Syntactic analyzer for templates.

Builds the AST from the lexer's token stream. Block structure is driven
by the tag registry: a tag registered as a block consumes nodes up to
its ``end<name>`` marker; tags unknown at parse time become inline nodes.

Variable expression grammar:
    output     → head segment* filter*
    head       → path | STRING | NUMBER | true | false | nil | null
    segment    → "." (IDENTIFIER | NUMBER) | "[" (NUMBER | STRING) "]"
    filter     → "|" IDENTIFIER (":" argument ("," argument)*)?
    argument   → path | STRING | NUMBER | true | false | nil | null
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Set, Tuple

from .base import ParsingContext, TagSpec
from .lexer import TemplateLexer
from .nodes import (
    Argument,
    FilterCall,
    Literal,
    PathRef,
    TagArg,
    TagNode,
    TemplateAST,
    TemplateNode,
    TextNode,
    VariableNode,
)
from .registry import TemplateRegistry
from .tokens import Token, TokenType
from ..errors import ParseError

logger = logging.getLogger(__name__)

# Identifiers that read as constants rather than context paths
KEYWORD_LITERALS = {"true": True, "false": False, "nil": None, "null": None}

_START_TYPES = (TokenType.OUTPUT_START, TokenType.TAG_START)
_END_TYPES = (TokenType.OUTPUT_END, TokenType.TAG_END)


def _error_at(message: str, token: Token) -> ParseError:
    return ParseError(message, token.position, token.line, token.column)


def _number_value(text: str):
    return float(text) if "." in text else int(text)


class TemplateParser:
    """
    Recursive-descent parser producing a TemplateAST.

    Uses the registry only to learn which tags are blocks and which
    branch markers they accept.
    """

    def __init__(self, registry: Optional[TemplateRegistry] = None):
        """
        Initializes the parser.

        Args:
            registry: Registry to read tag specs from (an empty one by default)
        """
        self.registry = registry or TemplateRegistry()
        self.lexer = TemplateLexer()
        self.source = ""

    def parse(self, text: str) -> TemplateAST:
        """
        Parses template text into an AST.

        Args:
            text: Template source

        Returns:
            Tuple of top-level nodes

        Raises:
            ParseError: On any syntax error
        """
        self.source = text
        tokens = self._apply_whitespace_control(self.lexer.tokenize(text))
        context = ParsingContext(tokens)

        ast = self._parse_nodes(context, None, None)

        logger.debug(f"Parsed AST with {len(ast)} top-level nodes")
        return tuple(ast)

    # ---- Whitespace control ------------------------------------------------

    @staticmethod
    def _apply_whitespace_control(tokens: List[Token]) -> List[Token]:
        """
        Strips whitespace from text adjacent to ``-`` delimiters.

        ``{{-``/``{%-`` strip the end of the preceding text,
        ``-}}``/``-%}`` strip the start of the following text.
        """
        result: List[Token] = []
        for i, token in enumerate(tokens):
            if token.type != TokenType.TEXT:
                result.append(token)
                continue

            value = token.value
            prev_token = tokens[i - 1] if i > 0 else None
            next_token = tokens[i + 1] if i + 1 < len(tokens) else None

            if prev_token is not None and prev_token.type in _END_TYPES and prev_token.trim:
                value = value.lstrip()
            if next_token is not None and next_token.type in _START_TYPES and next_token.trim:
                value = value.rstrip()

            if value:
                result.append(dataclasses.replace(token, value=value))
        return result

    # ---- Node sequences ----------------------------------------------------

    def _branch_names(self) -> Set[str]:
        names: Set[str] = set()
        for tag_name in self.registry.tags.names():
            spec = self.registry.tags.get(tag_name)
            if spec is not None:
                names.update(spec.branches)
        return names

    def _parse_nodes(
        self,
        context: ParsingContext,
        spec: Optional[TagSpec],
        open_token: Optional[Token],
    ) -> List[TemplateNode]:
        """
        Parses nodes until EOF or, inside a block, the block's end tag.

        Args:
            context: Parsing context
            spec: Spec of the enclosing block tag, None at top level
            open_token: TAG_START token of the enclosing block

        Returns:
            Parsed nodes; the end tag itself is consumed, not returned
        """
        nodes: List[TemplateNode] = []

        while not context.is_at_end():
            token = context.current()

            if token.type == TokenType.TEXT:
                context.advance()
                nodes.append(TextNode(token.value))
                continue

            if token.type == TokenType.OUTPUT_START:
                nodes.append(self._parse_output(context))
                continue

            if token.type == TokenType.TAG_START:
                name, args, markup = self._parse_tag_header(context)

                if spec is not None and name == spec.end_name:
                    return nodes

                if spec is not None and name in spec.branches:
                    nodes.append(TagNode(name, args, (), markup, token.line, token.column))
                    continue

                self._check_stray(name, token)

                tag_spec = self.registry.tags.get(name)
                if tag_spec is not None and tag_spec.block:
                    body = self._parse_nodes(context, tag_spec, token)
                    nodes.append(TagNode(name, args, tuple(body), markup, token.line, token.column))
                else:
                    nodes.append(TagNode(name, args, (), markup, token.line, token.column))
                continue

            raise _error_at(f"Unexpected token {token.value!r}", token)

        if spec is not None and open_token is not None:
            raise _error_at(
                f"Tag '{spec.name}' was never closed: expected '{{% {spec.end_name} %}}'",
                open_token,
            )
        return nodes

    def _check_stray(self, name: str, token: Token) -> None:
        """Rejects end tags and branch markers found outside their block."""
        if name.startswith("end") and self.registry.tags.is_block(name[3:]):
            raise _error_at(f"Unexpected '{{% {name} %}}' without matching '{{% {name[3:]} %}}'", token)
        if name in self._branch_names() and name not in self.registry.tags:
            raise _error_at(f"Unexpected '{{% {name} %}}' outside of its block", token)

    # ---- Output ------------------------------------------------------------

    def _parse_output(self, context: ParsingContext) -> VariableNode:
        start = context.consume(TokenType.OUTPUT_START)

        if context.match(TokenType.OUTPUT_END):
            raise _error_at("Empty variable expression", start)

        head = context.current()
        literal: Optional[Literal] = None

        if head.type == TokenType.STRING:
            context.advance()
            literal = Literal(head.value)
            name = self.source[head.position:context.current().position].rstrip()
        elif head.type == TokenType.NUMBER:
            context.advance()
            literal = Literal(_number_value(head.value))
            name = head.value
        elif self._at_keyword_literal(context):
            context.advance()
            literal = Literal(KEYWORD_LITERALS[head.value])
            name = head.value
        elif head.type == TokenType.IDENTIFIER:
            name = self._parse_path(context)
        else:
            raise _error_at(f"Malformed variable expression near {head.value!r}", head)

        filters = self._parse_filters(context)

        end = context.current()
        if end.type != TokenType.OUTPUT_END:
            raise _error_at(f"Malformed variable expression near {end.value!r}", end)
        context.advance()

        return VariableNode(name, tuple(filters), literal, start.line, start.column)

    # ---- Paths -------------------------------------------------------------

    @staticmethod
    def _at_keyword_literal(context: ParsingContext) -> bool:
        """True/false/nil/null not followed by a path segment."""
        token = context.current()
        return (
            token.type == TokenType.IDENTIFIER
            and token.value in KEYWORD_LITERALS
            and context.peek().type not in (TokenType.DOT, TokenType.LBRACKET)
        )

    def _parse_path(self, context: ParsingContext) -> str:
        """
        Reads an identifier path and normalizes it to dotted form.

        ``items[0].name`` becomes ``items.0.name``.
        """
        segments = [context.consume(TokenType.IDENTIFIER, "identifier").value]

        while True:
            if context.match(TokenType.DOT):
                dot = context.advance()
                segment = context.current()
                if segment.type == TokenType.IDENTIFIER:
                    segments.append(context.advance().value)
                elif segment.type == TokenType.NUMBER and not segment.value.startswith("-"):
                    # "a.0.1" lexes as NUMBER "0.1"
                    segments.extend(context.advance().value.split("."))
                else:
                    raise _error_at("Expected property name after '.'", dot)
            elif context.match(TokenType.LBRACKET):
                bracket = context.advance()
                segment = context.current()
                if segment.type == TokenType.NUMBER and "." not in segment.value:
                    segments.append(context.advance().value)
                elif segment.type == TokenType.STRING:
                    segments.append(context.advance().value)
                else:
                    raise _error_at("Expected index or key inside '[ ]'", bracket)
                context.consume(TokenType.RBRACKET, "']'")
            else:
                break

        return ".".join(segments)

    # ---- Filters -----------------------------------------------------------

    def _parse_filters(self, context: ParsingContext) -> List[FilterCall]:
        filters: List[FilterCall] = []

        while context.match(TokenType.PIPE):
            pipe = context.advance()
            if not context.match(TokenType.IDENTIFIER):
                raise _error_at("Empty filter name after '|'", pipe)
            name = context.advance().value

            args: List[Argument] = []
            if context.match(TokenType.COLON):
                context.advance()
                args.append(self._parse_argument(context))
                while context.match(TokenType.COMMA):
                    context.advance()
                    args.append(self._parse_argument(context))

            filters.append(FilterCall(name, tuple(args)))

        return filters

    def _parse_argument(self, context: ParsingContext) -> Argument:
        token = context.current()

        if token.type == TokenType.STRING:
            context.advance()
            return Literal(token.value)
        if token.type == TokenType.NUMBER:
            context.advance()
            return Literal(_number_value(token.value))
        if self._at_keyword_literal(context):
            context.advance()
            return Literal(KEYWORD_LITERALS[token.value])
        if token.type == TokenType.IDENTIFIER:
            return PathRef(self._parse_path(context))

        raise _error_at(f"Expected filter argument, got {token.value!r}", token)

    # ---- Tags --------------------------------------------------------------

    def _parse_tag_header(self, context: ParsingContext) -> Tuple[str, Tuple[TagArg, ...], str]:
        """
        Parses ``{% name args %}``.

        Returns:
            (lower-cased name, argument tokens, raw markup after the name)
        """
        start = context.consume(TokenType.TAG_START)

        name_token = context.current()
        if name_token.type == TokenType.TAG_END:
            raise _error_at("Empty tag name", start)
        if name_token.type != TokenType.IDENTIFIER:
            raise _error_at(f"Expected tag name, got {name_token.value!r}", name_token)
        context.advance()
        name = name_token.value.lower()

        args: List[TagArg] = []
        while not context.match(TokenType.TAG_END, TokenType.EOF):
            args.append(self._parse_tag_arg(context))

        end = context.consume(TokenType.TAG_END, "'%}'")
        markup = self.source[name_token.position + len(name_token.value):end.position].strip()

        return name, tuple(args), markup

    def _parse_tag_arg(self, context: ParsingContext) -> TagArg:
        token = context.current()

        if token.type == TokenType.IDENTIFIER:
            return TagArg("IDENTIFIER", self._parse_path(context))
        context.advance()
        if token.type == TokenType.STRING:
            return TagArg("STRING", token.value)
        if token.type == TokenType.NUMBER:
            return TagArg("NUMBER", _number_value(token.value))
        if token.type == TokenType.OPERATOR:
            return TagArg("OPERATOR", token.value)
        return TagArg("PUNCT", token.value)


def parse_template(text: str, registry: Optional[TemplateRegistry] = None) -> TemplateAST:
    """Convenience function for parsing a template."""
    return TemplateParser(registry).parse(text)


__all__ = ["TemplateParser", "parse_template", "KEYWORD_LITERALS"]
