"""
Recursive-descent parser for condition expressions.

Works on the argument tokens the template parser collected for a tag,
so conditions share the template lexer's notion of strings, numbers,
paths and operators.

Grammar:
expression → or_expr
or_expr    → and_expr ("or" and_expr)*
and_expr   → comparison ("and" comparison)*
comparison → operand ((OPERATOR | "contains") operand)?
operand    → path | STRING | NUMBER | true | false | nil | null
"""

from __future__ import annotations

from typing import Sequence

from .model import (
    BinaryCondition,
    ComparisonCondition,
    Condition,
    ConditionType,
    Operand,
    ValueCondition,
)
from ..template.nodes import TagArg

_KEYWORDS = {"true": True, "false": False, "nil": None, "null": None}


class ConditionSyntaxError(Exception):
    """Malformed condition expression."""

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"Condition error at argument {position}: {message}")


class ConditionParser:
    """
    Condition parser.

    Turns a tag's argument list into a Condition tree honoring
    operator precedence (``and`` binds tighter than ``or``).
    """

    def __init__(self):
        self._args: Sequence[TagArg] = ()
        self._position = 0

    def parse(self, args: Sequence[TagArg]) -> Condition:
        """
        Parses tag arguments into a condition.

        Args:
            args: Argument tokens of an ``if``/``elsif``/``unless`` tag

        Returns:
            Root condition node

        Raises:
            ConditionSyntaxError: On empty or malformed expressions
        """
        self._args = tuple(args)
        self._position = 0

        if not self._args:
            raise ConditionSyntaxError("Empty condition", 0)

        result = self._parse_or_expression()

        if not self._is_at_end():
            current = self._args[self._position]
            raise ConditionSyntaxError(f"Unexpected token '{current.value}'", self._position)

        return result

    def _parse_or_expression(self) -> Condition:
        left = self._parse_and_expression()

        while self._match_word("or"):
            right = self._parse_and_expression()
            left = BinaryCondition(left=left, right=right, operator=ConditionType.OR)

        return left

    def _parse_and_expression(self) -> Condition:
        left = self._parse_comparison()

        while self._match_word("and"):
            right = self._parse_comparison()
            left = BinaryCondition(left=left, right=right, operator=ConditionType.AND)

        return left

    def _parse_comparison(self) -> Condition:
        left = self._parse_operand()

        if self._is_at_end():
            return ValueCondition(left)

        current = self._args[self._position]
        if current.kind == "OPERATOR":
            self._position += 1
            return ComparisonCondition(left, current.value, self._parse_operand())
        if current.is_word("contains"):
            self._position += 1
            return ComparisonCondition(left, "contains", self._parse_operand())

        return ValueCondition(left)

    def _parse_operand(self) -> Operand:
        if self._is_at_end():
            raise ConditionSyntaxError("Expected operand at end of condition", self._position)

        arg = self._args[self._position]
        self._position += 1

        if arg.kind in ("STRING", "NUMBER"):
            return Operand(arg.value)
        if arg.kind == "IDENTIFIER":
            if arg.value in _KEYWORDS:
                return Operand(_KEYWORDS[arg.value])
            if arg.value in ("and", "or", "contains"):
                raise ConditionSyntaxError(f"Expected operand, got '{arg.value}'", self._position - 1)
            return Operand(arg.value, is_path=True)

        raise ConditionSyntaxError(f"Expected operand, got '{arg.value}'", self._position - 1)

    def _match_word(self, word: str) -> bool:
        if not self._is_at_end() and self._args[self._position].is_word(word):
            self._position += 1
            return True
        return False

    def _is_at_end(self) -> bool:
        return self._position >= len(self._args)


def parse_condition(args: Sequence[TagArg]) -> Condition:
    """Convenience function for parsing tag arguments into a condition."""
    return ConditionParser().parse(args)


__all__ = ["ConditionParser", "ConditionSyntaxError", "parse_condition"]
