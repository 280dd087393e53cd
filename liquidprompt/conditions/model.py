"""
Data models for condition expressions.

Conditions appear in ``if``, ``elsif`` and ``unless`` tags:
``user.age >= 18 and user.verified``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ConditionType(Enum):
    """Condition node kinds."""
    VALUE = "value"
    COMPARISON = "comparison"
    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class Operand:
    """
    Single value in a condition.

    ``is_path`` operands are resolved against the render context,
    the rest are constants written in the template.
    """
    value: Any
    is_path: bool = False

    def __str__(self) -> str:
        if self.is_path:
            return str(self.value)
        if isinstance(self.value, str):
            return repr(self.value)
        if self.value is None:
            return "nil"
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


@dataclass(frozen=True)
class Condition(ABC):
    """Base class for all conditions."""

    @abstractmethod
    def get_type(self) -> ConditionType:
        """Returns the condition type."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class ValueCondition(Condition):
    """
    Lone operand: ``user.active``

    True when the operand's value is truthy.
    """
    operand: Operand

    def get_type(self) -> ConditionType:
        return ConditionType.VALUE

    def _to_string(self) -> str:
        return str(self.operand)


@dataclass(frozen=True)
class ComparisonCondition(Condition):
    """Comparison: ``left op right``, op being ==, !=, <>, <, >, <=, >= or contains."""
    left: Operand
    operator: str
    right: Operand

    def get_type(self) -> ConditionType:
        return ConditionType.COMPARISON

    def _to_string(self) -> str:
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class BinaryCondition(Condition):
    """
    Logical operation: ``left and right`` / ``left or right``
    """
    left: Condition
    right: Condition
    operator: ConditionType  # AND or OR

    def get_type(self) -> ConditionType:
        return self.operator

    def _to_string(self) -> str:
        op_str = "and" if self.operator == ConditionType.AND else "or"
        return f"{self.left} {op_str} {self.right}"


AnyCondition = Union[ValueCondition, ComparisonCondition, BinaryCondition]

__all__ = [
    "ConditionType",
    "Operand",
    "Condition",
    "ValueCondition",
    "ComparisonCondition",
    "BinaryCondition",
    "AnyCondition",
]
