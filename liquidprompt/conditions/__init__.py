"""
Condition expressions for ``if``, ``elsif`` and ``unless`` tags.
"""

from __future__ import annotations

from .evaluator import ConditionEvaluator, EvaluationError
from .model import (
    BinaryCondition,
    ComparisonCondition,
    Condition,
    ConditionType,
    Operand,
    ValueCondition,
)
from .parser import ConditionParser, ConditionSyntaxError, parse_condition

__all__ = [
    "Condition",
    "ConditionType",
    "Operand",
    "ValueCondition",
    "ComparisonCondition",
    "BinaryCondition",
    "ConditionParser",
    "ConditionSyntaxError",
    "parse_condition",
    "ConditionEvaluator",
    "EvaluationError",
]
