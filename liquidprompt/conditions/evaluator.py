"""
Condition evaluator.

Walks a condition tree and computes its value against a render context,
using the engine's coercion and comparison rules.
"""

from __future__ import annotations

from typing import Any, cast

from .model import (
    BinaryCondition,
    ComparisonCondition,
    Condition,
    ConditionType,
    Operand,
    ValueCondition,
)
from ..values import compare_values, resolve_variable, to_boolean


class EvaluationError(Exception):
    """Unknown condition node."""
    pass


class ConditionEvaluator:
    """
    Evaluates conditions.

    Takes a condition tree and a render context, returns a boolean.
    """

    def __init__(self, context: Any):
        """
        Initializes the evaluator with a context.

        Args:
            context: Render scope that path operands resolve against
        """
        self.context = context

    def evaluate(self, condition: Condition) -> bool:
        """
        Computes the value of a condition.

        Raises:
            EvaluationError: On an unknown condition type
            ContextError: When a path operand cannot be traversed
        """
        condition_type = condition.get_type()

        if condition_type == ConditionType.VALUE:
            return self._evaluate_value(cast(ValueCondition, condition))
        elif condition_type == ConditionType.COMPARISON:
            return self._evaluate_comparison(cast(ComparisonCondition, condition))
        elif condition_type == ConditionType.AND:
            return self._evaluate_and(cast(BinaryCondition, condition))
        elif condition_type == ConditionType.OR:
            return self._evaluate_or(cast(BinaryCondition, condition))
        else:
            raise EvaluationError(f"Unknown condition type: {condition_type}")

    def resolve(self, operand: Operand) -> Any:
        if operand.is_path:
            return resolve_variable(self.context, operand.value)
        return operand.value

    def _evaluate_value(self, condition: ValueCondition) -> bool:
        return to_boolean(self.resolve(condition.operand))

    def _evaluate_comparison(self, condition: ComparisonCondition) -> bool:
        left = self.resolve(condition.left)
        right = self.resolve(condition.right)
        return compare_values(left, condition.operator, right)

    def _evaluate_and(self, condition: BinaryCondition) -> bool:
        """Short-circuit AND."""
        if not self.evaluate(condition.left):
            return False
        return self.evaluate(condition.right)

    def _evaluate_or(self, condition: BinaryCondition) -> bool:
        """Short-circuit OR."""
        if self.evaluate(condition.left):
            return True
        return self.evaluate(condition.right)


__all__ = ["ConditionEvaluator", "EvaluationError"]
