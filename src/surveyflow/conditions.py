"""
Condition Evaluator

Pure functions deciding whether a single condition holds for the current
response map, and whether a question is visible given all its conditions.

FAIL-CLOSED RULES:
    - Source question unanswered (missing key or None) -> not met
    - Unknown operator -> not met
    - Source outside the allowed set (dangling/forward) -> not met
Nothing in this module raises for malformed survey data.
"""

from __future__ import annotations

import logging
import math
from typing import AbstractSet, Any, List, Mapping, Optional

from surveyflow.model import (
    Condition,
    ConditionAction,
    ConditionOperator,
    LogicOperator,
    Question,
)

logger = logging.getLogger(__name__)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def _stringify(value: Any) -> str:
    # booleans render the way the persisted JSON spells them
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if not value.strip():
            return 0.0
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def _strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion (``True != 1``, ``"1" != 1``)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    numeric = (int, float)
    if isinstance(left, numeric) and isinstance(right, numeric):
        return left == right
    return type(left) is type(right) and left == right


def _contains(response: Any, value: Any) -> bool:
    if isinstance(response, _SEQUENCE_TYPES):
        return any(_strict_equals(item, value) for item in response)
    return _stringify(value) in _stringify(response)


def evaluate(condition: Condition, responses: Mapping[str, Any]) -> bool:
    """
    Evaluate one condition against the response map.

    Args:
        condition: Condition to test
        responses: Mapping of question id -> answer

    Returns:
        True when the condition is met. ``action`` is not applied here;
        see ``question_visible``.
    """
    response = responses.get(condition.question_id) if condition.question_id else None
    if response is None:
        return False

    operator = condition.operator
    value = condition.value

    if operator is ConditionOperator.EQUALS:
        return _strict_equals(response, value)
    if operator is ConditionOperator.NOT_EQUALS:
        return not _strict_equals(response, value)
    if operator is ConditionOperator.CONTAINS:
        return _contains(response, value)
    if operator is ConditionOperator.NOT_CONTAINS:
        return not _contains(response, value)
    if operator is ConditionOperator.GREATER_THAN:
        return _to_number(response) > _to_number(value)
    if operator is ConditionOperator.LESS_THAN:
        return _to_number(response) < _to_number(value)
    if operator is ConditionOperator.IS_TRUE:
        return bool(response)
    if operator is ConditionOperator.IS_FALSE:
        return not bool(response)

    logger.debug("Unknown operator %r on condition %s; treating as not met", operator, condition.id)
    return False


def _combine(results: List[bool], logic_operator: Any) -> bool:
    if logic_operator is LogicOperator.AND:
        return all(results)
    if logic_operator is LogicOperator.OR:
        return any(results)
    return False


def question_visible(
    question: Question,
    responses: Mapping[str, Any],
    allowed_sources: Optional[AbstractSet[str]] = None,
) -> bool:
    """
    Decide whether ``question`` is visible for ``responses``.

    Conditions are split by action into a show group and a hide group.
    Each group is combined with ``question.logic_operator``:

        visible = (no show conditions OR show group satisfied)
                  AND NOT (hide conditions present AND hide group satisfied)

    Args:
        question: Question to test
        responses: Current response map
        allowed_sources: When given, a condition whose source id is not in
            this set (i.e. not strictly earlier in the survey) is not met

    Returns:
        True if the question should be shown
    """
    if not question.conditions:
        return True

    show_results: List[bool] = []
    hide_results: List[bool] = []

    for condition in question.conditions:
        if allowed_sources is not None and condition.question_id not in allowed_sources:
            met = False
        else:
            met = evaluate(condition, responses)

        if condition.action is ConditionAction.HIDE:
            hide_results.append(met)
        else:
            show_results.append(met)

    shown = not show_results or _combine(show_results, question.logic_operator)
    hidden = bool(hide_results) and _combine(hide_results, question.logic_operator)
    return shown and not hidden
