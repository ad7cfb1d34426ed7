"""
Visibility Resolver

Applies the Condition Evaluator to every question of a survey and yields
the ordered subsequence that is currently visible.

The visible set is derived, never stored: callers recompute it in full
after every response mutation. Surveys are small, so a full pass is
preferred over incremental patching.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Set

from surveyflow.conditions import question_visible
from surveyflow.model import Question, Survey

logger = logging.getLogger(__name__)


def has_answer(responses: Mapping[str, Any], question_id: str) -> bool:
    """A valid answer is present, not None and not an empty list."""
    if question_id not in responses:
        return False
    value = responses[question_id]
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, frozenset)) and len(value) == 0:
        return False
    return True


def resolve_visible(survey: Survey, responses: Mapping[str, Any]) -> List[Question]:
    """
    Return the visible questions of ``survey`` in authored order.

    Only questions strictly earlier in ``survey.questions`` are accepted
    as condition sources; anything else fails closed.
    """
    visible: List[Question] = []
    preceding: Set[str] = set()

    for question in survey.questions:
        if question_visible(question, responses, allowed_sources=preceding):
            visible.append(question)
        preceding.add(question.id)

    logger.debug(
        "Survey %s: %d of %d questions visible",
        survey.id, len(visible), len(survey.questions),
    )
    return visible


def answered_count(questions: Sequence[Question], responses: Mapping[str, Any]) -> int:
    return sum(1 for question in questions if has_answer(responses, question.id))


def progress_percent(survey: Survey, responses: Mapping[str, Any]) -> int:
    """
    Percentage of visible questions holding a valid answer, floored.

    Always within [0, 100]. A survey with no visible questions reports 0.
    """
    visible = resolve_visible(survey, responses)
    if not visible:
        return 0
    return (answered_count(visible, responses) * 100) // len(visible)


def next_unanswered_question(survey: Survey, responses: Mapping[str, Any]) -> Optional[Question]:
    """First visible question without a valid answer, or None when all are answered."""
    for question in resolve_visible(survey, responses):
        if not has_answer(responses, question.id):
            return question
    return None
