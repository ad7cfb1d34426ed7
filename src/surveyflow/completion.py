"""
Completion Validator

A survey is complete when every visible, required question holds a valid
answer (see ``visibility.has_answer``). Hidden questions never block
completion, whatever their ``required`` flag says.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from surveyflow.errors import IncompleteSurveyError
from surveyflow.model import Question, Survey
from surveyflow.visibility import has_answer, resolve_visible


def find_unanswered(
    visible_questions: Sequence[Question],
    responses: Mapping[str, Any],
    require_all: bool = False,
) -> List[Question]:
    """
    Required questions among ``visible_questions`` lacking a valid answer.

    Args:
        visible_questions: Output of ``resolve_visible``
        responses: Current response map
        require_all: Treat every visible question as required

    Returns:
        Offending questions, in visible order
    """
    return [
        question
        for question in visible_questions
        if (question.required or require_all) and not has_answer(responses, question.id)
    ]


def unanswered_in(survey: Survey, responses: Mapping[str, Any]) -> List[Question]:
    return find_unanswered(
        resolve_visible(survey, responses),
        responses,
        require_all=survey.settings.require_all_questions,
    )


def is_complete(survey: Survey, responses: Mapping[str, Any]) -> bool:
    return not unanswered_in(survey, responses)


def check_completion(survey: Survey, responses: Mapping[str, Any]) -> None:
    """Raise IncompleteSurveyError when required visible questions are unanswered."""
    unanswered = unanswered_in(survey, responses)
    if unanswered:
        raise IncompleteSurveyError(unanswered)
