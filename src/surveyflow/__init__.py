"""
Survey conditional-logic and flow-control engine.

Decides, for an arbitrarily branching questionnaire:
    - which questions are currently visible
    - whether the questionnaire is complete
    - how to sequence questions one at a time or all at once

ARCHITECTURAL GUARANTEE:
------------------------
The engine performs no I/O. Surveys are loaded and responses submitted
through an explicitly passed collaborator (see service.py).

Visibility is never cached: callers recompute it after every response
mutation.
"""

from surveyflow.authoring import SurveyBuilder, eligible_condition_sources, validate_survey
from surveyflow.completion import find_unanswered, is_complete
from surveyflow.conditions import evaluate, question_visible
from surveyflow.flow import FlowController, FlowState
from surveyflow.model import (
    Condition,
    ConditionAction,
    ConditionOperator,
    DisplayMode,
    LogicOperator,
    Option,
    Question,
    QuestionType,
    ResponseEntry,
    Survey,
    SurveySettings,
)
from surveyflow.visibility import progress_percent, resolve_visible

__version__ = "0.1.0"

__all__ = [
    "Condition",
    "ConditionAction",
    "ConditionOperator",
    "DisplayMode",
    "FlowController",
    "FlowState",
    "LogicOperator",
    "Option",
    "Question",
    "QuestionType",
    "ResponseEntry",
    "Survey",
    "SurveyBuilder",
    "SurveySettings",
    "eligible_condition_sources",
    "evaluate",
    "find_unanswered",
    "is_complete",
    "progress_percent",
    "question_visible",
    "resolve_visible",
    "validate_survey",
]
