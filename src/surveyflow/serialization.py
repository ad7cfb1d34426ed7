"""
Serialization helpers for survey objects (Survey, Question, Condition, etc.).

The camelCase dict layout produced here is the persisted-JSON contract
shared with the survey store. JSON and YAML go through the same
intermediate dict representation.

Unknown condition operators and logic operators are preserved verbatim so
they round-trip and fail closed at evaluation time. Anything else that
does not fit the schema raises SurveyFormatError.
"""
from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import yaml

from surveyflow.errors import SurveyFormatError
from surveyflow.model import (
    Condition,
    ConditionAction,
    ConditionOperator,
    LogicOperator,
    Option,
    Question,
    QuestionType,
    ResponseEntry,
    Survey,
    SurveySettings,
)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _require(d: Dict[str, Any], key: str, context: str) -> Any:
    if not isinstance(d, dict):
        raise SurveyFormatError(f"{context} must be an object, got {type(d).__name__}")
    if key not in d:
        raise SurveyFormatError(f"{context} is missing '{key}'")
    return d[key]


def option_to_dict(o: Option) -> Dict[str, Any]:
    return {"id": o.id, "text": o.text}


def option_from_dict(d: Dict[str, Any]) -> Option:
    return Option(id=str(_require(d, "id", "Option")), text=d.get("text", ""))


def condition_to_dict(c: Condition) -> Dict[str, Any]:
    return {
        "id": c.id,
        "questionId": c.question_id,
        "operator": _enum_value(c.operator),
        "value": c.value,
        "action": c.action.value,
    }


def condition_from_dict(d: Dict[str, Any]) -> Condition:
    raw_operator = d.get("operator", ConditionOperator.EQUALS.value)
    try:
        operator: Union[ConditionOperator, str] = ConditionOperator(raw_operator)
    except ValueError:
        warnings.warn(f"Unknown condition operator {raw_operator!r}; it will never match", UserWarning)
        operator = str(raw_operator)

    raw_action = d.get("action", ConditionAction.SHOW.value)
    try:
        action = ConditionAction(raw_action)
    except ValueError:
        raise SurveyFormatError(f"Unknown condition action: {raw_action!r}") from None

    return Condition(
        id=str(_require(d, "id", "Condition")),
        question_id=None if d.get("questionId") is None else str(d["questionId"]),
        operator=operator,
        value=d.get("value"),
        action=action,
    )


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "id": q.id,
        "type": q.type.value,
        "title": q.title,
        "required": q.required,
        "options": [option_to_dict(o) for o in q.options],
        "conditions": [condition_to_dict(c) for c in q.conditions],
        "logicOperator": _enum_value(q.logic_operator),
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    raw_type = _require(d, "type", "Question")
    try:
        question_type = QuestionType(raw_type)
    except ValueError:
        raise SurveyFormatError(f"Unknown question type: {raw_type!r}") from None

    raw_logic = d.get("logicOperator") or LogicOperator.AND.value
    try:
        logic: Union[LogicOperator, str] = LogicOperator(raw_logic)
    except ValueError:
        warnings.warn(f"Unknown logic operator {raw_logic!r}", UserWarning)
        logic = str(raw_logic)

    return Question(
        id=str(_require(d, "id", "Question")),
        type=question_type,
        title=d.get("title", ""),
        required=bool(d.get("required", False)),
        options=[option_from_dict(o) for o in d.get("options") or []],
        conditions=[condition_from_dict(c) for c in d.get("conditions") or []],
        logic_operator=logic,
    )


def settings_to_dict(s: SurveySettings) -> Dict[str, Any]:
    return {
        "allowAnonymous": s.allow_anonymous,
        "requireAllQuestions": s.require_all_questions,
        "showProgressBar": s.show_progress_bar,
        "randomizeQuestions": s.randomize_questions,
        "showThankYouMessage": s.show_thank_you_message,
        "thankYouMessage": s.thank_you_message,
        "autoAdvance": s.auto_advance,
    }


def settings_from_dict(d: Dict[str, Any] | None) -> SurveySettings:
    if d is None:
        return SurveySettings()
    if not isinstance(d, dict):
        raise SurveyFormatError(f"Survey 'settings' must be an object, got {type(d).__name__}")
    defaults = SurveySettings()
    return SurveySettings(
        allow_anonymous=bool(d.get("allowAnonymous", defaults.allow_anonymous)),
        require_all_questions=bool(d.get("requireAllQuestions", defaults.require_all_questions)),
        show_progress_bar=bool(d.get("showProgressBar", defaults.show_progress_bar)),
        randomize_questions=bool(d.get("randomizeQuestions", defaults.randomize_questions)),
        show_thank_you_message=bool(d.get("showThankYouMessage", defaults.show_thank_you_message)),
        thank_you_message=d.get("thankYouMessage", defaults.thank_you_message),
        auto_advance=bool(d.get("autoAdvance", defaults.auto_advance)),
    )


def survey_to_dict(s: Survey) -> Dict[str, Any]:
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "questions": [question_to_dict(q) for q in s.questions],
        "sequentialDisplay": s.sequential_display,
        "settings": settings_to_dict(s.settings),
    }


def survey_from_dict(d: Dict[str, Any]) -> Survey:
    survey_id = _require(d, "id", "Survey")
    questions = d.get("questions") or []
    if not isinstance(questions, list):
        raise SurveyFormatError("Survey 'questions' must be a list")
    loaded = [question_from_dict(q) for q in questions]
    _normalize_option_values(loaded)
    return Survey(
        id=str(survey_id),
        title=d.get("title", ""),
        description=d.get("description") or "",
        questions=loaded,
        sequential_display=bool(d.get("sequentialDisplay", False)),
        settings=settings_from_dict(d.get("settings")),
    )


def _normalize_option_values(questions: List[Question]) -> None:
    """Condition values on choice sources are option ids, which load as strings."""
    by_id = {q.id: q for q in questions}
    for question in questions:
        for condition in question.conditions:
            source = by_id.get(condition.question_id)
            if source is None or not source.is_choice:
                continue
            if isinstance(condition.value, (int, float)) and not isinstance(condition.value, bool):
                condition.value = str(condition.value)


def survey_to_json(s: Survey) -> str:
    return json.dumps(survey_to_dict(s), sort_keys=True)


def survey_from_json(s: str) -> Survey:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise SurveyFormatError(f"Invalid survey JSON: {e}") from e
    return survey_from_dict(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_dict(s), sort_keys=False)


def survey_from_yaml(s: str) -> Survey:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise SurveyFormatError(f"Invalid survey YAML: {e}") from e
    return survey_from_dict(d)


def load_survey_file(path: Union[str, Path]) -> Survey:
    """Read a survey from a ``.json``, ``.yaml`` or ``.yml`` file."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return survey_from_yaml(path.read_text(encoding="utf-8"))
    if suffix == ".json":
        return survey_from_json(path.read_text(encoding="utf-8"))
    raise SurveyFormatError(f"Unsupported survey file type: {path.suffix or path.name}")


def response_entries_to_list(entries: Sequence[ResponseEntry]) -> List[Dict[str, Any]]:
    return [{"questionId": e.question_id, "value": e.value} for e in entries]


def response_entries_from_list(items: Sequence[Dict[str, Any]]) -> List[ResponseEntry]:
    return [ResponseEntry(question_id=str(_require(i, "questionId", "Response")), value=i.get("value")) for i in items]
