"""
Authoring Guard and survey builder.

Design-time counterpart of the runtime engine. The builder only lets a
condition reference a question that precedes the one being edited, and
only questions with discrete answers (single choice, multiple choice,
select) are offered as sources. A condition's value is kept to one of
the source question's option ids.

Every rejected operation raises AuthoringError: a user-correctable
validation failure, never a crash.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Callable, List, Optional

from surveyflow.errors import AuthoringError, SurveyValidationError
from surveyflow.model import (
    CHOICE_TYPES,
    Condition,
    ConditionAction,
    ConditionOperator,
    LogicOperator,
    Option,
    Question,
    QuestionType,
    Survey,
    SurveySettings,
)

logger = logging.getLogger(__name__)

# Types whose answers can be matched against option ids
CONDITION_SOURCE_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE,
    QuestionType.RADIO,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.CHECKBOX,
    QuestionType.SELECT,
})

NO_ELIGIBLE_SOURCES = (
    "No eligible source questions: conditions can only reference earlier "
    "single choice, multiple choice or select questions"
)


def eligible_condition_sources(survey: Survey, editing_index: int) -> List[Question]:
    """Questions strictly before ``editing_index`` that can drive a condition."""
    return [
        question
        for index, question in enumerate(survey.questions)
        if index < editing_index and question.type in CONDITION_SOURCE_TYPES
    ]


def validate_survey(survey: Survey) -> List[str]:
    """
    Collect every authoring error of ``survey``.

    Returns:
        Human-readable messages; empty when the survey can be saved
    """
    errors: List[str] = []

    if not survey.title or not survey.title.strip():
        errors.append("Please enter a survey title")
    if not survey.questions:
        errors.append("Please add at least one question")

    position = {question.id: index for index, question in enumerate(survey.questions)}

    for index, question in enumerate(survey.questions):
        label = f"Question {index + 1}"
        if not question.title or not question.title.strip():
            errors.append(f"{label}: all questions must have a title")

        if question.type in CHOICE_TYPES:
            if not question.options:
                errors.append(f"{label}: choice questions must have at least one option")
            elif any(not option.text or not option.text.strip() for option in question.options):
                errors.append(f"{label}: all options must have text")

        if question.conditions and index == 0:
            errors.append(f"{label}: the first question cannot have conditions")
            continue

        for condition in question.conditions:
            if not condition.question_id or condition.value in (None, ""):
                errors.append(f"{label}: conditions must have a source question and value")
                continue
            source_index = position.get(condition.question_id)
            if source_index is None or source_index >= index:
                errors.append(
                    f"{label}: condition source {condition.question_id} must be an earlier question"
                )
                continue
            source = survey.questions[source_index]
            if source.type in CONDITION_SOURCE_TYPES and condition.value not in source.option_ids():
                errors.append(
                    f"{label}: condition value {condition.value!r} is not an option of {source.id}"
                )

    return errors


def _default_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class SurveyBuilder:
    """
    Mutable editor over a Survey definition.

    Args:
        survey: Survey to edit (deep-copied); a blank survey when None
        id_factory: ``prefix -> id`` callable for new questions, options
            and conditions
    """

    def __init__(
        self,
        survey: Optional[Survey] = None,
        id_factory: Optional[Callable[[str], str]] = None,
    ):
        self._new_id = id_factory or _default_id
        if survey is None:
            survey = Survey(id=self._new_id("survey"), title="Untitled Survey")
        self.survey = copy.deepcopy(survey)

    # ------------------------------------------------------------------
    # Survey level
    # ------------------------------------------------------------------

    def set_title(self, title: str) -> None:
        self.survey.title = title

    def set_description(self, description: str) -> None:
        self.survey.description = description

    def set_sequential_display(self, enabled: bool) -> None:
        self.survey.sequential_display = bool(enabled)

    def update_setting(self, name: str, value: Any) -> None:
        if name not in SurveySettings.__dataclass_fields__:
            raise AuthoringError(f"Unknown survey setting: {name}")
        setattr(self.survey.settings, name, value)

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def _question(self, index: int) -> Question:
        if not 0 <= index < len(self.survey.questions):
            raise AuthoringError(f"No question at position {index}")
        return self.survey.questions[index]

    def _default_options(self) -> List[Option]:
        return [Option(id=self._new_id("opt"), text="Option 1")]

    def add_question(self, question_type: QuestionType = QuestionType.TEXT, title: str = "New Question") -> Question:
        question = Question(
            id=self._new_id("q"),
            type=question_type,
            title=title,
            options=self._default_options() if question_type in CHOICE_TYPES else [],
        )
        self.survey.questions.append(question)
        return question

    def update_question(self, index: int, *, title: Optional[str] = None, required: Optional[bool] = None) -> Question:
        question = self._question(index)
        if title is not None:
            question.title = title
        if required is not None:
            question.required = bool(required)
        return question

    def change_question_type(self, index: int, question_type: QuestionType) -> Question:
        """Switch type; choice types keep existing options or get a default one."""
        question = self._question(index)
        if question_type in CHOICE_TYPES:
            if not question.options:
                question.options = self._default_options()
        else:
            question.options = []
        question.type = question_type

        if question_type not in CONDITION_SOURCE_TYPES:
            self._drop_conditions_on(question.id, "source is no longer a choice question")
        else:
            self._reset_stale_values(question)
        return question

    def duplicate_question(self, index: int) -> Question:
        """Insert a copy after ``index`` with fresh ids for it and its parts."""
        original = self._question(index)
        duplicate = copy.deepcopy(original)
        duplicate.id = self._new_id("q")
        duplicate.title = f"{original.title} (Copy)"
        for option in duplicate.options:
            option.id = self._new_id("opt")
        for condition in duplicate.conditions:
            condition.id = self._new_id("cond")
        self.survey.questions.insert(index + 1, duplicate)
        return duplicate

    def move_question(self, index: int, new_index: int) -> None:
        """
        Reorder a question.

        Rejected when the new order would leave any condition pointing at a
        question that no longer precedes it.
        """
        question = self._question(index)
        if not 0 <= new_index < len(self.survey.questions):
            raise AuthoringError(f"No question at position {new_index}")

        reordered = list(self.survey.questions)
        reordered.pop(index)
        reordered.insert(new_index, question)

        seen = set()
        for candidate in reordered:
            for condition in candidate.conditions:
                if condition.question_id and condition.question_id not in seen:
                    raise AuthoringError(
                        f"Moving {question.id} would make {candidate.id} depend on a later question"
                    )
            seen.add(candidate.id)

        self.survey.questions = reordered

    def remove_question(self, index: int) -> Question:
        question = self._question(index)
        del self.survey.questions[index]
        self._drop_conditions_on(question.id, "source question was removed")
        return question

    def _drop_conditions_on(self, source_id: str, reason: str) -> None:
        for question in self.survey.questions:
            kept = [c for c in question.conditions if c.question_id != source_id]
            if len(kept) != len(question.conditions):
                logger.info(
                    "Dropped %d condition(s) on %s: %s",
                    len(question.conditions) - len(kept), question.id, reason,
                )
                question.conditions = kept

    def _reset_stale_values(self, source: Question) -> None:
        valid = source.option_ids()
        for question in self.survey.questions:
            for condition in question.conditions:
                if condition.question_id == source.id and condition.value not in valid:
                    condition.value = valid[0] if valid else None

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def add_option(self, index: int, text: Optional[str] = None) -> Option:
        question = self._question(index)
        if question.type not in CHOICE_TYPES:
            raise AuthoringError(f"{question.type.value} questions do not have options")
        option = Option(id=self._new_id("opt"), text=text or f"Option {len(question.options) + 1}")
        question.options.append(option)
        return option

    def update_option(self, index: int, option_index: int, text: str) -> Option:
        question = self._question(index)
        if not 0 <= option_index < len(question.options):
            raise AuthoringError(f"No option at position {option_index}")
        question.options[option_index].text = text
        return question.options[option_index]

    def remove_option(self, index: int, option_index: int) -> Option:
        question = self._question(index)
        if not 0 <= option_index < len(question.options):
            raise AuthoringError(f"No option at position {option_index}")
        if question.type in CHOICE_TYPES and len(question.options) <= 1:
            raise AuthoringError("Choice questions must keep at least one option")
        removed = question.options.pop(option_index)
        self._reset_stale_values(question)
        return removed

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def eligible_sources(self, editing_index: int) -> List[Question]:
        return eligible_condition_sources(self.survey, editing_index)

    def _source_for(self, editing_index: int, source_id: str) -> Question:
        for candidate in self.eligible_sources(editing_index):
            if candidate.id == source_id:
                return candidate
        raise AuthoringError(f"{source_id} cannot be used as a condition source here")

    def add_condition(self, editing_index: int) -> Condition:
        """
        Attach a condition on the first eligible source.

        Raises:
            AuthoringError: ``editing_index`` is 0 or no earlier choice
                question exists
        """
        question = self._question(editing_index)
        sources = self.eligible_sources(editing_index)
        if not sources:
            raise AuthoringError(NO_ELIGIBLE_SOURCES, details={"editing_index": editing_index})

        source = sources[0]
        condition = Condition(
            id=self._new_id("cond"),
            question_id=source.id,
            operator=ConditionOperator.EQUALS,
            value=source.options[0].id if source.options else None,
            action=ConditionAction.SHOW,
        )
        question.conditions.append(condition)
        return condition

    def update_condition(
        self,
        editing_index: int,
        condition_index: int,
        *,
        question_id: Optional[str] = None,
        operator: Optional[ConditionOperator] = None,
        value: Any = None,
        action: Optional[ConditionAction] = None,
    ) -> Condition:
        """
        Change fields of a condition.

        Changing the source resets ``value`` to the new source's first
        option id (unless a new valid value is passed in the same call).
        """
        question = self._question(editing_index)
        if not 0 <= condition_index < len(question.conditions):
            raise AuthoringError(f"No condition at position {condition_index}")
        condition = question.conditions[condition_index]

        if question_id is not None and question_id != condition.question_id:
            source = self._source_for(editing_index, question_id)
            condition.question_id = source.id
            condition.value = source.options[0].id if source.options else None

        if value is not None:
            source = self._source_for(editing_index, condition.question_id)
            if value not in source.option_ids():
                raise AuthoringError(f"{value!r} is not an option of {source.id}")
            condition.value = value

        if operator is not None:
            condition.operator = ConditionOperator(operator)
        if action is not None:
            condition.action = ConditionAction(action)
        return condition

    def remove_condition(self, editing_index: int, condition_index: int) -> Condition:
        question = self._question(editing_index)
        if not 0 <= condition_index < len(question.conditions):
            raise AuthoringError(f"No condition at position {condition_index}")
        return question.conditions.pop(condition_index)

    def set_logic_operator(self, editing_index: int, logic_operator: LogicOperator) -> None:
        self._question(editing_index).logic_operator = LogicOperator(logic_operator)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def validate(self) -> List[str]:
        return validate_survey(self.survey)

    def build(self) -> Survey:
        """Return a copy of the survey, or raise SurveyValidationError."""
        errors = self.validate()
        if errors:
            raise SurveyValidationError(errors)
        return copy.deepcopy(self.survey)
