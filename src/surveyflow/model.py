"""
Core Survey Model Objects

Defines the data structures consumed by the conditional-logic engine:
    - Options (choices of a choice question)
    - Conditions (visibility rules tied to an earlier answer)
    - Questions (ordered survey items)
    - Settings (display and completion switches)
    - Surveys (root container)

ARCHITECTURAL RULE:
    These objects:
        - Hold structure, not behavior
        - Perform no I/O
        - Are fully serializable (see serialization.py)
    Visibility, completion and flow live in their own modules.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class QuestionType(Enum):
    """Question types understood by the engine."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    EMAIL = "email"
    DATE = "date"
    SINGLE_CHOICE = "single_choice"
    RADIO = "radio"
    MULTIPLE_CHOICE = "multiple_choice"
    CHECKBOX = "checkbox"
    SELECT = "select"
    RATING = "rating"
    SLIDER = "slider"
    BOOLEAN = "boolean"
    TAGS = "tags"


CHOICE_TYPES = frozenset({
    QuestionType.SINGLE_CHOICE,
    QuestionType.RADIO,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.CHECKBOX,
    QuestionType.SELECT,
})

# Answers to these types are stored as lists
ARRAY_TYPES = frozenset({
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.CHECKBOX,
    QuestionType.TAGS,
})


class ConditionOperator(Enum):
    """
    Comparison operators a condition may use.

    Every operator compares the stored response of the source question
    against ``Condition.value`` (isTrue/isFalse ignore the value).
    """

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    IS_TRUE = "isTrue"
    IS_FALSE = "isFalse"


class ConditionAction(Enum):
    SHOW = "show"
    HIDE = "hide"


class LogicOperator(Enum):
    AND = "AND"
    OR = "OR"


class DisplayMode(Enum):
    """Presentation strategy of the Flow Controller."""

    SEQUENTIAL = "sequential"
    ALL_AT_ONCE = "all-at-once"


@dataclass
class Option:
    """
    A single choice of a choice question.

    Properties:
        id: Unique within its question; conditions compare against it
        text: Label shown to the respondent
    """

    id: str
    text: str


@dataclass
class Condition:
    """
    Ties the visibility of the owning question to an earlier answer.

    Properties:
        id:
            Condition identifier
        question_id:
            Source question; must precede the owning question
        operator:
            ConditionOperator, or the raw string when the stored operator
            is unknown (evaluates as "not satisfied")
        value:
            Comparison value (an option id for builder-made conditions)
        action:
            SHOW or HIDE; decides which group the condition belongs to

    IMPORTANT:
        A dangling or forward ``question_id`` is tolerated here.
        The evaluator fails closed on it; analyzer.py reports it.
    """

    id: str
    question_id: Optional[str]
    operator: Union[ConditionOperator, str] = ConditionOperator.EQUALS
    value: Any = None
    action: ConditionAction = ConditionAction.SHOW


@dataclass
class Question:
    """
    Represents a single survey question.

    Properties:
        id: Unique within the survey
        type: QuestionType
        title: Question text
        required: Must hold a valid answer when visible
        options: Ordered choices (empty for non-choice types)
        conditions: Ordered visibility rules
        logic_operator: How conditions of one group combine (AND/OR)
    """

    id: str
    type: QuestionType
    title: str
    required: bool = False
    options: List[Option] = field(default_factory=list)
    conditions: List[Condition] = field(default_factory=list)
    logic_operator: Union[LogicOperator, str] = LogicOperator.AND

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES

    @property
    def is_array_valued(self) -> bool:
        return self.type in ARRAY_TYPES

    def get_option(self, option_id: str) -> Optional[Option]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def option_ids(self) -> List[str]:
        return [option.id for option in self.options]


@dataclass
class SurveySettings:
    """
    Display and completion switches of a survey.

    ``require_all_questions`` turns every visible question into a required
    one for completion purposes. ``randomize_questions`` is stored for the
    presentation layer only; the engine always keeps authored order.
    """

    allow_anonymous: bool = True
    require_all_questions: bool = False
    show_progress_bar: bool = True
    randomize_questions: bool = False
    show_thank_you_message: bool = True
    thank_you_message: str = "Thank you for completing the survey!"
    auto_advance: bool = True


@dataclass
class Survey:
    """
    Root container for a survey definition.

    INVARIANTS:
        - ``questions`` order is authoritative: it is the render order and
          the only allowed direction of conditional references
        - Question ids are unique
        - A condition may only reference a question earlier in ``questions``

    Properties:
        id: Survey identifier
        title: Survey title
        description: Optional description
        questions: Ordered questions
        sequential_display: One-question-at-a-time presentation when True
        settings: SurveySettings
    """

    id: str
    title: str
    description: str = ""
    questions: List[Question] = field(default_factory=list)
    sequential_display: bool = False
    settings: SurveySettings = field(default_factory=SurveySettings)

    @property
    def display_mode(self) -> DisplayMode:
        return DisplayMode.SEQUENTIAL if self.sequential_display else DisplayMode.ALL_AT_ONCE

    def get_question(self, question_id: str) -> Optional[Question]:
        """
        Retrieve a question by ID.

        Returns:
            Question object or None if not found
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def index_of(self, question_id: str) -> int:
        """Position of a question in authored order, or -1."""
        for index, question in enumerate(self.questions):
            if question.id == question_id:
                return index
        return -1


@dataclass(frozen=True)
class ResponseEntry:
    """One ``{questionId, value}`` pair handed to the persistence collaborator."""

    question_id: str
    value: Any


# Answer values keyed by question id
ResponseMap = Dict[str, Any]
