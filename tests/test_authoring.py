"""
Tests for the Authoring Guard and SurveyBuilder.
"""

import itertools

import pytest
from surveyflow.authoring import (
    NO_ELIGIBLE_SOURCES,
    SurveyBuilder,
    eligible_condition_sources,
    validate_survey,
)
from surveyflow.errors import AuthoringError, SurveyValidationError
from surveyflow.examples import build_branching_survey, build_feedback_survey
from surveyflow.model import (
    Condition,
    ConditionAction,
    ConditionOperator,
    LogicOperator,
    QuestionType,
    Survey,
)


@pytest.fixture
def builder():
    counter = itertools.count(1)
    b = SurveyBuilder(
        Survey(id="s1", title="Builder Survey"),
        id_factory=lambda prefix: f"{prefix}{next(counter)}",
    )
    return b


def radio_then_text(builder):
    radio = builder.add_question(QuestionType.RADIO, "Pick")
    builder.add_option(0, "Second")
    text = builder.add_question(QuestionType.TEXT, "Why?")
    return radio, text


class TestEligibleSources:

    def test_first_question_has_no_sources(self):
        assert eligible_condition_sources(build_branching_survey(), 0) == []

    def test_only_earlier_choice_questions(self):
        survey = build_feedback_survey()
        sources = eligible_condition_sources(survey, 4)
        assert [q.id for q in sources] == ["usage", "features"]

    def test_text_questions_excluded(self):
        survey = build_branching_survey()
        survey.questions[0].type = QuestionType.TEXT
        assert eligible_condition_sources(survey, 1) == []


class TestAddCondition:

    def test_first_question_reports_error(self, builder):
        builder.add_question(QuestionType.RADIO, "Pick")
        with pytest.raises(AuthoringError) as excinfo:
            builder.add_condition(0)
        assert str(excinfo.value) == NO_ELIGIBLE_SOURCES
        assert builder.survey.questions[0].conditions == []

    def test_no_choice_source_reports_error(self, builder):
        builder.add_question(QuestionType.TEXT, "Name")
        builder.add_question(QuestionType.TEXT, "Email")
        with pytest.raises(AuthoringError):
            builder.add_condition(1)

    def test_defaults_to_first_source_and_option(self, builder):
        radio, text = radio_then_text(builder)
        condition = builder.add_condition(1)
        assert condition.question_id == radio.id
        assert condition.value == radio.options[0].id
        assert condition.operator is ConditionOperator.EQUALS
        assert condition.action is ConditionAction.SHOW
        assert text.conditions == [condition]


class TestUpdateCondition:

    def test_source_change_resets_value(self, builder):
        first, _ = radio_then_text(builder)
        builder.change_question_type(1, QuestionType.SELECT)
        builder.add_option(1, "Other")
        third = builder.add_question(QuestionType.TEXT, "Details")
        builder.add_condition(2)
        builder.update_condition(2, 0, value=first.options[1].id)

        second = builder.survey.questions[1]
        condition = builder.update_condition(2, 0, question_id=second.id)

        assert condition.question_id == second.id
        assert condition.value == second.options[0].id
        assert third.conditions[0] is condition

    def test_value_must_be_option_of_source(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        with pytest.raises(AuthoringError):
            builder.update_condition(1, 0, value="not-an-option")

    def test_source_must_precede(self, builder):
        radio_then_text(builder)
        builder.add_question(QuestionType.RADIO, "Later")
        builder.add_condition(1)
        later = builder.survey.questions[2]
        with pytest.raises(AuthoringError):
            builder.update_condition(1, 0, question_id=later.id)

    def test_operator_and_action(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        condition = builder.update_condition(
            1, 0, operator=ConditionOperator.NOT_EQUALS, action=ConditionAction.HIDE
        )
        assert condition.operator is ConditionOperator.NOT_EQUALS
        assert condition.action is ConditionAction.HIDE

    def test_remove_condition_and_logic(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        builder.set_logic_operator(1, LogicOperator.OR)
        builder.remove_condition(1, 0)
        assert builder.survey.questions[1].conditions == []
        assert builder.survey.questions[1].logic_operator is LogicOperator.OR


class TestQuestionEditing:

    def test_choice_question_gets_default_option(self, builder):
        question = builder.add_question(QuestionType.CHECKBOX)
        assert [o.text for o in question.options] == ["Option 1"]

    def test_change_to_text_drops_options_and_dependent_conditions(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        builder.change_question_type(0, QuestionType.TEXT)
        assert builder.survey.questions[0].options == []
        assert builder.survey.questions[1].conditions == []

    def test_remove_last_option_refused(self, builder):
        builder.add_question(QuestionType.RADIO)
        with pytest.raises(AuthoringError):
            builder.remove_option(0, 0)

    def test_remove_option_resets_condition_value(self, builder):
        radio, _ = radio_then_text(builder)
        builder.add_condition(1)
        removed = builder.remove_option(0, 0)
        condition = builder.survey.questions[1].conditions[0]
        assert condition.value != removed.id
        assert condition.value == radio.options[0].id

    def test_duplicate_gets_fresh_ids(self, builder):
        radio, _ = radio_then_text(builder)
        copy = builder.duplicate_question(0)
        assert builder.survey.questions[1] is copy
        assert copy.id != radio.id
        assert copy.title == "Pick (Copy)"
        assert set(copy.option_ids()).isdisjoint(radio.option_ids())

    def test_move_creating_forward_reference_refused(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        with pytest.raises(AuthoringError):
            builder.move_question(1, 0)
        assert builder.survey.questions[0].type is QuestionType.RADIO

    def test_move_without_conditions(self, builder):
        radio, text = radio_then_text(builder)
        builder.move_question(1, 0)
        assert builder.survey.questions == [text, radio]

    def test_remove_question_strips_dependent_conditions(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        builder.remove_question(0)
        assert builder.survey.questions[0].conditions == []

    def test_unknown_setting(self, builder):
        builder.update_setting("auto_advance", False)
        assert builder.survey.settings.auto_advance is False
        with pytest.raises(AuthoringError):
            builder.update_setting("colour", "red")

    def test_builder_copies_input(self):
        survey = build_branching_survey()
        builder = SurveyBuilder(survey)
        builder.set_title("Changed")
        assert survey.title == "Branching Survey"


class TestValidateSurvey:

    def test_example_surveys_are_valid(self):
        assert validate_survey(build_feedback_survey()) == []
        assert validate_survey(build_branching_survey()) == []

    def test_missing_title_and_questions(self):
        errors = validate_survey(Survey(id="s", title="  "))
        assert "Please enter a survey title" in errors
        assert "Please add at least one question" in errors

    def test_empty_option_text(self, builder):
        builder.add_question(QuestionType.RADIO, "Pick")
        builder.update_option(0, 0, " ")
        assert builder.validate() == ["Question 1: all options must have text"]

    def test_choice_without_options(self):
        survey = build_branching_survey()
        survey.questions[0].options = []
        errors = validate_survey(survey)
        assert "Question 1: choice questions must have at least one option" in errors

    def test_condition_on_first_question(self):
        survey = build_branching_survey()
        survey.questions[0].conditions = [
            Condition(id="x", question_id="Q2", operator=ConditionOperator.EQUALS, value="A")
        ]
        assert "Question 1: the first question cannot have conditions" in validate_survey(survey)

    def test_condition_missing_value(self):
        survey = build_branching_survey()
        survey.questions[1].conditions[0].value = ""
        assert validate_survey(survey) == ["Question 2: conditions must have a source question and value"]

    def test_condition_value_not_an_option(self):
        survey = build_branching_survey()
        survey.questions[1].conditions[0].value = "Z"
        assert validate_survey(survey) == ["Question 2: condition value 'Z' is not an option of Q1"]

    def test_build_raises_with_all_errors(self, builder):
        builder.set_title("")
        with pytest.raises(SurveyValidationError) as excinfo:
            builder.build()
        assert len(excinfo.value.errors) == 2

    def test_build_returns_copy(self, builder):
        radio_then_text(builder)
        builder.add_condition(1)
        survey = builder.build()
        assert survey == builder.survey
        assert survey is not builder.survey
