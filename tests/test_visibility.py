"""
Tests for the Visibility Resolver and progress computation.
"""

import pytest
from surveyflow.examples import build_branching_survey, build_feedback_survey
from surveyflow.model import Condition, ConditionOperator, Option, Question, QuestionType, Survey
from surveyflow.visibility import (
    has_answer,
    next_unanswered_question,
    progress_percent,
    resolve_visible,
)


def ids(questions):
    return [q.id for q in questions]


class TestBranchingScenario:
    """Q1 radio (A/B), Q2 shown when Q1 equals A."""

    def test_initially_only_source_visible(self):
        assert ids(resolve_visible(build_branching_survey(), {})) == ["Q1"]

    def test_matching_answer_reveals_dependent(self):
        assert ids(resolve_visible(build_branching_survey(), {"Q1": "A"})) == ["Q1", "Q2"]

    def test_other_answer_removes_dependent(self):
        assert ids(resolve_visible(build_branching_survey(), {"Q1": "B"})) == ["Q1"]


class TestAuthoredOrder:

    def test_dependent_keeps_authored_position(self):
        survey = build_feedback_survey()
        visible = resolve_visible(survey, {"usage": "weekly", "features": ["ai"]})
        assert ids(visible) == ["usage", "features", "ai_rating", "frequent_extra", "recommend"]

    def test_hide_rule_applies(self):
        survey = build_feedback_survey()
        visible = resolve_visible(survey, {"usage": "never"})
        assert ids(visible) == ["usage", "why_not", "recommend"]

    def test_forward_reference_fails_closed(self):
        survey = Survey(
            id="s",
            title="Forward",
            questions=[
                Question(
                    id="early",
                    type=QuestionType.TEXT,
                    title="Early",
                    conditions=[Condition(id="c", question_id="late", operator=ConditionOperator.IS_TRUE)],
                ),
                Question(id="late", type=QuestionType.BOOLEAN, title="Late"),
            ],
        )
        assert ids(resolve_visible(survey, {"late": True})) == ["late"]

    def test_self_reference_fails_closed(self):
        survey = Survey(
            id="s",
            title="Self",
            questions=[
                Question(
                    id="loop",
                    type=QuestionType.TEXT,
                    title="Loop",
                    conditions=[Condition(id="c", question_id="loop", operator=ConditionOperator.IS_TRUE)],
                ),
            ],
        )
        assert resolve_visible(survey, {"loop": "yes"}) == []

    def test_stale_answer_keeps_chain_visible(self):
        """Hiding Q2 does not clear its answer, so Q3 still sees it."""
        choice = [Option("yes", "Yes"), Option("no", "No")]
        survey = Survey(
            id="chain",
            title="Chain",
            questions=[
                Question(id="Q1", type=QuestionType.RADIO, title="One", options=list(choice)),
                Question(
                    id="Q2",
                    type=QuestionType.RADIO,
                    title="Two",
                    options=list(choice),
                    conditions=[Condition(id="c1", question_id="Q1", value="yes")],
                ),
                Question(
                    id="Q3",
                    type=QuestionType.TEXT,
                    title="Three",
                    conditions=[Condition(id="c2", question_id="Q2", value="yes")],
                ),
            ],
        )
        responses = {"Q1": "yes", "Q2": "yes", "Q3": "hello"}
        assert ids(resolve_visible(survey, responses)) == ["Q1", "Q2", "Q3"]

        responses["Q1"] = "no"
        assert ids(resolve_visible(survey, responses)) == ["Q1", "Q3"]

    def test_dangling_reference_fails_closed(self):
        survey = build_branching_survey()
        survey.questions[1].conditions[0].question_id = "missing"
        assert ids(resolve_visible(survey, {"Q1": "A", "missing": "A"})) == ["Q1"]


class TestHasAnswer:

    @pytest.mark.parametrize("value", ["text", 0, False, ["a"], ""])
    def test_present_values(self, value):
        assert has_answer({"q": value}, "q")

    @pytest.mark.parametrize("responses", [{}, {"q": None}, {"q": []}])
    def test_missing_values(self, responses):
        assert not has_answer(responses, "q")


class TestProgress:

    def test_no_answers(self):
        assert progress_percent(build_branching_survey(), {}) == 0

    def test_floor_of_ratio(self):
        survey = build_feedback_survey()
        # visible: usage, features, frequent_extra, recommend
        assert progress_percent(survey, {"usage": "weekly"}) == 25

    def test_empty_list_does_not_count(self):
        survey = build_feedback_survey()
        assert progress_percent(survey, {"usage": "weekly", "features": []}) == 25

    def test_visible_set_growth_lowers_progress(self):
        survey = build_branching_survey()
        assert progress_percent(survey, {"Q1": "B"}) == 100
        assert progress_percent(survey, {"Q1": "A"}) == 50

    def test_empty_survey(self):
        assert progress_percent(Survey(id="e", title="Empty"), {}) == 0

    def test_idempotent_and_bounded(self):
        survey = build_feedback_survey()
        responses = {"usage": "monthly", "features": ["ai"], "ai_rating": 5, "recommend": True}
        first = progress_percent(survey, responses)
        assert first == progress_percent(survey, responses)
        assert 0 <= first <= 100


def test_next_unanswered_question():
    survey = build_feedback_survey()
    assert next_unanswered_question(survey, {}).id == "usage"
    assert next_unanswered_question(survey, {"usage": "never"}).id == "why_not"
    done = {"usage": "never", "why_not": "busy", "recommend": False}
    assert next_unanswered_question(survey, done) is None
