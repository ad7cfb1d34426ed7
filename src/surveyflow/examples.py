"""
Example surveys for the demo and the test-suite.

``build_feedback_survey`` mirrors the beta-program feedback questionnaire:
a usage question that branches into follow-ups, a feature checklist with a
dependent question and a hide rule for respondents who opted out.
"""
from surveyflow.model import (
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


def build_branching_survey(required_follow_up: bool = False) -> Survey:
    """Q1 (radio A/B) and Q2 (text) shown only when Q1 equals A."""
    return Survey(
        id="branching",
        title="Branching Survey",
        questions=[
            Question(
                id="Q1",
                type=QuestionType.RADIO,
                title="Pick one",
                options=[Option(id="A", text="A"), Option(id="B", text="B")],
            ),
            Question(
                id="Q2",
                type=QuestionType.TEXT,
                title="Tell us more about A",
                required=required_follow_up,
                conditions=[
                    Condition(
                        id="c1",
                        question_id="Q1",
                        operator=ConditionOperator.EQUALS,
                        value="A",
                        action=ConditionAction.SHOW,
                    )
                ],
            ),
        ],
    )


def build_feedback_survey(sequential: bool = True) -> Survey:
    survey = Survey(
        id="beta-feedback",
        title="Beta Program Feedback",
        description="Help us improve the trip planner",
        sequential_display=sequential,
        settings=SurveySettings(auto_advance=True),
    )

    usage = Question(
        id="usage",
        type=QuestionType.RADIO,
        title="How often do you plan trips with the app?",
        required=True,
        options=[
            Option(id="weekly", text="Weekly"),
            Option(id="monthly", text="Monthly"),
            Option(id="never", text="Never"),
        ],
    )

    why_not = Question(
        id="why_not",
        type=QuestionType.TEXTAREA,
        title="What keeps you from using it?",
        required=True,
        conditions=[
            Condition(id="c_never", question_id="usage", operator=ConditionOperator.EQUALS, value="never"),
        ],
    )

    features = Question(
        id="features",
        type=QuestionType.CHECKBOX,
        title="Which features have you used?",
        options=[
            Option(id="timeline", text="Itinerary timeline"),
            Option(id="maps", text="Route maps"),
            Option(id="ai", text="AI suggestions"),
        ],
        conditions=[
            Condition(
                id="c_hide_never",
                question_id="usage",
                operator=ConditionOperator.EQUALS,
                value="never",
                action=ConditionAction.HIDE,
            ),
        ],
    )

    ai_rating = Question(
        id="ai_rating",
        type=QuestionType.RATING,
        title="How useful were the AI suggestions?",
        required=True,
        conditions=[
            Condition(id="c_ai", question_id="features", operator=ConditionOperator.CONTAINS, value="ai"),
        ],
    )

    frequent_extra = Question(
        id="frequent_extra",
        type=QuestionType.TEXT,
        title="What would make weekly planning faster?",
        logic_operator=LogicOperator.OR,
        conditions=[
            Condition(id="c_weekly", question_id="usage", operator=ConditionOperator.EQUALS, value="weekly"),
            Condition(id="c_maps", question_id="features", operator=ConditionOperator.CONTAINS, value="maps"),
        ],
    )

    recommend = Question(
        id="recommend",
        type=QuestionType.BOOLEAN,
        title="Would you recommend the app to a friend?",
        required=True,
    )

    survey.questions = [usage, why_not, features, ai_rating, frequent_extra, recommend]
    return survey
