"""
Demo: Walk the beta feedback survey one question at a time.
"""

from surveyflow.analyzer import analyze_survey
from surveyflow.config import configure_logging, load_settings
from surveyflow.errors import IncompleteSurveyError
from surveyflow.examples import build_feedback_survey
from surveyflow.flow import FlowController
from surveyflow.service import InMemorySurveySource, load_checked_survey


def print_state(flow):
    """Pretty-print the current FlowState."""
    state = flow.snapshot()
    current = flow.current_question
    print(f"  Visible:   {', '.join(state.visible_question_ids)}")
    print(f"  Active:    [{state.active_index}] {current.title if current else '-'}")
    print(f"  Progress:  {state.progress}%")
    print(f"  Next: {'on' if state.can_go_next else 'off'}  "
          f"Previous: {'on' if state.can_go_previous else 'off'}  "
          f"Action: {state.primary_action}")
    print()


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)

    source = InMemorySurveySource()
    source.add_survey(build_feedback_survey(sequential=True))
    survey = load_checked_survey(source, "beta-feedback", settings)

    report = analyze_survey(survey)
    print("=" * 70)
    print(f"SURVEY: {survey.title}  ({report.total_questions} questions, "
          f"{report.total_conditions} conditions)")
    print("=" * 70)
    print()

    flow = FlowController(survey, data_source=source)
    print("Start")
    print_state(flow)

    for question_id, value in [("usage", "weekly"), ("features", ["maps", "ai"]), ("ai_rating", 4)]:
        print(f"Answer {question_id} = {value!r}")
        flow.answer(question_id, value)
        print_state(flow)

    try:
        flow.submit()
    except IncompleteSurveyError as e:
        print(f"Submit blocked: {e}")
        print(f"  Focus moved to: {e.first_question.title}")
        print()

    flow.answer("recommend", True)
    result = flow.submit()
    print(f"Submitted as {result.id} ({len(source.submissions['beta-feedback'][0])} responses)")
