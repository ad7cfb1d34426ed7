"""
Tests for the persistence collaborator contract.
"""

import pytest
from surveyflow.config import EngineSettings
from surveyflow.examples import build_branching_survey
from surveyflow.model import ResponseEntry
from surveyflow.service import InMemorySurveySource, load_checked_survey


@pytest.fixture
def source():
    store = InMemorySurveySource()
    store.add_survey(build_branching_survey())
    return store


def test_load_survey(source):
    assert source.load_survey("branching").title == "Branching Survey"


def test_load_missing_survey(source):
    with pytest.raises(LookupError):
        source.load_survey("nope")


def test_submit_records_entries(source):
    result = source.submit_responses("branching", [ResponseEntry("Q1", "B")])

    assert result.survey_id == "branching"
    assert result.status == "success"
    assert result.id.startswith("response-")
    assert source.submissions["branching"] == [[ResponseEntry("Q1", "B")]]


def test_submit_to_missing_survey(source):
    with pytest.raises(LookupError):
        source.submit_responses("nope", [])


def test_load_checked_survey_sanitizes(source):
    source.surveys["branching"].questions[1].conditions[0].question_id = "ghost"

    with pytest.warns(UserWarning):
        survey = load_checked_survey(source, "branching")

    assert survey.questions[1].conditions == []
    assert source.surveys["branching"].questions[1].conditions != []


def test_load_checked_survey_without_sanitizing(source):
    survey = load_checked_survey(source, "branching", EngineSettings(sanitize_on_load=False))
    assert survey is source.surveys["branching"]
