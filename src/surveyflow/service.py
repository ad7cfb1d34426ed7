"""
Persistence collaborator contract.

The engine performs no I/O. It talks to whatever stores surveys and
responses through ``SurveyDataSource``, passed in explicitly.

``InMemorySurveySource`` is a complete implementation kept in process
memory; it backs the demo and the tests.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence

from surveyflow.analyzer import sanitize_survey
from surveyflow.config import EngineSettings
from surveyflow.model import ResponseEntry, Survey

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Acknowledgement returned by the collaborator for one submission."""

    id: str
    survey_id: str
    submitted_at: str
    status: str = "success"


class SurveyDataSource(Protocol):
    """Minimal surface the engine needs from persistence."""

    def load_survey(self, survey_id: str) -> Survey:
        ...

    def submit_responses(self, survey_id: str, entries: Sequence[ResponseEntry]) -> SubmissionResult:
        ...


@dataclass
class InMemorySurveySource:
    """
    Survey store held in a dict.

    Submissions are appended to ``submissions`` keyed by survey id.
    """

    surveys: Dict[str, Survey] = field(default_factory=dict)
    submissions: Dict[str, List[List[ResponseEntry]]] = field(default_factory=dict)

    def add_survey(self, survey: Survey) -> None:
        self.surveys[survey.id] = survey

    def load_survey(self, survey_id: str) -> Survey:
        try:
            return self.surveys[survey_id]
        except KeyError:
            raise LookupError(f"Survey not found: {survey_id}") from None

    def submit_responses(self, survey_id: str, entries: Sequence[ResponseEntry]) -> SubmissionResult:
        if survey_id not in self.surveys:
            raise LookupError(f"Survey not found: {survey_id}")
        self.submissions.setdefault(survey_id, []).append(list(entries))
        result = SubmissionResult(
            id=f"response-{uuid.uuid4().hex}",
            survey_id=survey_id,
            submitted_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info("Stored %d response(s) for survey %s as %s", len(entries), survey_id, result.id)
        return result


def load_checked_survey(
    source: SurveyDataSource,
    survey_id: str,
    settings: Optional[EngineSettings] = None,
) -> Survey:
    """
    Load a survey through ``source`` and validate its condition graph.

    With ``sanitize_on_load`` enabled (the default) conditions that point
    at missing, later or the same question are stripped from the returned
    copy. Otherwise the survey is returned as loaded and the runtime
    evaluator fails closed on those conditions.
    """
    settings = settings or EngineSettings()
    survey = source.load_survey(survey_id)
    if settings.sanitize_on_load:
        return sanitize_survey(survey)
    return survey
