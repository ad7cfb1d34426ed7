"""
Flow Controller

Drives one respondent's pass through a survey: holds the response map,
recomputes the visible set after every mutation and sequences questions
either one at a time (sequential) or all at once.

Per user action the data flows one way:

    answer -> resolve_visible -> find_unanswered -> position/progress

Transitions are synchronous. Rendering the same ``(responses,
active_index)`` always yields the same FlowState.

The only asynchronous boundary is submission. While the collaborator call
is in flight ``submitting`` is True and repeat submits are refused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from surveyflow.completion import find_unanswered
from surveyflow.errors import (
    IncompleteSurveyError,
    SubmissionError,
    SubmissionInProgressError,
    SurveyConfigurationError,
)
from surveyflow.model import DisplayMode, Question, ResponseEntry, Survey
from surveyflow.service import SubmissionResult, SurveyDataSource
from surveyflow.visibility import answered_count, has_answer, resolve_visible

logger = logging.getLogger(__name__)

ACTION_NEXT = "next"
ACTION_SUBMIT = "submit"


@dataclass(frozen=True)
class FlowState:
    """Render-ready snapshot of a FlowController."""

    mode: DisplayMode
    visible_question_ids: Tuple[str, ...]
    active_index: int
    active_question_id: Optional[str]
    progress: int
    can_go_next: bool
    can_go_previous: bool
    primary_action: str
    unanswered_count: int
    submitting: bool
    submitted: bool
    error: Optional[str]


class FlowController:
    """
    Presentation state machine for a single completion attempt.

    Args:
        survey: Survey definition (not modified)
        data_source: Persistence collaborator used by ``submit``
    """

    def __init__(self, survey: Survey, data_source: Optional[SurveyDataSource] = None):
        self.survey = survey
        self.data_source = data_source
        self.responses: Dict[str, Any] = {}
        self.visible_questions: List[Question] = []
        self.active_index = 0
        self.submitting = False
        self.submitted = False
        self.result: Optional[SubmissionResult] = None
        self.error: Optional[str] = None
        self._refresh()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def mode(self) -> DisplayMode:
        return self.survey.display_mode

    @property
    def is_sequential(self) -> bool:
        return self.mode is DisplayMode.SEQUENTIAL

    @property
    def current_question(self) -> Optional[Question]:
        """The active question in sequential mode; None in all-at-once mode."""
        if not self.is_sequential or not self.visible_questions:
            return None
        return self.visible_questions[self.active_index]

    @property
    def questions_to_render(self) -> List[Question]:
        if self.is_sequential:
            current = self.current_question
            return [current] if current is not None else []
        return list(self.visible_questions)

    @property
    def progress(self) -> int:
        if not self.visible_questions:
            return 0
        return (answered_count(self.visible_questions, self.responses) * 100) // len(self.visible_questions)

    @property
    def unanswered(self) -> List[Question]:
        return find_unanswered(
            self.visible_questions,
            self.responses,
            require_all=self.survey.settings.require_all_questions,
        )

    @property
    def is_complete(self) -> bool:
        return not self.unanswered

    @property
    def is_last(self) -> bool:
        return bool(self.visible_questions) and self.active_index == len(self.visible_questions) - 1

    @property
    def primary_action(self) -> str:
        """``"submit"`` on the last visible question or in all-at-once mode."""
        if not self.is_sequential or not self.visible_questions or self.is_last:
            return ACTION_SUBMIT
        return ACTION_NEXT

    def _blocks_next(self, question: Question) -> bool:
        required = question.required or self.survey.settings.require_all_questions
        return required and not has_answer(self.responses, question.id)

    @property
    def can_go_next(self) -> bool:
        current = self.current_question
        if current is None or self.is_last:
            return False
        return not self._blocks_next(current)

    @property
    def can_go_previous(self) -> bool:
        return self.is_sequential and self.active_index > 0 and not self.submitting

    @property
    def can_submit(self) -> bool:
        return not self.submitting and not self.submitted

    def snapshot(self) -> FlowState:
        current = self.current_question
        return FlowState(
            mode=self.mode,
            visible_question_ids=tuple(q.id for q in self.visible_questions),
            active_index=self.active_index,
            active_question_id=current.id if current is not None else None,
            progress=self.progress,
            can_go_next=self.can_go_next,
            can_go_previous=self.can_go_previous,
            primary_action=self.primary_action,
            unanswered_count=len(self.unanswered),
            submitting=self.submitting,
            submitted=self.submitted,
            error=self.error,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _position(self, question_id: str) -> int:
        for index, question in enumerate(self.visible_questions):
            if question.id == question_id:
                return index
        return -1

    def _refresh(self) -> None:
        """Recompute the visible set and keep the active question in place."""
        active_id = self.current_question.id if self.current_question is not None else None
        self.visible_questions = resolve_visible(self.survey, self.responses)

        if not self.visible_questions:
            self.active_index = 0
            return

        position = self._position(active_id) if active_id is not None else -1
        if position != -1:
            self.active_index = position
        else:
            self.active_index = min(self.active_index, len(self.visible_questions) - 1)

    def answer(self, question_id: str, value: Any) -> None:
        """
        Store an answer and recompute visibility.

        In sequential mode with ``auto_advance`` the active question moves to
        the successor of the answered one in the NEW visible list, since the
        answer may have inserted or removed later questions.
        """
        if self.survey.get_question(question_id) is None:
            raise KeyError(f"Unknown question: {question_id}")

        current = self.current_question
        answered_active = current is not None and current.id == question_id

        self.responses[question_id] = value
        self._refresh()

        if answered_active and self.survey.settings.auto_advance:
            position = self._position(question_id)
            if position != -1 and position < len(self.visible_questions) - 1:
                self.active_index = position + 1

        logger.debug(
            "Answered %s; %d visible, active index %d",
            question_id, len(self.visible_questions), self.active_index,
        )

    def clear_answer(self, question_id: str) -> None:
        self.responses.pop(question_id, None)
        self._refresh()

    def go_next(self) -> bool:
        if not self.can_go_next:
            return False
        self.active_index += 1
        return True

    def go_previous(self) -> bool:
        if not self.can_go_previous:
            return False
        self.active_index -= 1
        return True

    def go_to(self, question_id: str) -> bool:
        """Jump to a visible question; False when it is not visible."""
        position = self._position(question_id)
        if position == -1:
            return False
        self.active_index = position
        return True

    def reset(self) -> None:
        """Start a fresh attempt: responses and submission state are cleared."""
        self.responses = {}
        self.active_index = 0
        self.submitting = False
        self.submitted = False
        self.result = None
        self.error = None
        self._refresh()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def response_entries(self) -> List[ResponseEntry]:
        return [ResponseEntry(question_id, value) for question_id, value in self.responses.items()]

    def submit(self) -> SubmissionResult:
        """
        Validate completion, then hand the responses to the collaborator.

        Raises:
            SubmissionInProgressError: a submission is already in flight
            SubmissionError: already submitted, or the collaborator failed;
                responses are kept for a retry
            IncompleteSurveyError: required visible questions unanswered;
                the first one becomes active and nothing is sent
            SurveyConfigurationError: no data source was supplied
        """
        if self.submitting:
            raise SubmissionInProgressError("A submission is already in progress")
        if self.submitted:
            raise SubmissionError("Survey has already been submitted")

        self.error = None
        unanswered = self.unanswered
        if unanswered:
            error = IncompleteSurveyError(unanswered)
            self.error = str(error)
            position = self._position(unanswered[0].id)
            if position != -1:
                self.active_index = position
            logger.info("Submit blocked for survey %s: %d unanswered", self.survey.id, error.count)
            raise error

        if self.data_source is None:
            raise SurveyConfigurationError("No data source configured for submission")

        entries = self.response_entries()
        self.submitting = True
        try:
            result = self.data_source.submit_responses(self.survey.id, entries)
        except Exception as exc:
            self.error = str(exc) or "Failed to submit survey"
            logger.warning("Submission failed for survey %s: %s", self.survey.id, self.error)
            raise SubmissionError(self.error, details={"survey_id": self.survey.id}) from exc
        finally:
            self.submitting = False

        self.result = result
        self.submitted = True
        logger.info("Survey %s submitted with %d response(s)", self.survey.id, len(entries))
        return result
