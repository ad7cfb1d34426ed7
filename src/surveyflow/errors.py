"""
Exception hierarchy for the survey engine.

Error categories:
    - Format errors (a persisted survey cannot be read)
    - Configuration errors (engine settings or missing collaborators)
    - Authoring errors (user-correctable builder problems)
    - Completion errors (required visible questions unanswered)
    - Submission errors (the persistence collaborator failed)

Fail-closed situations (unknown operator, dangling or forward condition
reference) are NOT errors: they evaluate to "condition not satisfied".
"""

from __future__ import annotations

from typing import List, Optional


class SurveyError(Exception):
    """Base exception for all survey engine errors."""

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class SurveyFormatError(SurveyError):
    """Raised when a serialized survey does not match the interchange schema."""


class SurveyConfigurationError(SurveyError):
    """Raised for invalid engine settings or a missing collaborator."""


class AuthoringError(SurveyError):
    """A builder operation was rejected. Surfaced inline to the author."""


class SurveyValidationError(AuthoringError):
    """Raised by ``SurveyBuilder.build`` when the survey has authoring errors."""

    def __init__(self, errors: List[str]):
        super().__init__(
            f"Survey has {len(errors)} authoring error(s): {errors[0]}" if errors else "Survey is invalid",
            details={"errors": list(errors)},
        )
        self.errors = list(errors)


class IncompleteSurveyError(SurveyError):
    """
    One or more visible, required questions lack a valid answer.

    Carries the count and the first offender so the caller can focus it.
    """

    def __init__(self, unanswered):
        self.unanswered = list(unanswered)
        self.count = len(self.unanswered)
        self.first_question = self.unanswered[0] if self.unanswered else None
        super().__init__(
            f"Please answer all required questions ({self.count} remaining)",
            details={
                "count": self.count,
                "first_question_id": self.first_question.id if self.first_question else None,
            },
        )


class SubmissionError(SurveyError):
    """The persistence collaborator rejected or failed the submission."""


class SubmissionInProgressError(SubmissionError):
    """A submission is already in flight; repeat submits are refused."""
