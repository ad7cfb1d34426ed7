"""
Survey Analyzer — load-time validation of the condition graph.

The builder only lets authors condition on earlier choice questions, but a
survey may arrive from anywhere. This module checks a Survey once:
    - Duplicate question ids
    - Dangling references (source question does not exist)
    - Forward and self references (source is not strictly earlier)
    - Unknown operators and logic operators

IMPORTANT: ``analyze_survey`` does NOT modify the survey. It only produces
a read-only report. ``sanitize_survey`` returns a cleaned copy.
"""

from __future__ import annotations

import copy
import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from surveyflow.model import ConditionOperator, LogicOperator, Survey

logger = logging.getLogger(__name__)

# (owning question id, condition id, referenced question id)
Reference = Tuple[str, str, str]


@dataclass
class SurveyReport:
    """Analysis report for a survey's condition graph."""

    survey_id: str
    total_questions: int = 0
    total_conditions: int = 0
    conditional_questions: int = 0

    duplicate_question_ids: Set[str] = field(default_factory=set)
    dangling_references: List[Reference] = field(default_factory=list)
    forward_references: List[Reference] = field(default_factory=list)
    unknown_operators: List[Tuple[str, str]] = field(default_factory=list)
    unknown_logic_operators: List[str] = field(default_factory=list)

    # Source question id -> number of conditions referencing it
    source_usage: Dict[str, int] = field(default_factory=dict)

    warnings: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.warnings

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_survey(survey: Survey) -> SurveyReport:
    """
    Inspect every condition of ``survey``.

    Returns a SurveyReport with findings and warnings.
    """
    report = SurveyReport(survey_id=survey.id)
    report.total_questions = len(survey.questions)

    position: Dict[str, int] = {}
    for index, question in enumerate(survey.questions):
        if question.id in position:
            report.duplicate_question_ids.add(question.id)
        else:
            position[question.id] = index

    for index, question in enumerate(survey.questions):
        if question.conditions:
            report.conditional_questions += 1
        if not isinstance(question.logic_operator, LogicOperator):
            report.unknown_logic_operators.append(question.id)

        for condition in question.conditions:
            report.total_conditions += 1
            source_id = condition.question_id or ""
            reference = (question.id, condition.id, source_id)

            if not isinstance(condition.operator, ConditionOperator):
                report.unknown_operators.append((question.id, str(condition.operator)))

            if source_id not in position:
                report.dangling_references.append(reference)
                continue

            report.source_usage[source_id] = report.source_usage.get(source_id, 0) + 1
            if position[source_id] >= index:
                report.forward_references.append(reference)

    # =========================================================================
    # WARNING FLAGS
    # =========================================================================

    if report.duplicate_question_ids:
        report.add_warning(
            f"Duplicate question ids: {', '.join(sorted(report.duplicate_question_ids))}"
        )

    for owner, condition_id, source_id in report.dangling_references:
        report.add_warning(
            f"Condition {condition_id} on {owner} references missing question {source_id or '<none>'}"
        )

    for owner, condition_id, source_id in report.forward_references:
        report.add_warning(
            f"Condition {condition_id} on {owner} references {source_id}, which does not precede it"
        )

    for owner, operator in report.unknown_operators:
        report.add_warning(f"Unknown operator {operator!r} on {owner}")

    if report.unknown_logic_operators:
        report.add_warning(
            f"Unknown logic operator on: {', '.join(report.unknown_logic_operators)}"
        )

    return report


def sanitize_survey(survey: Survey) -> Survey:
    """
    Return a deep copy of ``survey`` without unsatisfiable conditions.

    Dangling, forward and self references are removed. Each removal emits
    a UserWarning and a log record. Unknown operators are kept: they
    already fail closed at evaluation time.
    """
    report = analyze_survey(survey)
    invalid = {
        (owner, condition_id)
        for owner, condition_id, _ in report.dangling_references + report.forward_references
    }

    cleaned = copy.deepcopy(survey)
    if not invalid:
        return cleaned

    for question in cleaned.questions:
        kept = []
        for condition in question.conditions:
            if (question.id, condition.id) in invalid:
                message = (
                    f"Removed condition {condition.id} from {question.id}: "
                    f"source {condition.question_id!r} is not an earlier question"
                )
                warnings.warn(message, UserWarning)
                logger.warning(message)
                continue
            kept.append(condition)
        question.conditions = kept

    return cleaned
