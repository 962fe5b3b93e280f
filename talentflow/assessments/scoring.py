"""
Progress and score reporting.

Progress counts rely solely on the answered predicate. Scores are produced
outside this system; this module only summarises them for display.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

from talentflow.assessments.answers import is_answered
from talentflow.assessments.models import Assessment, AssessmentScore
from talentflow.assessments.validation import visible_questions


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Progress:
    """Answered and total question counts for a respondent."""

    answered_count: int
    total_questions: int

    @property
    def percent(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return 100.0 * self.answered_count / self.total_questions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answeredCount": self.answered_count,
            "totalQuestions": self.total_questions,
            "progressPercent": self.percent,
        }


def compute_progress(assessment: Assessment, responses: Mapping[str, Any]) -> Progress:
    """
    Count answered questions across all sections.

    Questions hidden by their conditional logic are left out of both counts.
    """
    index = assessment.question_index()
    answered = 0
    total = 0
    for section in assessment.sections:
        for question in visible_questions(section, responses, index):
            total += 1
            if is_answered(responses.get(question.id)):
                answered += 1
    return Progress(answered_count=answered, total_questions=total)


def score_percent(score: AssessmentScore) -> int:
    """Percentage for one score record, rounded to the nearest integer."""
    if score.max_score <= 0:
        return 0
    return round_half_up(100.0 * score.score / score.max_score)


def average_percent(scores: Iterable[AssessmentScore]) -> Optional[int]:
    """
    Mean of score/maxScore over all records as a rounded percentage.

    Returns None when there are no records. A record with a non-positive
    max score contributes 0.
    """
    ratios = [
        (score.score / score.max_score) if score.max_score > 0 else 0.0
        for score in scores
    ]
    if not ratios:
        return None
    return round_half_up(100.0 * sum(ratios) / len(ratios))
