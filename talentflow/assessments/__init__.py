"""
Assessment definition and runtime.

The public surface of the assessment core is re-exported here.
"""

from .models import (
    Assessment,
    AssessmentResponse,
    AssessmentScore,
    ConditionalLogic,
    Question,
    QuestionType,
    QuestionValidation,
    Section,
    StructuralError,
    StructuralErrorCode,
    validate_structure,
)
from .answers import Answer, coerce_answer, is_answered
from .validation import (
    REQUIRED_MESSAGE,
    is_question_visible,
    validate_answer,
    validate_assessment,
    validate_section,
    visible_question_ids,
    visible_questions,
)
from .builder import AssessmentBuilder
from .scoring import Progress, average_percent, compute_progress, score_percent
from .runtime import AssessmentRuntime, RuntimeState
from .service import AssessmentService

__all__ = [
    'Answer',
    'Assessment',
    'AssessmentBuilder',
    'AssessmentResponse',
    'AssessmentRuntime',
    'AssessmentScore',
    'AssessmentService',
    'ConditionalLogic',
    'Progress',
    'Question',
    'QuestionType',
    'QuestionValidation',
    'REQUIRED_MESSAGE',
    'RuntimeState',
    'Section',
    'StructuralError',
    'StructuralErrorCode',
    'average_percent',
    'coerce_answer',
    'compute_progress',
    'is_answered',
    'is_question_visible',
    'score_percent',
    'validate_answer',
    'validate_assessment',
    'validate_section',
    'validate_structure',
    'visible_question_ids',
    'visible_questions',
]
