"""
Typed answers.

Raw response values arrive as whatever the form produced. ``coerce_answer``
pairs each value with the type of the question it answers, so validation
works on a known shape instead of coercing on the fly.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from talentflow.assessments.models import Question, QuestionType
from talentflow.common.serialization import parse_number


def is_answered(value: Any) -> bool:
    """
    Whether a raw response value counts as answered.

    False for None, the empty string and empty lists; true for everything
    else, including ``0`` and ``"0"``. Required-agnostic: this is the one
    rule behind every progress counter.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


@dataclass(frozen=True)
class TextAnswer:
    question_type: QuestionType
    raw: Any
    text: str


@dataclass(frozen=True)
class NumericAnswer:
    question_type: QuestionType
    raw: Any
    number: Optional[float]


@dataclass(frozen=True)
class SingleChoiceAnswer:
    question_type: QuestionType
    raw: Any
    choice: str


@dataclass(frozen=True)
class MultiChoiceAnswer:
    question_type: QuestionType
    raw: Any
    choices: Tuple[str, ...]


@dataclass(frozen=True)
class FileUploadAnswer:
    question_type: QuestionType
    raw: Any


Answer = Union[TextAnswer, NumericAnswer, SingleChoiceAnswer, MultiChoiceAnswer, FileUploadAnswer]


def coerce_answer(question: Question, value: Any) -> Answer:
    """
    Tag a raw value with the type of the question it answers.

    Args:
        question: The question being answered
        value: The raw response value

    Returns:
        The typed answer
    """
    question_type = question.type
    if question_type in (QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT):
        return TextAnswer(question_type, value, "" if value is None else str(value))
    if question_type is QuestionType.NUMERIC:
        return NumericAnswer(question_type, value, parse_number(value))
    if question_type is QuestionType.SINGLE_CHOICE:
        return SingleChoiceAnswer(question_type, value, "" if value is None else str(value))
    if question_type is QuestionType.MULTI_CHOICE:
        if value is None:
            choices = ()
        elif isinstance(value, (list, tuple)):
            choices = tuple(str(item) for item in value)
        else:
            choices = (str(value),)
        return MultiChoiceAnswer(question_type, value, choices)
    if question_type is QuestionType.FILE_UPLOAD:
        return FileUploadAnswer(question_type, value)
    raise ValueError(f"Unsupported question type: {question_type}")
