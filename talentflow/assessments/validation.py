"""
Response Validation

Pure functions that check response values against the question they
answer. Two passes exist:

1. ``validate_answer`` checks one value against one question's type and
   validation rules.
2. ``validate_section`` / ``validate_assessment`` apply it to every visible
   question and collect the messages keyed by question id.

Choice and file-upload answers are only checked for presence. A choice value
that is not among the declared options is accepted.
"""

from typing import Any, Dict, List, Mapping, Optional, Set

from talentflow.assessments.answers import (
    FileUploadAnswer,
    MultiChoiceAnswer,
    NumericAnswer,
    SingleChoiceAnswer,
    TextAnswer,
    coerce_answer,
    is_answered,
)
from talentflow.common.serialization import parse_number
from talentflow.assessments.models import Assessment, Question, Section

REQUIRED_MESSAGE = "This field is required"

__all__ = [
    'REQUIRED_MESSAGE',
    'is_answered',
    'validate_answer',
    'is_question_visible',
    'visible_questions',
    'visible_question_ids',
    'validate_section',
    'validate_assessment',
]


def _min_value_message(minimum: float) -> str:
    return f"Value must be at least {_format_bound(minimum)}"


def _max_value_message(maximum: float) -> str:
    return f"Value must be at most {_format_bound(maximum)}"


def _format_bound(bound: float) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def validate_answer(question: Question, value: Any) -> Optional[str]:
    """
    Validate one response value.

    Args:
        question: The question being answered
        value: The raw response value

    Returns:
        An error message, or None when the value is acceptable
    """
    if not is_answered(value):
        return REQUIRED_MESSAGE if question.required else None

    rules = question.validation
    answer = coerce_answer(question, value)

    if isinstance(answer, NumericAnswer):
        if rules is None:
            return None
        # Bounds that are not numbers are skipped; validate_structure reports them
        minimum = parse_number(rules.min)
        maximum = parse_number(rules.max)
        if answer.number is None:
            # Not a number: fails whichever bound exists
            if minimum is not None:
                return _min_value_message(minimum)
            if maximum is not None:
                return _max_value_message(maximum)
            return None
        if minimum is not None and answer.number < minimum:
            return _min_value_message(minimum)
        if maximum is not None and answer.number > maximum:
            return _max_value_message(maximum)
        return None

    if isinstance(answer, TextAnswer):
        if rules is None:
            return None
        length = len(answer.text)
        min_length = parse_number(rules.min_length)
        max_length = parse_number(rules.max_length)
        if min_length is not None and length < min_length:
            return f"Must be at least {_format_bound(min_length)} characters"
        if max_length is not None and length > max_length:
            return f"Must be at most {_format_bound(max_length)} characters"
        return None

    if isinstance(answer, (SingleChoiceAnswer, MultiChoiceAnswer, FileUploadAnswer)):
        return None

    raise ValueError(f"Unsupported answer: {answer!r}")


def _matches(candidate: Any, expected: Any) -> bool:
    return candidate == expected or str(candidate) == str(expected)


def _condition_met(question: Question, responses: Mapping[str, Any]) -> bool:
    logic = question.conditional_logic
    dependency = responses.get(logic.depends_on)
    if not is_answered(dependency):
        return False
    if isinstance(dependency, (list, tuple)):
        return any(_matches(item, logic.show_when) for item in dependency)
    return _matches(dependency, logic.show_when)


def is_question_visible(
    question: Question,
    responses: Mapping[str, Any],
    index: Optional[Mapping[str, Question]] = None
) -> bool:
    """
    Evaluate a question's conditional logic against the current responses.

    A question without conditional logic is always visible. Otherwise the
    answer to ``depends_on`` must equal ``show_when``, or contain it when
    the answer is a list.

    When ``index`` (question id to question) is given, the question it
    depends on must itself be visible, so an answer left behind on a hidden
    question does not keep its dependents shown. A dependency cycle counts
    as hidden.
    """
    visited = set()
    current = question
    while current.conditional_logic is not None:
        if current.id in visited or not _condition_met(current, responses):
            return False
        if index is None:
            return True
        visited.add(current.id)
        parent = index.get(current.conditional_logic.depends_on)
        if parent is None:
            return True
        current = parent
    return True


def visible_questions(
    section: Section,
    responses: Mapping[str, Any],
    index: Optional[Mapping[str, Question]] = None
) -> List[Question]:
    """Questions of a section that are shown for the given responses."""
    return [q for q in section.questions if is_question_visible(q, responses, index)]


def visible_question_ids(assessment: Assessment, responses: Mapping[str, Any]) -> Set[str]:
    """Ids of every question shown anywhere in the assessment."""
    index = assessment.question_index()
    return {
        q.id for q in assessment.iter_questions()
        if is_question_visible(q, responses, index)
    }


def validate_section(
    section: Section,
    responses: Mapping[str, Any],
    index: Optional[Mapping[str, Question]] = None
) -> Dict[str, str]:
    """
    Validate every visible question of a section.

    Args:
        section: The section to check
        responses: Mapping of question id to raw response value
        index: Questions of the whole assessment by id, so visibility
            follows dependencies into other sections

    Returns:
        Mapping of question id to error message; empty when the section
        may be left forward
    """
    errors: Dict[str, str] = {}
    for question in visible_questions(section, responses, index):
        message = validate_answer(question, responses.get(question.id))
        if message:
            errors[question.id] = message
    return errors


def validate_assessment(assessment: Assessment, responses: Mapping[str, Any]) -> Dict[str, str]:
    """Validate all sections of an assessment in display order."""
    index = assessment.question_index()
    errors: Dict[str, str] = {}
    for section in assessment.sections:
        errors.update(validate_section(section, responses, index))
    return errors
