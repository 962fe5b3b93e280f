"""
Assessment Models

This module defines the assessment document model: an Assessment owns an
ordered list of Sections, each owning an ordered list of Questions. All
models are immutable; the builder produces new values instead of editing
existing ones.

The module also holds the one structural check applied to a whole document
before it is persisted (``validate_structure``).
"""

import enum
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from talentflow.common.serialization import (
    drop_none,
    parse_datetime,
    parse_number,
    serialize,
    utcnow,
)


class QuestionType(enum.Enum):
    """The closed set of question types."""
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    NUMERIC = "numeric"
    FILE_UPLOAD = "file-upload"

    @property
    def is_choice(self) -> bool:
        return self in CHOICE_TYPES

    @property
    def is_text(self) -> bool:
        return self in TEXT_TYPES


CHOICE_TYPES = frozenset({QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE})
TEXT_TYPES = frozenset({QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT})


def _coerce_bound(value: Any, integral: bool) -> Any:
    """Numeric strings become numbers; anything unparseable is kept as given."""
    if value is None or isinstance(value, bool):
        return value
    number = parse_number(value)
    if number is None:
        return value
    if integral:
        return int(number) if number.is_integer() else value
    return value if isinstance(value, (int, float)) else number


@dataclass(frozen=True)
class QuestionValidation:
    """
    Bounds checked at response time: lengths for text, values for numeric.

    Numeric strings such as ``"50"`` are coerced on construction. Values that
    are not numbers are kept so ``validate_structure`` can report them.
    """

    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "min_length", _coerce_bound(self.min_length, integral=True))
        object.__setattr__(self, "max_length", _coerce_bound(self.max_length, integral=True))
        object.__setattr__(self, "min", _coerce_bound(self.min, integral=False))
        object.__setattr__(self, "max", _coerce_bound(self.max, integral=False))

    def problems(self) -> List[str]:
        """Describe bounds that cannot be applied to an answer."""
        found = []
        lengths = (("minLength", self.min_length), ("maxLength", self.max_length))
        for name, value in lengths:
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                found.append(f"{name} must be a whole number, got {value!r}")
            elif value is not None and value < 0:
                found.append(f"{name} must not be negative")
        for name, value in (("min", self.min), ("max", self.max)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                found.append(f"{name} must be a number, got {value!r}")
        if found:
            return found

        if None not in (self.min_length, self.max_length) and self.min_length > self.max_length:
            found.append("minLength is greater than maxLength")
        if None not in (self.min, self.max) and self.min > self.max:
            found.append("min is greater than max")
        return found

    def to_dict(self) -> Dict[str, Any]:
        return drop_none({
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "min": self.min,
            "max": self.max,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuestionValidation':
        return cls(
            min_length=data.get("minLength"),
            max_length=data.get("maxLength"),
            min=data.get("min"),
            max=data.get("max"),
        )


@dataclass(frozen=True)
class ConditionalLogic:
    """Show a question only when another question's answer matches."""

    depends_on: str
    show_when: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"dependsOn": self.depends_on, "showWhen": serialize(self.show_when)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConditionalLogic':
        return cls(depends_on=data["dependsOn"], show_when=data.get("showWhen"))


@dataclass(frozen=True)
class Question:
    """
    A single prompt inside a section.

    Attributes:
        id: Identifier, unique across the whole assessment
        type: One of the QuestionType values
        question: The prompt text
        required: Whether an answer is needed to move past the section
        options: Answer options; always empty for non-choice types
        validation: Optional bounds for numeric and text answers
        conditional_logic: Optional visibility rule
        order: Position within the owning section
    """

    id: str
    type: QuestionType
    question: str
    required: bool = False
    options: Tuple[str, ...] = ()
    validation: Optional[QuestionValidation] = None
    conditional_logic: Optional[ConditionalLogic] = None
    order: int = 0

    def __post_init__(self):
        if isinstance(self.type, str):
            object.__setattr__(self, "type", QuestionType(self.type))
        options = tuple(self.options or ()) if self.type.is_choice else ()
        object.__setattr__(self, "options", options)
        if isinstance(self.validation, dict):
            object.__setattr__(self, "validation", QuestionValidation.from_dict(self.validation))
        if isinstance(self.conditional_logic, dict):
            object.__setattr__(
                self, "conditional_logic", ConditionalLogic.from_dict(self.conditional_logic)
            )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "type": self.type.value,
            "question": self.question,
            "required": self.required,
            "order": self.order,
        }
        if self.type.is_choice:
            result["options"] = list(self.options)
        if self.validation is not None:
            result["validation"] = self.validation.to_dict()
        if self.conditional_logic is not None:
            result["conditionalLogic"] = self.conditional_logic.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Question':
        validation = data.get("validation")
        conditional = data.get("conditionalLogic")
        return cls(
            id=data["id"],
            type=QuestionType(data["type"]),
            question=data.get("question", ""),
            required=bool(data.get("required", False)),
            options=tuple(data.get("options") or ()),
            validation=QuestionValidation.from_dict(validation) if validation else None,
            conditional_logic=ConditionalLogic.from_dict(conditional) if conditional else None,
            order=int(data.get("order", 0)),
        )


@dataclass(frozen=True)
class Section:
    """An ordered group of questions; the unit of forward navigation."""

    id: str
    title: str
    description: Optional[str] = None
    questions: Tuple[Question, ...] = ()
    order: int = 0

    def __post_init__(self):
        object.__setattr__(self, "questions", tuple(self.questions))

    def find_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "order": self.order,
        }
        if self.description is not None:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Section':
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description"),
            questions=tuple(Question.from_dict(q) for q in data.get("questions", [])),
            order=int(data.get("order", 0)),
        )


@dataclass(frozen=True)
class Assessment:
    """
    Root document of the assessment model.

    ``job_id`` references a Job owned elsewhere. ``shareable_link`` is the
    opaque token used for public lookup and never changes once generated.
    """

    id: str
    job_id: str
    title: str
    description: str = ""
    sections: Tuple[Section, ...] = ()
    is_published: bool = False
    shareable_link: str = ""
    created_at: datetime.datetime = field(default_factory=utcnow)
    updated_at: datetime.datetime = field(default_factory=utcnow)

    def __post_init__(self):
        object.__setattr__(self, "sections", tuple(self.sections))

    def iter_questions(self) -> Iterator[Question]:
        for section in self.sections:
            yield from section.questions

    @property
    def question_count(self) -> int:
        return sum(len(section.questions) for section in self.sections)

    def find_section(self, section_id: str) -> Optional[Section]:
        return next((s for s in self.sections if s.id == section_id), None)

    def find_question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.iter_questions() if q.id == question_id), None)

    def question_index(self) -> Dict[str, Question]:
        """Questions keyed by id, first occurrence winning."""
        index: Dict[str, Question] = {}
        for question in self.iter_questions():
            index.setdefault(question.id, question)
        return index

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "jobId": self.job_id,
            "title": self.title,
            "description": self.description,
            "sections": [s.to_dict() for s in self.sections],
            "isPublished": self.is_published,
            "shareableLink": self.shareable_link,
            "createdAt": serialize(self.created_at),
            "updatedAt": serialize(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Assessment':
        return cls(
            id=data["id"],
            job_id=data.get("jobId", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            sections=tuple(Section.from_dict(s) for s in data.get("sections", [])),
            is_published=bool(data.get("isPublished", False)),
            shareable_link=data.get("shareableLink", ""),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )


@dataclass(frozen=True)
class AssessmentResponse:
    """
    A respondent's submitted answers, persisted once on completion.

    ``question_snapshot`` keeps the serialized definition of every question
    presented to the respondent, so later edits to the assessment do not
    orphan the answers.
    """

    id: str
    assessment_id: str
    responses: Dict[str, Any] = field(default_factory=dict)
    candidate_id: Optional[str] = None
    completed_at: Optional[datetime.datetime] = None
    created_at: datetime.datetime = field(default_factory=utcnow)
    question_snapshot: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return drop_none({
            "id": self.id,
            "assessmentId": self.assessment_id,
            "candidateId": self.candidate_id,
            "responses": serialize(self.responses),
            "completedAt": serialize(self.completed_at),
            "createdAt": serialize(self.created_at),
            "questionSnapshot": serialize(self.question_snapshot),
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssessmentResponse':
        return cls(
            id=data["id"],
            assessment_id=data["assessmentId"],
            responses=dict(data.get("responses") or {}),
            candidate_id=data.get("candidateId"),
            completed_at=parse_datetime(data.get("completedAt")),
            created_at=parse_datetime(data.get("createdAt")) or utcnow(),
            question_snapshot=dict(data.get("questionSnapshot") or {}),
        )


@dataclass(frozen=True)
class AssessmentScore:
    """Read-only score summary attached to a candidate."""

    assessment_id: str
    score: float
    max_score: float
    completed_at: datetime.datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assessmentId": self.assessment_id,
            "score": self.score,
            "maxScore": self.max_score,
            "completedAt": serialize(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssessmentScore':
        return cls(
            assessment_id=data["assessmentId"],
            score=data["score"],
            max_score=data["maxScore"],
            completed_at=parse_datetime(data.get("completedAt")) or utcnow(),
        )


#------------------------------------------------------------------------------
# Structural validation
#------------------------------------------------------------------------------

class StructuralErrorCode(enum.Enum):
    DUPLICATE_ID = "duplicate_id"
    NON_CONTIGUOUS_ORDER = "non_contiguous_order"
    MISSING_OPTIONS = "missing_options"
    INVALID_DEPENDENCY = "invalid_dependency"
    INVALID_VALIDATION = "invalid_validation"


@dataclass(frozen=True)
class StructuralError:
    """One structural violation found in an assessment document."""

    code: StructuralErrorCode
    message: str
    path: str
    subject_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return drop_none({
            "code": self.code.value,
            "message": self.message,
            "path": self.path,
            "subjectId": self.subject_id,
        })


def validate_structure(assessment: Assessment) -> List[StructuralError]:
    """
    Check an assessment document for structural problems.

    Covers duplicate section or question ids, order values that do not match
    list position, choice questions without options, and conditional logic
    pointing at an unknown question, at the question itself or around a
    cycle. Validation bounds must be numbers that can be met. Question ids
    must be unique across the whole assessment because responses are keyed
    by question id alone.

    Args:
        assessment: The document to check

    Returns:
        List of violations, empty when the document is well-formed
    """
    errors: List[StructuralError] = []
    seen_sections = set()
    seen_questions = set()
    all_question_ids = {q.id for q in assessment.iter_questions()}
    parents = {
        q.id: q.conditional_logic.depends_on
        for q in assessment.iter_questions()
        if q.conditional_logic is not None
    }

    for s_index, section in enumerate(assessment.sections):
        s_path = f"sections[{s_index}]"
        if section.id in seen_sections:
            errors.append(StructuralError(
                StructuralErrorCode.DUPLICATE_ID,
                f"Duplicate section id '{section.id}'",
                s_path,
                section.id,
            ))
        seen_sections.add(section.id)

        if section.order != s_index:
            errors.append(StructuralError(
                StructuralErrorCode.NON_CONTIGUOUS_ORDER,
                f"Section order {section.order} does not match position {s_index}",
                s_path,
                section.id,
            ))

        for q_index, question in enumerate(section.questions):
            q_path = f"{s_path}.questions[{q_index}]"
            if question.id in seen_questions:
                errors.append(StructuralError(
                    StructuralErrorCode.DUPLICATE_ID,
                    f"Duplicate question id '{question.id}'",
                    q_path,
                    question.id,
                ))
            seen_questions.add(question.id)

            if question.order != q_index:
                errors.append(StructuralError(
                    StructuralErrorCode.NON_CONTIGUOUS_ORDER,
                    f"Question order {question.order} does not match position {q_index}",
                    q_path,
                    question.id,
                ))

            if question.type.is_choice and not question.options:
                errors.append(StructuralError(
                    StructuralErrorCode.MISSING_OPTIONS,
                    "Choice question has no options",
                    q_path,
                    question.id,
                ))

            if question.validation is not None:
                for problem in question.validation.problems():
                    errors.append(StructuralError(
                        StructuralErrorCode.INVALID_VALIDATION,
                        problem,
                        f"{q_path}.validation",
                        question.id,
                    ))

            logic = question.conditional_logic
            if logic is not None:
                if logic.depends_on == question.id:
                    errors.append(StructuralError(
                        StructuralErrorCode.INVALID_DEPENDENCY,
                        "Question cannot depend on itself",
                        q_path,
                        question.id,
                    ))
                elif logic.depends_on not in all_question_ids:
                    errors.append(StructuralError(
                        StructuralErrorCode.INVALID_DEPENDENCY,
                        f"Question depends on unknown question '{logic.depends_on}'",
                        q_path,
                        question.id,
                    ))
                elif _in_dependency_cycle(question.id, parents):
                    errors.append(StructuralError(
                        StructuralErrorCode.INVALID_DEPENDENCY,
                        f"Question is part of a dependency cycle through '{logic.depends_on}'",
                        q_path,
                        question.id,
                    ))

    return errors


def _in_dependency_cycle(question_id: str, parents: Dict[str, str]) -> bool:
    """Follow depends-on links from ``question_id`` and report a return to it."""
    seen = set()
    current = parents.get(question_id)
    while current is not None and current not in seen:
        if current == question_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False
