"""
Assessment Builder

Copy-on-write editing operations over an Assessment. Every function takes
an Assessment and returns a new one; the input is never modified. Section
and question ``order`` values are re-derived from list position after any
delete or reorder, so an edited document never has order gaps.

Persistence is not handled here. ``AssessmentBuilder`` keeps the working
copy for an editing session and hands it to the service on save.
"""

import uuid
import dataclasses
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from talentflow.assessments.models import (
    Assessment,
    ConditionalLogic,
    Question,
    QuestionType,
    QuestionValidation,
    Section,
    StructuralError,
    validate_structure,
)
from talentflow.assessments.validation import visible_questions
from talentflow.common.exceptions import AssessmentStateError
from talentflow.common.logger import app_logger
from talentflow.common.serialization import utcnow

logger = app_logger.getChild("assessments.builder")

DEFAULT_SECTION_TITLE = "New Section"
DEFAULT_QUESTION_TEXT = "New Question"
PLACEHOLDER_OPTIONS = ("Option 1", "Option 2")

EDITABLE_SECTION_FIELDS = frozenset({"title", "description"})
EDITABLE_QUESTION_FIELDS = frozenset({
    "type", "question", "required", "options", "validation", "conditional_logic",
})


def new_id() -> str:
    return str(uuid.uuid4())


def generate_share_link() -> str:
    """Produce a fresh opaque share link token."""
    return uuid.uuid4().hex


def create_assessment(
    job_id: str,
    title: str,
    description: str = "",
    share_link: Optional[str] = None
) -> Assessment:
    """Create an empty, unpublished assessment with a fresh share link."""
    now = utcnow()
    return Assessment(
        id=new_id(),
        job_id=job_id,
        title=title,
        description=description,
        sections=(),
        is_published=False,
        shareable_link=share_link or generate_share_link(),
        created_at=now,
        updated_at=now,
    )


def _renumber(items: Sequence[Any]) -> Tuple[Any, ...]:
    return tuple(
        item if item.order == index else dataclasses.replace(item, order=index)
        for index, item in enumerate(items)
    )


def _check_fields(changes: Mapping[str, Any], allowed: frozenset, kind: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Cannot update {kind} fields: {', '.join(sorted(unknown))}")


def _permute(items: Sequence[Any], ordered_ids: Sequence[str], kind: str) -> Tuple[Any, ...]:
    by_id = {item.id: item for item in items}
    if len(ordered_ids) != len(items) or set(ordered_ids) != set(by_id):
        raise ValueError(f"Reorder requires a permutation of the existing {kind} ids")
    return _renumber([by_id[item_id] for item_id in ordered_ids])


def _replace_section(assessment: Assessment, section_id: str,
                     change: Callable[[Section], Section]) -> Assessment:
    if assessment.find_section(section_id) is None:
        return assessment
    sections = tuple(change(s) if s.id == section_id else s for s in assessment.sections)
    return dataclasses.replace(assessment, sections=sections)


def _replace_question(assessment: Assessment, section_id: str, question_id: str,
                      change: Callable[[Question], Question]) -> Assessment:
    section = assessment.find_section(section_id)
    if section is None or section.find_question(question_id) is None:
        return assessment

    def rewrite(target: Section) -> Section:
        questions = tuple(change(q) if q.id == question_id else q for q in target.questions)
        return dataclasses.replace(target, questions=questions)

    return _replace_section(assessment, section_id, rewrite)


#------------------------------------------------------------------------------
# Sections
#------------------------------------------------------------------------------

def add_section(assessment: Assessment, title: str = DEFAULT_SECTION_TITLE,
                description: str = "") -> Assessment:
    section = Section(
        id=new_id(),
        title=title,
        description=description,
        questions=(),
        order=len(assessment.sections),
    )
    return dataclasses.replace(assessment, sections=assessment.sections + (section,))


def update_section(assessment: Assessment, section_id: str,
                   changes: Mapping[str, Any]) -> Assessment:
    """Merge ``changes`` into the matching section; no-op when it is absent."""
    _check_fields(changes, EDITABLE_SECTION_FIELDS, "section")
    return _replace_section(
        assessment, section_id, lambda s: dataclasses.replace(s, **changes)
    )


def delete_section(assessment: Assessment, section_id: str) -> Assessment:
    if assessment.find_section(section_id) is None:
        return assessment
    remaining = [s for s in assessment.sections if s.id != section_id]
    return dataclasses.replace(assessment, sections=_renumber(remaining))


def reorder_sections(assessment: Assessment, ordered_ids: Sequence[str]) -> Assessment:
    """
    Put the sections in the given order.

    Raises:
        ValueError: If ``ordered_ids`` is not a permutation of the section ids
    """
    return dataclasses.replace(
        assessment, sections=_permute(assessment.sections, ordered_ids, "section")
    )


def move_section(assessment: Assessment, section_id: str, new_index: int) -> Assessment:
    """Move one section to ``new_index`` (drag-and-drop style)."""
    ids = [s.id for s in assessment.sections]
    if section_id not in ids:
        return assessment
    ids.remove(section_id)
    ids.insert(max(0, min(new_index, len(ids))), section_id)
    return reorder_sections(assessment, ids)


#------------------------------------------------------------------------------
# Questions
#------------------------------------------------------------------------------

def add_question(assessment: Assessment, section_id: str) -> Assessment:
    """Append a single-choice question with placeholder options."""
    section = assessment.find_section(section_id)
    if section is None:
        return assessment
    question = Question(
        id=new_id(),
        type=QuestionType.SINGLE_CHOICE,
        question=DEFAULT_QUESTION_TEXT,
        required=False,
        options=PLACEHOLDER_OPTIONS,
        order=len(section.questions),
    )
    return _replace_section(
        assessment, section_id,
        lambda s: dataclasses.replace(s, questions=s.questions + (question,)),
    )


def _coerce_question_changes(question: Question, changes: Mapping[str, Any]) -> Dict[str, Any]:
    values = dict(changes)
    if isinstance(values.get("type"), str):
        values["type"] = QuestionType(values["type"])
    if isinstance(values.get("validation"), dict):
        values["validation"] = QuestionValidation.from_dict(values["validation"])
    if isinstance(values.get("conditional_logic"), dict):
        values["conditional_logic"] = ConditionalLogic.from_dict(values["conditional_logic"])
    if "options" in values:
        values["options"] = tuple(values["options"] or ())

    new_type = values.get("type", question.type)
    if new_type.is_choice and not question.type.is_choice and "options" not in values:
        values["options"] = PLACEHOLDER_OPTIONS
    return values


def update_question(assessment: Assessment, section_id: str, question_id: str,
                    changes: Mapping[str, Any]) -> Assessment:
    """
    Merge ``changes`` into one question of one section.

    Switching to a non-choice type drops the options; switching into a
    choice type without supplying options restores the placeholders.
    """
    _check_fields(changes, EDITABLE_QUESTION_FIELDS, "question")
    return _replace_question(
        assessment, section_id, question_id,
        lambda q: dataclasses.replace(q, **_coerce_question_changes(q, changes)),
    )


def delete_question(assessment: Assessment, section_id: str, question_id: str) -> Assessment:
    section = assessment.find_section(section_id)
    if section is None or section.find_question(question_id) is None:
        return assessment
    return _replace_section(
        assessment, section_id,
        lambda s: dataclasses.replace(
            s, questions=_renumber([q for q in s.questions if q.id != question_id])
        ),
    )


def reorder_questions(assessment: Assessment, section_id: str,
                      ordered_ids: Sequence[str]) -> Assessment:
    return _replace_section(
        assessment, section_id,
        lambda s: dataclasses.replace(s, questions=_permute(s.questions, ordered_ids, "question")),
    )


#------------------------------------------------------------------------------
# Options
#------------------------------------------------------------------------------

def _option_index(question: Question, index: int) -> int:
    if not 0 <= index < len(question.options):
        raise IndexError(f"Option index {index} out of range for question {question.id}")
    return index


def _choice_question(assessment: Assessment, section_id: str, question_id: str) -> Question:
    section = assessment.find_section(section_id)
    question = section.find_question(question_id) if section else None
    if question is None:
        raise ValueError(f"Question {question_id} not found in section {section_id}")
    if not question.type.is_choice:
        raise AssessmentStateError(
            f"Options are only editable on choice questions, not {question.type.value}",
            state=question.type.value,
        )
    return question


def add_option(assessment: Assessment, section_id: str, question_id: str,
               value: Optional[str] = None) -> Assessment:
    question = _choice_question(assessment, section_id, question_id)
    option = value if value is not None else f"Option {len(question.options) + 1}"
    return _replace_question(
        assessment, section_id, question_id,
        lambda q: dataclasses.replace(q, options=q.options + (option,)),
    )


def update_option(assessment: Assessment, section_id: str, question_id: str,
                  index: int, value: str) -> Assessment:
    question = _choice_question(assessment, section_id, question_id)
    options = list(question.options)
    options[_option_index(question, index)] = value
    return _replace_question(
        assessment, section_id, question_id,
        lambda q: dataclasses.replace(q, options=tuple(options)),
    )


def remove_option(assessment: Assessment, section_id: str, question_id: str,
                  index: int) -> Assessment:
    """Remove one option; removing the last leaves an empty, unanswerable list."""
    question = _choice_question(assessment, section_id, question_id)
    options = list(question.options)
    del options[_option_index(question, index)]
    return _replace_question(
        assessment, section_id, question_id,
        lambda q: dataclasses.replace(q, options=tuple(options)),
    )


#------------------------------------------------------------------------------
# Publishing
#------------------------------------------------------------------------------

def publish(assessment: Assessment) -> Assessment:
    """
    Open the assessment to respondents.

    One-way and idempotent: publishing twice returns the same value.
    """
    if assessment.is_published:
        return assessment
    return dataclasses.replace(assessment, is_published=True, updated_at=utcnow())


class AssessmentBuilder:
    """
    Working copy of an assessment during an editing session.

    Operations replace ``assessment`` with a new value. A failed save leaves
    the working copy untouched so no edits are lost.
    """

    def __init__(self, assessment: Assessment):
        self.assessment = assessment
        self._saved = assessment

    @property
    def is_dirty(self) -> bool:
        return self.assessment != self._saved

    def apply(self, operation: Callable[..., Assessment], *args: Any, **kwargs: Any) -> Assessment:
        """Run a builder operation against the working copy."""
        self.assessment = operation(self.assessment, *args, **kwargs)
        return self.assessment

    def validate(self) -> List[StructuralError]:
        return validate_structure(self.assessment)

    def preview(self, responses: Optional[Mapping[str, Any]] = None) -> List[Tuple[Section, List[Question]]]:
        """Sections with the questions a respondent would see for ``responses``."""
        responses = responses or {}
        index = self.assessment.question_index()
        return [(s, visible_questions(s, responses, index)) for s in self.assessment.sections]

    async def save(self, service) -> List[StructuralError]:
        """
        Persist the working copy through an AssessmentService.

        Returns:
            Structural violations; empty when the save went through

        Raises:
            PersistenceError: If the store call failed
        """
        errors, saved = await service.save_assessment(self.assessment)
        if errors:
            logger.info(
                f"Assessment {self.assessment.id} not saved: {len(errors)} structural error(s)"
            )
            return errors
        self.assessment = saved
        self._saved = saved
        return []
