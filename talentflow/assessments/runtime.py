"""
Assessment Runtime

Stateful wizard a respondent walks through after opening a share link.

States:
    LOADING -> NOT_FOUND       no assessment has the link
    LOADING -> NOT_PUBLISHED   found, but not published (terminal)
    LOADING -> IN_PROGRESS     found and published
    IN_PROGRESS -> COMPLETED   on a successful submit (terminal)

Forward navigation and submission are gated by section validation; going
back never validates. The runtime expects a single caller: navigation and
submit calls must be awaited one after the other.
"""

import enum
import uuid
from typing import Any, Callable, Dict, Optional

from talentflow.assessments.answers import is_answered
from talentflow.assessments.models import Assessment, AssessmentResponse, Section
from talentflow.assessments.scoring import Progress, compute_progress
from talentflow.assessments.validation import validate_section, visible_question_ids
from talentflow.common.exceptions import AssessmentStateError
from talentflow.common.logger import LoggerAdapter, app_logger
from talentflow.common.serialization import utcnow
from talentflow.store.base import ASSESSMENTS, ASSESSMENT_RESPONSES, DocumentStore


class RuntimeState(enum.Enum):
    LOADING = "loading"
    NOT_FOUND = "not_found"
    NOT_PUBLISHED = "not_published"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


async def find_by_share_link(store: DocumentStore, share_link: str) -> Optional[Assessment]:
    """Scan the assessments collection for a share link."""
    for document in await store.list(ASSESSMENTS):
        if document.get("shareableLink") == share_link:
            return Assessment.from_dict(document)
    return None


class AssessmentRuntime:
    """
    One respondent's pass through a published assessment.

    Attributes:
        state: Current RuntimeState
        assessment: The loaded assessment, once found
        current_section_index: Index of the section on screen
        responses: Question id to raw response value
        errors: Question id to validation message from the last gated step
        response: The persisted AssessmentResponse once completed
    """

    def __init__(
        self,
        store: DocumentStore,
        share_link: str,
        candidate_id: Optional[str] = None,
        clock: Callable[[], Any] = utcnow
    ):
        self.store = store
        self.share_link = share_link
        self.candidate_id = candidate_id
        self.clock = clock

        self.state = RuntimeState.LOADING
        self.assessment: Optional[Assessment] = None
        self.current_section_index = 0
        self.responses: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.response: Optional[AssessmentResponse] = None
        self._submitting = False

        self.logger = LoggerAdapter(
            app_logger.getChild("assessments.runtime"), {"share_link": share_link}
        )

    def _require(self, *states: RuntimeState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise AssessmentStateError(
                f"Operation requires state {allowed}, runtime is {self.state.value}",
                state=self.state.value,
            )

    def _transition(self, state: RuntimeState) -> None:
        self.logger.debug(f"Runtime {self.state.value} -> {state.value}")
        self.state = state

    async def load(self) -> RuntimeState:
        """
        Look the assessment up by share link.

        A store failure propagates and leaves the runtime in LOADING, so the
        caller may call ``load`` again.
        """
        self._require(RuntimeState.LOADING)
        assessment = await find_by_share_link(self.store, self.share_link)

        if assessment is None:
            self._transition(RuntimeState.NOT_FOUND)
        elif not assessment.is_published:
            self.assessment = assessment
            self._transition(RuntimeState.NOT_PUBLISHED)
        else:
            self.assessment = assessment
            self.current_section_index = 0
            self.responses = {}
            self.errors = {}
            self._transition(RuntimeState.IN_PROGRESS)
            self.logger.info(f"Started assessment {assessment.id}")
        return self.state

    @property
    def section_count(self) -> int:
        return len(self.assessment.sections) if self.assessment else 0

    @property
    def current_section(self) -> Optional[Section]:
        if self.assessment is None or not self.assessment.sections:
            return None
        return self.assessment.sections[self.current_section_index]

    @property
    def is_first_section(self) -> bool:
        return self.current_section_index == 0

    @property
    def is_last_section(self) -> bool:
        return self.current_section_index >= self.section_count - 1

    def update_response(self, question_id: str, value: Any) -> None:
        """
        Record an answer and clear its error until the next gated step.

        Raises:
            ValueError: If the question is not part of the assessment
        """
        self._require(RuntimeState.IN_PROGRESS)
        if self.assessment.find_question(question_id) is None:
            raise ValueError(f"Unknown question {question_id}")
        self.responses = {**self.responses, question_id: value}
        if question_id in self.errors:
            self.errors = {k: v for k, v in self.errors.items() if k != question_id}

    def _validate_current(self) -> bool:
        section = self.current_section
        errors = {}
        if section is not None:
            errors = validate_section(section, self.responses, self.assessment.question_index())
        self.errors = errors
        if errors:
            self.logger.info(
                f"Section {self.current_section_index} blocked by {len(errors)} error(s)"
            )
        return not errors

    def next_section(self) -> bool:
        """
        Validate the current section and advance when it passes.

        Returns:
            True if the runtime moved forward
        """
        self._require(RuntimeState.IN_PROGRESS)
        if self.is_last_section:
            raise AssessmentStateError("Already on the last section", state=self.state.value)
        if not self._validate_current():
            return False
        self.current_section_index += 1
        return True

    def prev_section(self) -> None:
        """Go back one section without validating; stays on the first."""
        self._require(RuntimeState.IN_PROGRESS)
        self.current_section_index = max(0, self.current_section_index - 1)

    def _build_response(self) -> AssessmentResponse:
        now = self.clock()
        visible = visible_question_ids(self.assessment, self.responses)
        answers = {
            question_id: value for question_id, value in self.responses.items()
            if question_id in visible and is_answered(value)
        }
        return AssessmentResponse(
            id=str(uuid.uuid4()),
            assessment_id=self.assessment.id,
            responses=answers,
            candidate_id=self.candidate_id,
            completed_at=now,
            created_at=now,
            question_snapshot={q.id: q.to_dict() for q in self.assessment.iter_questions()},
        )

    async def submit(self) -> Optional[AssessmentResponse]:
        """
        Validate the last section, persist the response and complete.

        Returns:
            The persisted response, or None when validation failed

        Raises:
            AssessmentStateError: If not on the last section, already
                completed, or a submit is already running
            PersistenceError: If the store rejected the write; the runtime
                stays IN_PROGRESS with all responses kept
        """
        if self.state is RuntimeState.COMPLETED:
            raise AssessmentStateError("Assessment already submitted", state=self.state.value)
        self._require(RuntimeState.IN_PROGRESS)
        if not self.is_last_section:
            raise AssessmentStateError("Submit is only allowed from the last section",
                                       state=self.state.value)
        if self._submitting:
            raise AssessmentStateError("Submit already in progress", state=self.state.value)

        if not self._validate_current():
            return None

        response = self._build_response()
        self._submitting = True
        try:
            await self.store.add(ASSESSMENT_RESPONSES, response.to_dict())
        finally:
            self._submitting = False

        self.response = response
        self._transition(RuntimeState.COMPLETED)
        self.logger.info(f"Submitted response {response.id} for assessment {self.assessment.id}")
        return response

    def progress(self) -> Progress:
        self._require(RuntimeState.IN_PROGRESS, RuntimeState.COMPLETED)
        return compute_progress(self.assessment, self.responses)
