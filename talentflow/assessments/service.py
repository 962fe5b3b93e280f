"""
Assessment Service

Async facade the API (or any UI) uses to load, save, publish and answer
assessments through a DocumentStore. Structural and validation failures are
returned as values; only store failures are raised.
"""

import uuid
import dataclasses
from typing import Any, Dict, List, Mapping, Optional, Tuple

from talentflow.assessments import builder
from talentflow.assessments.answers import is_answered
from talentflow.assessments.models import (
    Assessment,
    AssessmentResponse,
    StructuralError,
    validate_structure,
)
from talentflow.assessments.runtime import find_by_share_link
from talentflow.assessments.validation import validate_assessment, visible_question_ids
from talentflow.common.exceptions import AssessmentStateError, NotFoundError
from talentflow.common.logger import LoggerAdapter, app_logger, log_execution_time
from talentflow.common.serialization import utcnow
from talentflow.store.base import ASSESSMENTS, ASSESSMENT_RESPONSES, DocumentStore

logger = app_logger.getChild("assessments.service")

# Upper bound on share link regeneration when a token collides
MAX_LINK_ATTEMPTS = 5


class AssessmentService:
    """CRUD, publishing and submission over the assessments collections."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _share_links(self) -> set:
        return {d.get("shareableLink") for d in await self.store.list(ASSESSMENTS)}

    async def _unique_share_link(self, preferred: str = "") -> str:
        """
        Return ``preferred`` when no stored assessment uses it, otherwise a
        freshly generated link that differs from every stored one.
        """
        taken = await self._share_links()
        if preferred and preferred not in taken:
            return preferred
        for _ in range(MAX_LINK_ATTEMPTS):
            link = builder.generate_share_link()
            if link not in taken:
                return link
        raise RuntimeError("Could not generate a unique share link")

    @log_execution_time(logger)
    async def create_assessment(self, job_id: str, title: str, description: str = "") -> Assessment:
        """Create and persist an empty, unpublished assessment with a unique share link."""
        link = await self._unique_share_link()
        assessment = builder.create_assessment(job_id, title, description, share_link=link)
        await self.store.add(ASSESSMENTS, assessment.to_dict())
        logger.info(f"Created assessment {assessment.id} for job {job_id}")
        return assessment

    async def get_assessment(self, assessment_id: str) -> Optional[Assessment]:
        document = await self.store.get(ASSESSMENTS, assessment_id)
        return Assessment.from_dict(document) if document else None

    async def find_by_share_link(self, share_link: str) -> Optional[Assessment]:
        return await find_by_share_link(self.store, share_link)

    async def list_assessments(self, search: Optional[str] = None) -> List[Assessment]:
        assessments = [Assessment.from_dict(d) for d in await self.store.list(ASSESSMENTS)]
        if search:
            term = search.lower()
            assessments = [
                a for a in assessments
                if term in a.title.lower() or term in a.description.lower()
            ]
        return assessments

    async def save_assessment(
        self, assessment: Assessment
    ) -> Tuple[List[StructuralError], Optional[Assessment]]:
        """
        Persist an edited assessment after a structural check.

        The share link and publish flag of the stored document win over the
        incoming value: links never change and publishing is one-way. A
        document saved for the first time keeps its link only when no other
        assessment uses it.

        Returns:
            ``(violations, None)`` when the document is malformed, otherwise
            ``([], saved_assessment)``
        """
        errors = validate_structure(assessment)
        if errors:
            LoggerAdapter(logger, {"assessment_id": assessment.id}).info(
                f"Rejected save with {len(errors)} structural error(s)"
            )
            return errors, None

        stored = await self.get_assessment(assessment.id)
        if stored is not None:
            assessment = dataclasses.replace(
                assessment,
                shareable_link=stored.shareable_link,
                is_published=stored.is_published or assessment.is_published,
                created_at=stored.created_at,
            )
        else:
            link = await self._unique_share_link(assessment.shareable_link)
            if link != assessment.shareable_link:
                logger.info(f"Assigned new share link to assessment {assessment.id}")
                assessment = dataclasses.replace(assessment, shareable_link=link)
        saved = dataclasses.replace(assessment, updated_at=utcnow())

        if stored is None:
            await self.store.add(ASSESSMENTS, saved.to_dict())
        else:
            await self.store.update(ASSESSMENTS, saved.id, saved.to_dict())
        return [], saved

    async def publish_assessment(self, assessment_id: str) -> Optional[Assessment]:
        """Publish a stored assessment; returns None when it does not exist."""
        assessment = await self.get_assessment(assessment_id)
        if assessment is None:
            return None
        published = builder.publish(assessment)
        if published is not assessment:
            await self.store.update(ASSESSMENTS, assessment_id, {
                "isPublished": True,
                "updatedAt": published.to_dict()["updatedAt"],
            })
            logger.info(f"Published assessment {assessment_id}")
        return published

    async def delete_assessment(self, assessment_id: str) -> bool:
        return await self.store.delete(ASSESSMENTS, assessment_id)

    async def submit_response(
        self,
        share_link: str,
        responses: Mapping[str, Any],
        candidate_id: Optional[str] = None
    ) -> Tuple[Optional[AssessmentResponse], Dict[str, str]]:
        """
        Validate a complete set of answers and persist them in one call.

        Returns:
            ``(response, {})`` on success or ``(None, errors)`` when any
            visible question fails validation

        Raises:
            NotFoundError: If no assessment has the share link
            AssessmentStateError: If the assessment is not published
        """
        assessment = await self.find_by_share_link(share_link)
        if assessment is None:
            raise NotFoundError("Assessment", share_link)
        if not assessment.is_published:
            raise AssessmentStateError(f"Assessment {assessment.id} is not published",
                                       state="not_published")

        unknown = [qid for qid in responses if assessment.find_question(qid) is None]
        errors = {qid: "Unknown question" for qid in unknown}
        errors.update(validate_assessment(assessment, responses))
        if errors:
            return None, errors

        now = utcnow()
        visible = visible_question_ids(assessment, responses)
        response = AssessmentResponse(
            id=str(uuid.uuid4()),
            assessment_id=assessment.id,
            responses={
                qid: value for qid, value in responses.items()
                if qid in visible and is_answered(value)
            },
            candidate_id=candidate_id,
            completed_at=now,
            created_at=now,
            question_snapshot={q.id: q.to_dict() for q in assessment.iter_questions()},
        )
        await self.store.add(ASSESSMENT_RESPONSES, response.to_dict())
        logger.info(f"Stored response {response.id} for assessment {assessment.id}")
        return response, {}

    async def get_response(self, response_id: str) -> Optional[AssessmentResponse]:
        document = await self.store.get(ASSESSMENT_RESPONSES, response_id)
        return AssessmentResponse.from_dict(document) if document else None

    async def stats(self) -> Dict[str, int]:
        assessments = await self.store.list(ASSESSMENTS)
        return {
            "assessments": len(assessments),
            "publishedAssessments": sum(1 for d in assessments if d.get("isPublished")),
            "responses": await self.store.count(ASSESSMENT_RESPONSES),
        }
