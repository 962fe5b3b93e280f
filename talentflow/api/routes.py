"""
Assessments API Routes

CRUD for assessment definitions plus the public ``/take`` endpoints a
respondent uses through a share link.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from talentflow.api.schemas import AssessmentCreateRequest, ResponseSubmitRequest
from talentflow.assessments.models import Assessment
from talentflow.assessments.runtime import AssessmentRuntime, RuntimeState
from talentflow.assessments.service import AssessmentService
from talentflow.common.exceptions import AssessmentStateError, NotFoundError
from talentflow.common.logger import app_logger, with_context
from talentflow.config import Settings
from talentflow.store.seed import ensure_seeded

logger = app_logger.getChild("api.routes")

router = APIRouter()


def get_service(request: Request) -> AssessmentService:
    return request.app.state.service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def _require_assessment(service: AssessmentService, assessment_id: str) -> Assessment:
    assessment = await service.get_assessment(assessment_id)
    if assessment is None:
        raise NotFoundError("Assessment", assessment_id)
    return assessment


@router.get("/assessments")
async def list_assessments(
    search: Optional[str] = Query(None, description="Case-insensitive title/description filter"),
    service: AssessmentService = Depends(get_service)
):
    assessments = await service.list_assessments(search)
    return {"assessments": [a.to_dict() for a in assessments]}


@router.get("/assessments/{assessment_id}")
async def get_assessment(assessment_id: str, service: AssessmentService = Depends(get_service)):
    assessment = await _require_assessment(service, assessment_id)
    return {"assessment": assessment.to_dict()}


@router.post("/assessments", status_code=201)
async def create_assessment(
    request: AssessmentCreateRequest,
    service: AssessmentService = Depends(get_service)
):
    assessment = await service.create_assessment(request.job_id, request.title, request.description)
    return {"assessment": assessment.to_dict()}


@router.put("/assessments/{assessment_id}")
async def save_assessment(
    assessment_id: str,
    document: Dict[str, Any] = Body(...),
    service: AssessmentService = Depends(get_service)
):
    """
    Replace an assessment with an edited document.

    Structural violations are answered with 422 and nothing is stored.
    """
    await _require_assessment(service, assessment_id)
    try:
        assessment = Assessment.from_dict({**document, "id": assessment_id})
    except (KeyError, TypeError, ValueError) as e:
        logger.info(f"Malformed assessment document for {assessment_id}: {e}")
        return JSONResponse(status_code=422, content={"errors": [{"message": f"Malformed document: {e}"}]})

    errors, saved = await service.save_assessment(assessment)
    if errors:
        return JSONResponse(status_code=422, content={"errors": [e.to_dict() for e in errors]})
    return {"assessment": saved.to_dict()}


@router.post("/assessments/{assessment_id}/publish")
async def publish_assessment(assessment_id: str, service: AssessmentService = Depends(get_service)):
    published = await service.publish_assessment(assessment_id)
    if published is None:
        raise NotFoundError("Assessment", assessment_id)
    return {"assessment": published.to_dict()}


@router.delete("/assessments/{assessment_id}", status_code=204)
async def delete_assessment(assessment_id: str, service: AssessmentService = Depends(get_service)):
    if not await service.delete_assessment(assessment_id):
        raise NotFoundError("Assessment", assessment_id)
    return Response(status_code=204)


@router.get("/take/{share_link}")
async def open_assessment(
    share_link: str,
    service: AssessmentService = Depends(get_service),
    settings: Settings = Depends(get_app_settings)
):
    """Resolve a share link the way the respondent's page does on load."""
    runtime = AssessmentRuntime(service.store, share_link)
    state = await runtime.load()

    if state is RuntimeState.NOT_FOUND:
        return JSONResponse(status_code=404, content={
            "state": state.value, "error": "Assessment not found",
        })
    if state is RuntimeState.NOT_PUBLISHED:
        return JSONResponse(status_code=403, content={
            "state": state.value, "error": "This assessment is not currently available",
        })
    return {
        "state": state.value,
        "assessment": runtime.assessment.to_dict(),
        "shareUrl": settings.share_url(share_link),
        "progress": runtime.progress().to_dict(),
    }


@router.post("/take/{share_link}/responses", status_code=201)
async def submit_response(
    share_link: str,
    request: ResponseSubmitRequest,
    service: AssessmentService = Depends(get_service)
):
    try:
        response, errors = await service.submit_response(
            share_link, request.responses, request.candidate_id
        )
    except NotFoundError:
        return JSONResponse(status_code=404, content={
            "state": RuntimeState.NOT_FOUND.value, "error": "Assessment not found",
        })
    except AssessmentStateError as e:
        return JSONResponse(status_code=403, content={"state": e.state, "error": e.message})

    if errors:
        with_context("api.routes", share_link=share_link).info(
            f"Rejected submission with {len(errors)} error(s)"
        )
        return JSONResponse(status_code=422, content={"errors": errors})
    return {"response": response.to_dict()}


@router.post("/seed")
async def seed(
    force: bool = Query(False, description="Clear and reseed the assessments"),
    service: AssessmentService = Depends(get_service)
):
    seeded = await ensure_seeded(service.store, force=force)
    message = "Database seeded successfully" if seeded else "Database already contains assessments"
    return {"message": message, "seeded": seeded}


@router.get("/stats")
async def stats(service: AssessmentService = Depends(get_service)):
    return await service.stats()
