"""
Request models for the assessments API.

Bodies use the same camelCase keys as the stored documents.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssessmentCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId", min_length=1, description="Job the assessment belongs to")
    title: str = Field(..., min_length=1, description="Assessment title")
    description: str = Field("", description="Free-form description")


class ResponseSubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    responses: Dict[str, Any] = Field(default_factory=dict, description="Question id to raw answer")
    candidate_id: Optional[str] = Field(None, alias="candidateId", description="Respondent identifier")
