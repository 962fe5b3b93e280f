"""
Shared fixtures for the assessment engine tests.

Async fixtures are avoided: stores are built synchronously and populated
inside the tests that need data.
"""

import random

import pytest

from talentflow.assessments.models import Assessment
from talentflow.store.memory import MemoryDocumentStore
from talentflow.store.mock_backend import SimulatedBackend


def make_assessment_document(published: bool = True, link: str = "take-sample") -> dict:
    """Two-section assessment with one of every question type."""
    return {
        "id": "assessment-sample",
        "jobId": "job-42",
        "title": "Backend Engineer Screening",
        "description": "Short screening for backend candidates",
        "isPublished": published,
        "shareableLink": link,
        "createdAt": "2024-03-01T09:00:00+00:00",
        "updatedAt": "2024-03-01T09:00:00+00:00",
        "sections": [
            {
                "id": "section-basics",
                "title": "Basics",
                "description": "About you",
                "order": 0,
                "questions": [
                    {"id": "q-name", "type": "short-text", "question": "Your name?",
                     "required": True, "validation": {"minLength": 2, "maxLength": 40}, "order": 0},
                    {"id": "q-role", "type": "single-choice", "question": "Preferred role?",
                     "required": True, "options": ["Frontend", "Backend"], "order": 1},
                    {"id": "q-backend-detail", "type": "long-text",
                     "question": "Which backend stacks have you shipped?", "required": True,
                     "conditionalLogic": {"dependsOn": "q-role", "showWhen": "Backend"}, "order": 2},
                ],
            },
            {
                "id": "section-experience",
                "title": "Experience",
                "order": 1,
                "questions": [
                    {"id": "q-years", "type": "numeric", "question": "Years of experience?",
                     "required": True, "validation": {"min": 0, "max": 50}, "order": 0},
                    {"id": "q-tools", "type": "multi-choice", "question": "Tools used?",
                     "required": False, "options": ["Docker", "Kubernetes", "Terraform"], "order": 1},
                    {"id": "q-cv", "type": "file-upload", "question": "Upload your CV",
                     "required": False, "order": 2},
                ],
            },
        ],
    }


def make_two_step_document(link: str = "take-two-step") -> dict:
    """Two sections, the first holding one required short text of at least 5 characters."""
    return {
        "id": "assessment-two-step",
        "jobId": "job-7",
        "title": "Two step",
        "description": "",
        "isPublished": True,
        "shareableLink": link,
        "sections": [
            {"id": "s1", "title": "First", "order": 0, "questions": [
                {"id": "greeting", "type": "short-text", "question": "Say hello",
                 "required": True, "validation": {"minLength": 5}, "order": 0},
            ]},
            {"id": "s2", "title": "Second", "order": 1, "questions": [
                {"id": "colour", "type": "single-choice", "question": "Pick one",
                 "required": True, "options": ["A", "B"], "order": 0},
                {"id": "notes", "type": "long-text", "question": "Anything else?",
                 "required": False, "order": 1},
            ]},
        ],
    }


def make_chained_document(link: str = "take-chain") -> dict:
    """
    Two-level dependency chain in one section: ``db`` shows for a Backend
    role and ``which-db`` shows when ``db`` is Postgres.
    """
    return {
        "id": "assessment-chain",
        "jobId": "job-9",
        "title": "Chained follow-ups",
        "description": "",
        "isPublished": True,
        "shareableLink": link,
        "sections": [
            {"id": "s-role", "title": "Role", "order": 0, "questions": [
                {"id": "role", "type": "single-choice", "question": "Role?",
                 "required": True, "options": ["Frontend", "Backend"], "order": 0},
                {"id": "db", "type": "single-choice", "question": "Database?",
                 "required": True, "options": ["Postgres", "Mongo"], "order": 1,
                 "conditionalLogic": {"dependsOn": "role", "showWhen": "Backend"}},
                {"id": "which-db", "type": "short-text", "question": "Which Postgres version?",
                 "required": True, "order": 2,
                 "conditionalLogic": {"dependsOn": "db", "showWhen": "Postgres"}},
            ]},
            {"id": "s-wrap", "title": "Wrap up", "order": 1, "questions": [
                {"id": "notes", "type": "long-text", "question": "Anything else?",
                 "required": False, "order": 0},
            ]},
        ],
    }


@pytest.fixture
def assessment_document():
    return make_assessment_document()


@pytest.fixture
def sample_assessment(assessment_document):
    return Assessment.from_dict(assessment_document)


@pytest.fixture
def two_step_assessment():
    return Assessment.from_dict(make_two_step_document())


@pytest.fixture
def chained_assessment():
    return Assessment.from_dict(make_chained_document())


@pytest.fixture
def memory_store():
    return MemoryDocumentStore()


@pytest.fixture
def seeded_store():
    """Memory store holding the sample, two-step and an unpublished assessment."""
    unpublished = make_assessment_document(published=False, link="take-draft")
    unpublished["id"] = "assessment-draft"
    return MemoryDocumentStore({
        "assessments": [make_assessment_document(), make_two_step_document(), unpublished],
    })


@pytest.fixture
def chained_store():
    """Memory store holding only the chained follow-up assessment."""
    return MemoryDocumentStore({"assessments": [make_chained_document()]})


@pytest.fixture
def quiet_backend(seeded_store):
    """Simulated backend that never sleeps and never fails."""
    return SimulatedBackend(seeded_store, error_rate=0.0, latency_range_ms=(0, 0))


@pytest.fixture
def failing_backend(seeded_store):
    """Simulated backend that fails every call."""
    return SimulatedBackend(
        seeded_store, error_rate=1.0, latency_range_ms=(0, 0), rng=random.Random(7)
    )
