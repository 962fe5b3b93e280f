"""
API tests for the assessments routes using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from talentflow.api.app import create_app
from talentflow.config import Settings
from talentflow.store.memory import MemoryDocumentStore
from talentflow.store.mock_backend import SimulatedBackend
from talentflow.store.seed import PRESET_ASSESSMENTS


@pytest.fixture
def settings():
    return Settings(SEED_ON_STARTUP=False, MOCK_ERROR_RATE=0.0, MOCK_LATENCY_MAX_MS=0)


@pytest.fixture
def client(quiet_backend, settings):
    with TestClient(create_app(store=quiet_backend, settings=settings)) as test_client:
        yield test_client


class TestAssessmentRoutes:
    def test_list(self, client):
        response = client.get("/api/assessments")
        assert response.status_code == 200
        assert len(response.json()["assessments"]) == 3

    def test_search(self, client):
        response = client.get("/api/assessments", params={"search": "two"})
        assert [a["id"] for a in response.json()["assessments"]] == ["assessment-two-step"]

    def test_get(self, client, assessment_document):
        response = client.get("/api/assessments/assessment-sample")
        assert response.status_code == 200
        assert response.json()["assessment"] == assessment_document

    def test_get_missing(self, client):
        response = client.get("/api/assessments/missing")
        assert response.status_code == 404
        assert "error" in response.json()

    def test_create(self, client):
        response = client.post("/api/assessments", json={"jobId": "job-8", "title": "QA"})
        assert response.status_code == 201
        created = response.json()["assessment"]
        assert created["jobId"] == "job-8"
        assert created["isPublished"] is False
        assert created["sections"] == []
        assert client.get(f"/api/assessments/{created['id']}").status_code == 200

    def test_create_requires_title(self, client):
        response = client.post("/api/assessments", json={"jobId": "job-8"})
        assert response.status_code == 422

    def test_put_saves_document(self, client, assessment_document):
        assessment_document["title"] = "Renamed"
        response = client.put("/api/assessments/assessment-sample", json=assessment_document)
        assert response.status_code == 200
        assert response.json()["assessment"]["title"] == "Renamed"
        assert client.get("/api/assessments/assessment-sample").json()["assessment"]["title"] == "Renamed"

    def test_put_reports_structural_errors(self, client, assessment_document):
        assessment_document["sections"][1]["order"] = 5
        response = client.put("/api/assessments/assessment-sample", json=assessment_document)
        assert response.status_code == 422
        assert response.json()["errors"][0]["code"] == "non_contiguous_order"

    def test_put_rejects_malformed_documents(self, client, assessment_document):
        assessment_document["sections"][0]["questions"][0]["type"] = "essay"
        response = client.put("/api/assessments/assessment-sample", json=assessment_document)
        assert response.status_code == 422

    def test_put_rejects_non_numeric_bounds(self, client, assessment_document):
        assessment_document["sections"][1]["questions"][0]["validation"] = {"min": "abc"}
        response = client.put("/api/assessments/assessment-sample", json=assessment_document)
        assert response.status_code == 422
        assert response.json()["errors"][0]["code"] == "invalid_validation"

        taken = client.post("/api/take/take-sample/responses", json={"responses": {
            "q-name": "Ada", "q-role": "Frontend", "q-years": 4,
        }})
        assert taken.status_code == 201

    def test_put_coerces_numeric_string_bounds(self, client, assessment_document):
        assessment_document["sections"][1]["questions"][0]["validation"] = {"min": "0", "max": "50"}
        response = client.put("/api/assessments/assessment-sample", json=assessment_document)
        assert response.status_code == 200
        question = response.json()["assessment"]["sections"][1]["questions"][0]
        assert question["validation"] == {"min": 0.0, "max": 50.0}

    def test_put_missing(self, client, assessment_document):
        response = client.put("/api/assessments/missing", json=assessment_document)
        assert response.status_code == 404

    def test_publish(self, client):
        response = client.post("/api/assessments/assessment-draft/publish")
        assert response.status_code == 200
        assert response.json()["assessment"]["isPublished"] is True
        assert client.post("/api/assessments/missing/publish").status_code == 404

    def test_delete(self, client):
        assert client.delete("/api/assessments/assessment-draft").status_code == 204
        assert client.delete("/api/assessments/assessment-draft").status_code == 404


class TestTakeRoutes:
    def test_open_published(self, client, settings):
        response = client.get("/api/take/take-sample")
        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "in_progress"
        assert body["assessment"]["id"] == "assessment-sample"
        assert body["shareUrl"] == settings.share_url("take-sample")
        assert body["progress"]["progressPercent"] == 0

    def test_open_missing(self, client):
        response = client.get("/api/take/missing")
        assert response.status_code == 404
        assert response.json()["state"] == "not_found"

    def test_open_unpublished(self, client):
        response = client.get("/api/take/take-draft")
        assert response.status_code == 403
        assert response.json()["state"] == "not_published"

    def test_submit(self, client):
        response = client.post("/api/take/take-two-step/responses", json={
            "responses": {"greeting": "hello", "colour": "B"},
            "candidateId": "cand-9",
        })
        assert response.status_code == 201
        stored = response.json()["response"]
        assert stored["candidateId"] == "cand-9"
        assert stored["responses"] == {"greeting": "hello", "colour": "B"}
        assert client.get("/api/stats").json()["responses"] == 1

    def test_submit_with_errors(self, client):
        response = client.post("/api/take/take-two-step/responses", json={
            "responses": {"greeting": "hi"},
        })
        assert response.status_code == 422
        assert response.json()["errors"]["greeting"] == "Must be at least 5 characters"

    def test_submit_to_missing_and_draft(self, client):
        assert client.post("/api/take/missing/responses", json={"responses": {}}).status_code == 404
        response = client.post("/api/take/take-draft/responses", json={"responses": {}})
        assert response.status_code == 403
        assert response.json()["state"] == "not_published"


class TestOperationalRoutes:
    def test_seed_skips_populated_store(self, client):
        response = client.post("/api/seed")
        assert response.status_code == 200
        assert response.json()["seeded"] is False

    def test_seed_force(self, client):
        response = client.post("/api/seed", params={"force": "true"})
        assert response.json()["seeded"] is True
        assert client.get("/api/stats").json()["assessments"] == len(PRESET_ASSESSMENTS)

    def test_stats(self, client):
        assert client.get("/api/stats").json() == {
            "assessments": 3, "publishedAssessments": 2, "responses": 0,
        }

    def test_root(self, client):
        assert client.get("/").status_code == 200


class TestStartupAndFailures:
    def test_startup_seeds_empty_store(self):
        store = MemoryDocumentStore()
        backend = SimulatedBackend(store, error_rate=0.0, latency_range_ms=(0, 0))
        settings = Settings(SEED_ON_STARTUP=True)
        with TestClient(create_app(store=backend, settings=settings)) as client:
            assert client.get("/api/stats").json()["assessments"] == len(PRESET_ASSESSMENTS)

    def test_startup_creates_sql_schema(self):
        settings = Settings(
            STORE_BACKEND="sql",
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            MOCK_ERROR_RATE=0.0,
            MOCK_LATENCY_MIN_MS=0,
            MOCK_LATENCY_MAX_MS=0,
        )
        with TestClient(create_app(settings=settings)) as client:
            response = client.get("/api/take/take-assessment-1")
            assert response.status_code == 200
            assert response.json()["assessment"]["id"] == "assessment-1"

    def test_store_failure_is_a_generic_server_error(self, seeded_store, settings):
        failing = SimulatedBackend(seeded_store, error_rate=1.0, latency_range_ms=(0, 0))
        with TestClient(create_app(store=failing, settings=settings)) as client:
            response = client.get("/api/assessments")
            assert response.status_code == 500
            assert response.json() == {"error": "Server error"}
