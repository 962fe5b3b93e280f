"""
Tests for the document stores, the simulated backend and seeding.
"""

import random

import pytest

from talentflow.assessments.models import Assessment, validate_structure
from talentflow.common.exceptions import (
    ConfigurationError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
)
from talentflow.config import Settings
from talentflow.store import build_store
from talentflow.store.base import ASSESSMENTS
from talentflow.store.memory import MemoryDocumentStore
from talentflow.store.mock_backend import SimulatedBackend
from talentflow.store.seed import PRESET_ASSESSMENTS, ensure_seeded
from talentflow.store.sql import SqlDocumentStore
from talentflow.tests.conftest import make_assessment_document


async def exercise_store(store):
    """Contract checks shared by every store implementation."""
    document = make_assessment_document()
    await store.add(ASSESSMENTS, document)

    loaded = await store.get(ASSESSMENTS, document["id"])
    assert loaded == document
    assert Assessment.from_dict(loaded) == Assessment.from_dict(document)

    loaded["title"] = "mutated"
    assert (await store.get(ASSESSMENTS, document["id"]))["title"] == document["title"]

    with pytest.raises(DuplicateError):
        await store.add(ASSESSMENTS, document)

    updated = await store.update(ASSESSMENTS, document["id"], {"isPublished": False})
    assert updated["isPublished"] is False
    assert updated["sections"] == document["sections"]

    with pytest.raises(NotFoundError):
        await store.update(ASSESSMENTS, "missing", {"title": "x"})

    other = dict(document, id="second")
    await store.add(ASSESSMENTS, other)
    assert [d["id"] for d in await store.list(ASSESSMENTS)] == [document["id"], "second"]
    assert await store.count(ASSESSMENTS) == 2
    assert await store.list("empty") == []

    assert await store.delete(ASSESSMENTS, "second") is True
    assert await store.delete(ASSESSMENTS, "second") is False
    assert await store.get(ASSESSMENTS, "second") is None

    await store.clear(ASSESSMENTS)
    assert await store.count(ASSESSMENTS) == 0


class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_contract(self, memory_store):
        await exercise_store(memory_store)

    @pytest.mark.asyncio
    async def test_initial_data_is_copied(self):
        document = make_assessment_document()
        store = MemoryDocumentStore({ASSESSMENTS: [document]})
        document["title"] = "changed outside"
        assert (await store.get(ASSESSMENTS, document["id"]))["title"] != "changed outside"


class TestSqlStore:
    @pytest.mark.asyncio
    async def test_contract(self):
        store = SqlDocumentStore("sqlite+aiosqlite:///:memory:")
        await store.init_schema()
        try:
            await exercise_store(store)
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_collections_are_isolated(self):
        store = SqlDocumentStore("sqlite+aiosqlite:///:memory:")
        await store.init_schema()
        try:
            await store.add("a", {"id": "1", "value": 1})
            await store.add("b", {"id": "1", "value": 2})
            assert (await store.get("a", "1"))["value"] == 1
            assert (await store.get("b", "1"))["value"] == 2
        finally:
            await store.close()


class TestSimulatedBackend:
    @pytest.mark.asyncio
    async def test_passes_through_without_faults(self, memory_store):
        backend = SimulatedBackend(memory_store, error_rate=0.0, latency_range_ms=(0, 0))
        await exercise_store(backend)

    @pytest.mark.asyncio
    async def test_failed_write_is_never_applied(self, memory_store):
        backend = SimulatedBackend(memory_store, error_rate=1.0, latency_range_ms=(0, 0))
        with pytest.raises(PersistenceError) as exc_info:
            await backend.add(ASSESSMENTS, make_assessment_document())
        assert "Server error" in str(exc_info.value)
        assert exc_info.value.collection == ASSESSMENTS
        assert await memory_store.count(ASSESSMENTS) == 0

    @pytest.mark.asyncio
    async def test_failure_rate_follows_probability(self, memory_store):
        backend = SimulatedBackend(
            memory_store, error_rate=0.25, latency_range_ms=(0, 0), rng=random.Random(2024)
        )
        failures = 0
        for _ in range(400):
            try:
                await backend.count(ASSESSMENTS)
            except PersistenceError:
                failures += 1
        assert 60 < failures < 140

    def test_error_rate_is_validated(self, memory_store):
        with pytest.raises(ValueError):
            SimulatedBackend(memory_store, error_rate=1.5)


class TestSeeding:
    def test_presets_are_well_formed(self):
        for document in PRESET_ASSESSMENTS:
            assessment = Assessment.from_dict(document)
            assert assessment.is_published
            assert validate_structure(assessment) == []

    @pytest.mark.asyncio
    async def test_seeding_is_idempotent(self, memory_store):
        assert await ensure_seeded(memory_store) is True
        assert await ensure_seeded(memory_store) is False
        assert await memory_store.count(ASSESSMENTS) == len(PRESET_ASSESSMENTS)

    @pytest.mark.asyncio
    async def test_existing_data_is_left_alone(self, seeded_store):
        before = await seeded_store.count(ASSESSMENTS)
        assert await ensure_seeded(seeded_store) is False
        assert await seeded_store.count(ASSESSMENTS) == before

    @pytest.mark.asyncio
    async def test_force_reseeds(self, seeded_store):
        assert await ensure_seeded(seeded_store, force=True) is True
        ids = {d["id"] for d in await seeded_store.list(ASSESSMENTS)}
        assert ids == {d["id"] for d in PRESET_ASSESSMENTS}

    @pytest.mark.asyncio
    async def test_failed_seed_can_be_retried(self, memory_store):
        backend = SimulatedBackend(memory_store, error_rate=1.0, latency_range_ms=(0, 0))
        with pytest.raises(PersistenceError):
            await ensure_seeded(backend)
        backend.error_rate = 0.0
        assert await ensure_seeded(backend) is True


class TestBuildStore:
    def test_memory_backend_is_wrapped(self):
        settings = Settings(STORE_BACKEND="Memory", MOCK_ERROR_RATE=0.0)
        store = build_store(settings)
        assert isinstance(store, SimulatedBackend)
        assert isinstance(store.delegate, MemoryDocumentStore)
        assert store.error_rate == 0.0

    def test_sql_backend(self):
        settings = Settings(STORE_BACKEND="sql", DATABASE_URL="sqlite+aiosqlite:///:memory:")
        assert isinstance(build_store(settings).delegate, SqlDocumentStore)

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            build_store(Settings(STORE_BACKEND="mongo"))
