"""
Simulated Backend

Wraps a DocumentStore with the behaviour of the mock API: every call waits
a random delay and then fails with a generic server error at a fixed
probability. Faults are injected before the delegate is touched, so a
failed write never lands partially. Nothing is retried here; callers decide.
"""

import asyncio
import random
from typing import List, Optional, Tuple

from talentflow.common.exceptions import PersistenceError
from talentflow.common.logger import app_logger
from talentflow.store.base import Document, DocumentStore

logger = app_logger.getChild("store.mock_backend")

DEFAULT_ERROR_RATE = 0.08
DEFAULT_LATENCY_RANGE_MS = (200, 1200)


class SimulatedBackend(DocumentStore):
    """DocumentStore decorator adding latency and random failures."""

    def __init__(
        self,
        delegate: DocumentStore,
        error_rate: float = DEFAULT_ERROR_RATE,
        latency_range_ms: Tuple[int, int] = DEFAULT_LATENCY_RANGE_MS,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the simulated backend.

        Args:
            delegate: The store actually holding the documents
            error_rate: Probability in [0, 1] that a call fails
            latency_range_ms: Inclusive bounds of the per-call delay
            rng: Random source, injectable for deterministic tests
        """
        if not 0 <= error_rate <= 1:
            raise ValueError(f"error_rate must be between 0 and 1, got {error_rate}")
        self.delegate = delegate
        self.error_rate = error_rate
        self.latency_range_ms = latency_range_ms
        self.rng = rng or random.Random()

    async def _simulate(self, operation: str, collection: str) -> None:
        low, high = self.latency_range_ms
        if high > 0:
            await asyncio.sleep(self.rng.uniform(low, high) / 1000.0)
        if self.error_rate and self.rng.random() < self.error_rate:
            logger.warning(f"Injected failure on {operation} {collection}")
            raise PersistenceError("Server error", collection=collection)

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        await self._simulate("get", collection)
        return await self.delegate.get(collection, document_id)

    async def list(self, collection: str) -> List[Document]:
        await self._simulate("list", collection)
        return await self.delegate.list(collection)

    async def add(self, collection: str, document: Document) -> Document:
        await self._simulate("add", collection)
        return await self.delegate.add(collection, document)

    async def update(self, collection: str, document_id: str, changes: Document) -> Document:
        await self._simulate("update", collection)
        return await self.delegate.update(collection, document_id, changes)

    async def delete(self, collection: str, document_id: str) -> bool:
        await self._simulate("delete", collection)
        return await self.delegate.delete(collection, document_id)

    async def count(self, collection: str) -> int:
        await self._simulate("count", collection)
        return await self.delegate.count(collection)

    async def clear(self, collection: str) -> None:
        await self._simulate("clear", collection)
        await self.delegate.clear(collection)

    async def bulk_add(self, collection: str, documents: List[Document]) -> List[Document]:
        # One fault check for the whole batch
        await self._simulate("bulk_add", collection)
        return await self.delegate.bulk_add(collection, documents)

    async def close(self) -> None:
        await self.delegate.close()
