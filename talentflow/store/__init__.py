"""
Document storage for TalentFlow.

The assessment core only depends on the DocumentStore contract; the
concrete store is picked from settings by ``build_store``.
"""

from typing import Optional

from talentflow.common.exceptions import ConfigurationError
from talentflow.config import Settings, get_settings

from .base import ASSESSMENTS, ASSESSMENT_RESPONSES, Document, DocumentStore
from .memory import MemoryDocumentStore
from .mock_backend import SimulatedBackend

__all__ = [
    'ASSESSMENTS',
    'ASSESSMENT_RESPONSES',
    'Document',
    'DocumentStore',
    'MemoryDocumentStore',
    'SimulatedBackend',
    'build_store',
]


def build_store(settings: Optional[Settings] = None) -> DocumentStore:
    """
    Create the configured store, wrapped in the simulated backend.

    Raises:
        ConfigurationError: If STORE_BACKEND names an unknown backend
    """
    settings = settings or get_settings()

    if settings.STORE_BACKEND == "memory":
        store: DocumentStore = MemoryDocumentStore()
    elif settings.STORE_BACKEND == "sql":
        from .sql import SqlDocumentStore
        store = SqlDocumentStore(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    else:
        raise ConfigurationError(
            f"Unknown store backend: {settings.STORE_BACKEND}", config_key="STORE_BACKEND"
        )

    return SimulatedBackend(
        store,
        error_rate=settings.MOCK_ERROR_RATE,
        latency_range_ms=settings.latency_range_ms,
    )
