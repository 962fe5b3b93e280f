"""
Document Store Interface

This module defines the contract of the generic document store the
assessment core persists to. Documents are JSON-compatible dicts keyed by
their ``id`` field and grouped in named collections.
"""

import abc
from typing import Any, Dict, List, Optional

Document = Dict[str, Any]

ASSESSMENTS = "assessments"
ASSESSMENT_RESPONSES = "assessmentResponses"


class DocumentStore(abc.ABC):
    """
    Abstract base class for document stores.

    Every call is asynchronous and may fail with PersistenceError.
    Implementations return copies; mutating a returned document never
    changes stored state.
    """

    @abc.abstractmethod
    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        """
        Get a document by its ID.

        Args:
            collection: Collection name
            document_id: The ID of the document to retrieve

        Returns:
            The document if found, None otherwise
        """
        pass

    @abc.abstractmethod
    async def list(self, collection: str) -> List[Document]:
        """
        List all documents of a collection in insertion order.

        Args:
            collection: Collection name

        Returns:
            List of documents
        """
        pass

    @abc.abstractmethod
    async def add(self, collection: str, document: Document) -> Document:
        """
        Add a new document.

        Args:
            collection: Collection name
            document: Document with an ``id`` field

        Returns:
            The stored document

        Raises:
            DuplicateError: If a document with the same ID already exists
        """
        pass

    @abc.abstractmethod
    async def update(self, collection: str, document_id: str, changes: Document) -> Document:
        """
        Merge ``changes`` into an existing document.

        Args:
            collection: Collection name
            document_id: The ID of the document to update
            changes: Top-level fields to overwrite

        Returns:
            The updated document

        Raises:
            NotFoundError: If the document doesn't exist
        """
        pass

    @abc.abstractmethod
    async def delete(self, collection: str, document_id: str) -> bool:
        """
        Delete a document by its ID.

        Returns:
            True if the document was deleted, False otherwise
        """
        pass

    @abc.abstractmethod
    async def count(self, collection: str) -> int:
        pass

    @abc.abstractmethod
    async def clear(self, collection: str) -> None:
        pass

    async def bulk_add(self, collection: str, documents: List[Document]) -> List[Document]:
        """Add several documents, one call at a time."""
        return [await self.add(collection, document) for document in documents]

    async def close(self) -> None:
        """Release any resources held by the store."""
        return None
