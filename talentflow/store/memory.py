"""
Memory Document Store Module

In-process implementation of the DocumentStore, used for development, the
default API configuration, and tests.
"""

import copy
from typing import Dict, List, Optional

from talentflow.common.exceptions import DuplicateError, NotFoundError
from talentflow.store.base import Document, DocumentStore


class MemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Collections are created on first use. Documents are deep-copied on the
    way in and on the way out.
    """

    def __init__(self, initial_data: Optional[Dict[str, List[Document]]] = None):
        """
        Initialize the store with optional initial data.

        Args:
            initial_data: Optional mapping of collection name to documents
        """
        self._collections: Dict[str, Dict[str, Document]] = {}

        if initial_data:
            for collection, documents in initial_data.items():
                bucket = self._bucket(collection)
                for document in documents:
                    bucket[document["id"]] = copy.deepcopy(document)

    def _bucket(self, collection: str) -> Dict[str, Document]:
        return self._collections.setdefault(collection, {})

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        document = self._bucket(collection).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def list(self, collection: str) -> List[Document]:
        return [copy.deepcopy(d) for d in self._bucket(collection).values()]

    async def add(self, collection: str, document: Document) -> Document:
        bucket = self._bucket(collection)
        document_id = document["id"]
        if document_id in bucket:
            raise DuplicateError(collection, document_id)
        bucket[document_id] = copy.deepcopy(document)
        return copy.deepcopy(document)

    async def update(self, collection: str, document_id: str, changes: Document) -> Document:
        bucket = self._bucket(collection)
        if document_id not in bucket:
            raise NotFoundError(collection, document_id)
        updated = dict(bucket[document_id])
        updated.update(copy.deepcopy(changes))
        updated["id"] = document_id
        bucket[document_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, collection: str, document_id: str) -> bool:
        return self._bucket(collection).pop(document_id, None) is not None

    async def count(self, collection: str) -> int:
        return len(self._bucket(collection))

    async def clear(self, collection: str) -> None:
        self._bucket(collection).clear()
