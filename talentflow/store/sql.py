"""
SQL Document Store

DocumentStore implementation on top of an async SQLAlchemy engine. All
collections share one ``documents`` table holding the document body as
JSON, so the store keeps the same schema-less contract as the memory store.
"""

import copy
import datetime
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from talentflow.common.exceptions import DuplicateError, NotFoundError, PersistenceError
from talentflow.common.logger import app_logger
from talentflow.store.base import Document, DocumentStore

logger = app_logger.getChild("store.sql")

Base = declarative_base()


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class DocumentRow(Base):
    """One stored document."""
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "document_id", name="uq_documents_collection_document_id"),
    )

    pk = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False, index=True)
    document_id = Column(String(128), nullable=False)
    body = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


def get_engine_kwargs(database_url: str, echo: bool = False) -> Dict[str, Any]:
    """
    Engine keyword arguments for the given database URL.

    In-memory SQLite needs a single shared connection, otherwise every
    session would see its own empty database.
    """
    kwargs: Dict[str, Any] = {"echo": echo}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        kwargs["poolclass"] = StaticPool
    elif database_url.startswith("postgresql"):
        kwargs.update({"pool_pre_ping": True, "pool_recycle": 300})
    return kwargs


class SqlDocumentStore(DocumentStore):
    """Document store backed by a single SQL table."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine = create_async_engine(database_url, **get_engine_kwargs(database_url, echo))
        self._session_factory = sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_schema(self) -> None:
        """Create the documents table if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise PersistenceError("could not create schema", original_exception=e) from e
        logger.info("Document table ready")

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _session(self, collection: str) -> AsyncIterator[AsyncSession]:
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error on collection '{collection}': {e}")
            raise PersistenceError(str(e), collection=collection, original_exception=e) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @staticmethod
    async def _find(session: AsyncSession, collection: str, document_id: str) -> Optional[DocumentRow]:
        result = await session.execute(
            select(DocumentRow).where(
                DocumentRow.collection == collection,
                DocumentRow.document_id == document_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        async with self._session(collection) as session:
            row = await self._find(session, collection, document_id)
            return copy.deepcopy(row.body) if row is not None else None

    async def list(self, collection: str) -> List[Document]:
        async with self._session(collection) as session:
            result = await session.execute(
                select(DocumentRow).where(DocumentRow.collection == collection).order_by(DocumentRow.pk)
            )
            return [copy.deepcopy(row.body) for row in result.scalars()]

    async def add(self, collection: str, document: Document) -> Document:
        document_id = document["id"]
        try:
            async with self._session(collection) as session:
                if await self._find(session, collection, document_id) is not None:
                    raise DuplicateError(collection, document_id)
                session.add(DocumentRow(
                    collection=collection,
                    document_id=document_id,
                    body=copy.deepcopy(document),
                ))
        except IntegrityError as e:
            raise DuplicateError(collection, document_id) from e
        return copy.deepcopy(document)

    async def update(self, collection: str, document_id: str, changes: Document) -> Document:
        async with self._session(collection) as session:
            row = await self._find(session, collection, document_id)
            if row is None:
                raise NotFoundError(collection, document_id)
            body = dict(row.body)
            body.update(copy.deepcopy(changes))
            body["id"] = document_id
            row.body = body
            return copy.deepcopy(body)

    async def delete(self, collection: str, document_id: str) -> bool:
        async with self._session(collection) as session:
            result = await session.execute(
                delete(DocumentRow).where(
                    DocumentRow.collection == collection,
                    DocumentRow.document_id == document_id,
                )
            )
            return result.rowcount > 0

    async def count(self, collection: str) -> int:
        async with self._session(collection) as session:
            result = await session.execute(
                select(func.count()).select_from(DocumentRow).where(DocumentRow.collection == collection)
            )
            return int(result.scalar_one())

    async def clear(self, collection: str) -> None:
        async with self._session(collection) as session:
            await session.execute(delete(DocumentRow).where(DocumentRow.collection == collection))
