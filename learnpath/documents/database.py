"""SQLAlchemy-backed document store."""

import logging

from pydantic_core import to_jsonable_python
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .base import Document, DocumentStore, Mutation
from .db_models import StoredDocument
from .exceptions import DocumentStoreError


logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    """Document collection persisted as JSON rows.

    Datetimes are stored as ISO-8601 UTC strings, which sort and compare
    the same way as the instants they encode.
    """

    def __init__(self, collection: str, session_maker: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(collection)
        self._session_maker = session_maker

    async def get(self, key: str) -> Document | None:
        try:
            async with self._session_maker() as session:
                row = await session.get(StoredDocument, (self.collection, key))
                return dict(row.data) if row is not None else None
        except SQLAlchemyError as e:
            msg = f"Failed to read {self.collection}/{key}"
            raise DocumentStoreError(msg) from e

    async def put(self, key: str, patch: Document) -> None:
        encoded = to_jsonable_python(patch)
        try:
            async with self._session_maker() as session:
                try:
                    row = await session.get(StoredDocument, (self.collection, key), with_for_update=True)
                    if row is None:
                        session.add(StoredDocument(collection=self.collection, key=key, data=encoded))
                    else:
                        # Reassign so the JSON column registers the change
                        row.data = {**(row.data or {}), **encoded}
                    await session.commit()
                except SQLAlchemyError:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            msg = f"Failed to write {self.collection}/{key}"
            raise DocumentStoreError(msg) from e

        logger.debug(f"Patched {self.collection}/{key} fields: {sorted(encoded)}")

    async def update(self, key: str, mutate: Mutation) -> Document | None:
        # Two first writers of a missing key both see no row to lock; the
        # loser hits the primary key and retries against the winner's row.
        for attempt in (1, 2):
            try:
                return await self._update_once(key, mutate)
            except IntegrityError:
                if attempt == 2:
                    msg = f"Failed to update {self.collection}/{key}: concurrent insert"
                    raise DocumentStoreError(msg) from None
                logger.debug(f"Concurrent insert of {self.collection}/{key}, retrying update")
            except SQLAlchemyError as e:
                msg = f"Failed to update {self.collection}/{key}"
                raise DocumentStoreError(msg) from e
        return None

    async def _update_once(self, key: str, mutate: Mutation) -> Document | None:
        async with self._session_maker() as session:
            try:
                row = await session.get(StoredDocument, (self.collection, key), with_for_update=True)
                current = dict(row.data) if row is not None else None
                updated = mutate(current)
                if updated is None:
                    await session.rollback()
                    return current

                encoded = to_jsonable_python(updated)
                if row is None:
                    session.add(StoredDocument(collection=self.collection, key=key, data=encoded))
                else:
                    row.data = encoded
                await session.commit()
                return encoded
            except SQLAlchemyError:
                await session.rollback()
                raise

    async def all(self) -> dict[str, Document]:
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(StoredDocument).where(StoredDocument.collection == self.collection)
                )
                return {row.key: dict(row.data) for row in result.scalars()}
        except SQLAlchemyError as e:
            msg = f"Failed to list {self.collection}"
            raise DocumentStoreError(msg) from e
