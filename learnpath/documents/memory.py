"""In-process document store for tests and single-process development."""

import copy

from .base import Document, DocumentStore, Mutation


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed collection. Values are deep-copied in and out.

    No method awaits between reading and writing `_documents`, so every
    operation is atomic on the event loop.
    """

    def __init__(self, collection: str) -> None:
        super().__init__(collection)
        self._documents: dict[str, Document] = {}

    async def get(self, key: str) -> Document | None:
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    async def put(self, key: str, patch: Document) -> None:
        document = self._documents.setdefault(key, {})
        document.update(copy.deepcopy(patch))

    async def update(self, key: str, mutate: Mutation) -> Document | None:
        current = self._documents.get(key)
        updated = mutate(copy.deepcopy(current) if current is not None else None)
        if updated is not None:
            self._documents[key] = copy.deepcopy(updated)
            current = self._documents[key]
        return copy.deepcopy(current) if current is not None else None

    async def all(self) -> dict[str, Document]:
        return copy.deepcopy(self._documents)
