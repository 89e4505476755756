"""Abstract interface for a keyed document collection."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any


Document = dict[str, Any]

# Receives the current document (None when absent) and returns the full
# replacement, or None to leave the stored document as it is
Mutation = Callable[[Document | None], Document | None]


class DocumentStore(ABC):
    """One collection of JSON-like documents addressed by key.

    Writes are patches: top-level fields in the patch replace the same fields
    in the stored document and every other field is left untouched. Writing
    to a missing key creates the document.
    """

    def __init__(self, collection: str) -> None:
        self.collection = collection

    @abstractmethod
    async def get(self, key: str) -> Document | None:
        """Return the document stored under `key`, or None when absent.

        Raises
        ------
            DocumentStoreError: If the store cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, patch: Document) -> None:
        """Merge `patch` into the document stored under `key`.

        Raises
        ------
            DocumentStoreError: If the write was not applied.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, key: str, mutate: Mutation) -> Document | None:
        """Atomically read, change and write back the document under `key`.

        No other write to the same key lands between the read handed to
        `mutate` and the write of its result. A provider may call
        `mutate` more than once, so it should compute its result from its
        argument alone. Returns the stored document afterwards.

        Raises
        ------
            DocumentStoreError: If the document cannot be read or written.
        """
        raise NotImplementedError

    @abstractmethod
    async def all(self) -> dict[str, Document]:
        """Return every document in the collection keyed by document key.

        Raises
        ------
            DocumentStoreError: If the store cannot be read.
        """
        raise NotImplementedError
