"""Remote document store holding per-user progress and profile documents."""

from .base import DocumentStore
from .exceptions import DocumentStoreError
from .factory import PROFILE_COLLECTION, PROGRESS_COLLECTION, get_document_store
from .memory import InMemoryDocumentStore


__all__ = [
    "PROFILE_COLLECTION",
    "PROGRESS_COLLECTION",
    "DocumentStore",
    "DocumentStoreError",
    "InMemoryDocumentStore",
    "get_document_store",
]
