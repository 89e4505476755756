"""Document store factory for creating the configured provider."""

from functools import lru_cache

from learnpath.config import get_settings

from .base import DocumentStore
from .memory import InMemoryDocumentStore


PROGRESS_COLLECTION = "userProgress"
PROFILE_COLLECTION = "users"


@lru_cache
def get_document_store(collection: str) -> DocumentStore:
    """Get the document store for a collection.

    Cached so every caller shares one instance per collection for the
    application lifecycle.
    """
    settings = get_settings()

    if settings.DOCUMENT_STORE_PROVIDER == "memory":
        return InMemoryDocumentStore(collection)

    from learnpath.database.session import get_session_maker

    from .database import SqlDocumentStore

    return SqlDocumentStore(collection, get_session_maker())
