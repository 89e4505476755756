"""Root conftest - runs before any test module imports the application."""

import os

import pytest


os.environ["ENVIRONMENT"] = "test"
os.environ["DOCUMENT_STORE_PROVIDER"] = "memory"
os.environ["PROGRESS_RATE_LIMIT"] = "10000/minute"

from learnpath.catalog.provider import get_catalog_snapshot  # noqa: E402
from learnpath.config.settings import get_settings  # noqa: E402
from learnpath.documents.factory import get_document_store  # noqa: E402
from learnpath.storage.factory import get_guest_storage  # noqa: E402


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_guest_storage.cache_clear()
    get_document_store.cache_clear()
    get_catalog_snapshot.cache_clear()


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Give every test its own guest storage directory and fresh in-memory stores."""
    monkeypatch.setenv("LOCAL_STORAGE_PATH", str(tmp_path / "guest_storage"))
    monkeypatch.delenv("CATALOG_PATH", raising=False)
    _clear_caches()
    yield
    _clear_caches()
