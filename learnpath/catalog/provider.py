"""Load the catalog once and keep it together with its index."""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from learnpath.config import get_settings

from .data import DEFAULT_CATALOG
from .index import CatalogIndex, build_index
from .models import Catalog


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """An immutable catalog and the index built from it."""

    catalog: Catalog
    index: CatalogIndex


def load_catalog(path: str | Path | None = None) -> Catalog:
    """Load a catalog from a JSON file, or the bundled catalog when no path is given."""
    if path is None:
        return DEFAULT_CATALOG
    catalog_path = Path(path)
    logger.info(f"Loading catalog from {catalog_path}")
    return Catalog.model_validate_json(catalog_path.read_text(encoding="utf-8"))


def make_snapshot(catalog: Catalog) -> CatalogSnapshot:
    """Pair a catalog with a freshly built index."""
    return CatalogSnapshot(catalog=catalog, index=build_index(catalog))


@lru_cache
def get_catalog_snapshot() -> CatalogSnapshot:
    """Get the cached catalog snapshot for the configured source."""
    snapshot = make_snapshot(load_catalog(get_settings().CATALOG_PATH))
    logger.info(f"Catalog loaded with {len(snapshot.index)} items")
    return snapshot


def reload_catalog() -> CatalogSnapshot:
    """Drop the cached snapshot and rebuild catalog and index."""
    get_catalog_snapshot.cache_clear()
    return get_catalog_snapshot()
