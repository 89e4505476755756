"""Read-only learning catalog, its item index and the resume resolver."""

from .index import CatalogIndex, IndexEntry, build_index
from .models import Catalog, Category, Collection, ContentItem, ResourceLink
from .provider import CatalogSnapshot, get_catalog_snapshot, load_catalog, make_snapshot, reload_catalog
from .resolver import ResumeTarget, resolve_next


__all__ = [
    "Catalog",
    "CatalogIndex",
    "CatalogSnapshot",
    "Category",
    "Collection",
    "ContentItem",
    "IndexEntry",
    "ResourceLink",
    "ResumeTarget",
    "build_index",
    "get_catalog_snapshot",
    "load_catalog",
    "make_snapshot",
    "reload_catalog",
    "resolve_next",
]
