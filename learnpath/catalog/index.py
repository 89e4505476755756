"""Flat item lookup built from the nested catalog."""

from dataclasses import dataclass

from .models import Catalog, Category, ContentItem


@dataclass(frozen=True)
class IndexEntry:
    """Catalog position of one item."""

    item: ContentItem
    collection_id: str
    category: Category


CatalogIndex = dict[str, IndexEntry]


def build_index(catalog: Catalog) -> CatalogIndex:
    """Map every item id to its catalog position.

    Single pass in catalog order. Item ids are expected to be unique across
    the whole catalog; if two items share an id the one seen last wins.
    """
    index: CatalogIndex = {}
    for category, collections in catalog.categories.items():
        for collection in collections:
            for item in collection.items:
                index[item.id] = IndexEntry(item=item, collection_id=collection.id, category=category)
    return index
