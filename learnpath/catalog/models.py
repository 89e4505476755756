"""Catalog models: categories, collections (playlists), items and resource links."""

from collections.abc import Iterator
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


Category = Literal["html", "css", "javascript"]
ResourceType = Literal["documentation", "article", "tool", "guide"]


class CatalogModel(BaseModel):
    """Immutable catalog node serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class ContentItem(CatalogModel):
    """A single watchable unit."""

    id: str = Field(..., min_length=1)
    collection_id: str = Field(..., min_length=1)
    title: str
    url: str = ""
    duration_seconds: int | None = Field(None, ge=0, description="Absent or 0 means unknown duration")
    description: str | None = None

    @property
    def known_duration(self) -> int | None:
        """Duration in seconds, or None when it is unknown."""
        return self.duration_seconds or None


class Collection(CatalogModel):
    """An ordered playlist of items under one category."""

    id: str = Field(..., min_length=1)
    category: Category
    title: str
    description: str | None = None
    creator: str | None = None
    items: tuple[ContentItem, ...] = ()

    @model_validator(mode="after")
    def check_item_ownership(self) -> "Collection":
        """Every item must name this collection as its owner."""
        for item in self.items:
            if item.collection_id != self.id:
                msg = f"Item {item.id} belongs to collection {item.collection_id}, not {self.id}"
                raise ValueError(msg)
        return self


class ResourceLink(CatalogModel):
    """A curated external learning resource."""

    id: str
    title: str
    url: str
    description: str = ""
    type: ResourceType


class Catalog(CatalogModel):
    """Category -> ordered collections, plus curated resource links per category.

    Mapping order is significant: it is the order categories are browsed and
    the order the resolver falls back to.
    """

    categories: dict[Category, tuple[Collection, ...]]
    resources: dict[Category, tuple[ResourceLink, ...]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_collection_categories(self) -> "Catalog":
        """Collections must be filed under their own category."""
        for category, collections in self.categories.items():
            for collection in collections:
                if collection.category != category:
                    msg = f"Collection {collection.id} has category {collection.category}, filed under {category}"
                    raise ValueError(msg)
        return self

    def iter_collections(self) -> Iterator[Collection]:
        """Yield collections in catalog order."""
        for collections in self.categories.values():
            yield from collections

    def get_collection(self, collection_id: str) -> Collection | None:
        """Return the first collection with the given id."""
        return next((c for c in self.iter_collections() if c.id == collection_id), None)
