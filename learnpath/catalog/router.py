"""Catalog browsing API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from learnpath.exceptions import ResourceNotFoundError

from .models import Catalog, Category, Collection, ResourceLink
from .provider import CatalogSnapshot, get_catalog_snapshot


router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])

Snapshot = Annotated[CatalogSnapshot, Depends(get_catalog_snapshot)]


@router.get("")
async def get_catalog(snapshot: Snapshot) -> Catalog:
    """Get the full catalog: collections by category plus resource links."""
    return snapshot.catalog


@router.get("/collections/{collection_id}")
async def get_collection(collection_id: str, snapshot: Snapshot) -> Collection:
    """Get one collection with its items."""
    collection = snapshot.catalog.get_collection(collection_id)
    if collection is None:
        raise ResourceNotFoundError("Collection", collection_id)
    return collection


@router.get("/resources")
async def list_resources(
    snapshot: Snapshot,
    category: Annotated[Category | None, Query(description="Only links for this category")] = None,
) -> dict[str, list[ResourceLink]]:
    """Get curated resource links grouped by category."""
    resources = snapshot.catalog.resources
    if category is not None:
        return {category: list(resources.get(category, ()))}
    return {key: list(links) for key, links in resources.items()}
