"""Pick the single item a learner should continue with."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlencode

from learnpath.progress.models import ProgressRecord

from .index import CatalogIndex
from .models import Catalog, Category, ContentItem


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResumeTarget:
    """The item to continue and the position to continue from."""

    item: ContentItem
    collection_id: str
    category: Category
    resume_seconds: float

    @property
    def resume_path(self) -> str:
        """Player link that opens the item at the resume position."""
        query = urlencode(
            {
                "tab": self.category,
                "playlistId": self.collection_id,
                "videoId": self.item.id,
                "time": math.floor(self.resume_seconds),
            }
        )
        return f"/videos?{query}"


def resolve_next(progress: ProgressRecord | None, index: CatalogIndex, catalog: Catalog) -> ResumeTarget | None:
    """Resolve the resume target for a progress record.

    Priority:
    1. No progress record at all -> None.
    2. The most recently touched incomplete item that is still in the catalog.
    3. The first item in catalog order that is not completed.
    4. Everything completed -> None.
    """
    if progress is None:
        return None

    candidates = [
        (item_id, entry)
        for item_id, entry in progress.items()
        if item_id in index
        and isinstance(entry.last_activity_at, datetime)
        and entry.watched_seconds >= 0
        and not entry.completed
    ]
    if candidates:
        item_id, entry = max(candidates, key=lambda pair: pair[1].last_activity_at)
        position = index[item_id]
        return ResumeTarget(
            item=position.item,
            collection_id=position.collection_id,
            category=position.category,
            resume_seconds=entry.watched_seconds,
        )

    for category, collections in catalog.categories.items():
        for collection in collections:
            for item in collection.items:
                entry = progress.get(item.id)
                if entry is None or not entry.completed:
                    return ResumeTarget(
                        item=item,
                        collection_id=collection.id,
                        category=category,
                        resume_seconds=entry.watched_seconds if entry is not None else 0,
                    )

    logger.debug("Every catalog item is completed, nothing to resume")
    return None
