"""Badge identifiers and the rules that award them."""

from datetime import date

from learnpath.catalog.models import Catalog, Collection
from learnpath.progress.models import ProgressRecord


HTML_MASTER = "html-master"
CSS_STYLIST = "css-stylist"
JS_NINJA = "javascript-ninja"
TRIFECTA = "trifecta-completed"
PLAYLIST_COMPLETE_PREFIX = "playlist-complete-"

# Core learning paths with a named badge; any other collection gets a prefixed one
CORE_COLLECTION_BADGES = {
    "html": HTML_MASTER,
    "css": CSS_STYLIST,
    "javascript": JS_NINJA,
}

STREAK_BADGES = (
    (3, "streak-3-days"),
    (7, "streak-7-days"),
    (30, "streak-30-days"),
)


def collection_badge_id(collection_id: str) -> str:
    """Badge awarded for finishing a collection."""
    return CORE_COLLECTION_BADGES.get(collection_id, f"{PLAYLIST_COMPLETE_PREFIX}{collection_id}")


def is_collection_complete(collection: Collection, progress: ProgressRecord) -> bool:
    """A collection is complete when it has items and every one is completed."""
    if not collection.items:
        return False
    return all(progress.get(item.id) is not None and progress[item.id].completed for item in collection.items)


def earned_badges(catalog: Catalog, progress: ProgressRecord, current_streak: int) -> list[str]:
    """Every badge the progress and streak qualify for, in a stable order."""
    badges: list[str] = []
    completed_collections: set[str] = set()

    for collection in catalog.iter_collections():
        if is_collection_complete(collection, progress):
            completed_collections.add(collection.id)
            badge = collection_badge_id(collection.id)
            if badge not in badges:
                badges.append(badge)

    if set(CORE_COLLECTION_BADGES) <= completed_collections:
        badges.append(TRIFECTA)

    badges.extend(badge for length, badge in STREAK_BADGES if current_streak >= length)
    return badges


def next_streak(current_streak: int, last_activity: date | None, today: date) -> int:
    """Streak length after activity on `today`.

    Activity on the same day keeps the streak, activity on the following day
    extends it, and anything else starts a new streak of one.
    """
    if last_activity is None:
        return 1
    gap = (today - last_activity).days
    if gap == 0:
        return max(current_streak, 1)
    if gap == 1:
        return current_streak + 1
    return 1
