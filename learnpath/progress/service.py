"""Business logic for progress tracking: ticks, resume targets and the sign-in merge."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from learnpath.catalog.provider import CatalogSnapshot
from learnpath.catalog.resolver import ResumeTarget, resolve_next
from learnpath.core.identity import Identity
from learnpath.documents import DocumentStoreError
from learnpath.exceptions import MergeInProgressError, ResourceNotFoundError
from learnpath.gamification.models import Awards
from learnpath.gamification.service import GamificationService
from learnpath.storage import StorageError

from .merge import changed_entries, merge
from .models import ProgressEntry, ProgressRecord
from .store import ProgressStore


logger = logging.getLogger(__name__)

MergeStatus = Literal["completed", "nothing_to_merge", "partial", "pending"]


@dataclass
class MergeResult:
    """Outcome of one sign-in merge."""

    status: MergeStatus
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    guest_cleared: bool = False


@dataclass
class TickResult:
    """Outcome of one playback progress tick.

    `skipped` ticks were too close to the saved position to write; `entry`
    is then the stored entry.
    """

    item_id: str
    entry: ProgressEntry
    newly_completed: bool
    saved: bool
    awards: Awards = field(default_factory=Awards)
    skipped: bool = False


class MergeCoordinator:
    """Tracks running sign-in merges, at most one per guest record.

    A second trigger for the same guest record while a merge runs would
    re-apply the same stale guest data, so it is rejected instead.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[MergeResult]] = {}

    def is_running(self, guest_key: str) -> bool:
        """True while a merge for this guest record has not finished."""
        task = self._in_flight.get(guest_key)
        return task is not None and not task.done()

    def start(self, guest_key: str, merge_coro: Coroutine[Any, Any, MergeResult]) -> asyncio.Task[MergeResult]:
        """Schedule a merge, refusing if one is already running for the guest record."""
        if self.is_running(guest_key):
            merge_coro.close()
            raise MergeInProgressError(guest_key)

        task = asyncio.create_task(merge_coro)
        self._in_flight[guest_key] = task

        def _forget(finished: asyncio.Task[MergeResult]) -> None:
            if self._in_flight.get(guest_key) is finished:
                del self._in_flight[guest_key]
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(f"Progress merge for guest {guest_key} failed", exc_info=finished.exception())

        task.add_done_callback(_forget)
        return task


merge_coordinator = MergeCoordinator()


class ProgressService:
    """Service for one session's progress: guest storage, remote record and rewards."""

    def __init__(
        self,
        store: ProgressStore,
        snapshot: CatalogSnapshot,
        gamification: GamificationService | None = None,
        completion_threshold: float = 0.95,
        coordinator: MergeCoordinator | None = None,
        save_interval: float = 5.0,
    ) -> None:
        """Initialize progress service."""
        self.store = store
        self.snapshot = snapshot
        self.gamification = gamification
        self.completion_threshold = completion_threshold
        self.coordinator = coordinator or merge_coordinator
        self.save_interval = save_interval

    async def merge_progress_on_sign_in(self, user_id: str) -> MergeResult:
        """Fold the guest record into the user's remote record.

        Strictly sequential: load guest, load remote, merge, write the changed
        entries one by one, then clear the guest record. The guest record is
        only cleared once every write is confirmed, so a failed write leaves
        it in place for the next sign-in to retry.
        """
        guest = await self.store.load_guest()
        if guest is None:
            logger.info(f"No guest progress to merge for user {user_id}")
            return MergeResult(status="nothing_to_merge")

        remote = await self.store.load_remote(user_id)
        if remote is None:
            logger.info(f"No remote progress for user {user_id}, merging into an empty record")
            remote = {}

        merged = merge(remote, guest)
        changed = changed_entries(remote, merged)

        result = MergeResult(status="completed")
        for item_id, entry in changed.items():
            saved = await self.store.save_entry_remote(
                user_id, item_id, entry.watched_seconds, entry.completed, entry.last_activity_at
            )
            (result.written if saved else result.failed).append(item_id)

        if result.failed:
            logger.warning(
                f"Merge for user {user_id} wrote {len(result.written)} of {len(changed)} entries, keeping guest progress"
            )
            result.status = "partial"
            return result

        result.guest_cleared = await self.store.clear_guest()
        logger.info(
            f"Merged {len(guest)} guest entries into user {user_id}: {len(result.written)} written, "
            f"guest cleared={result.guest_cleared}"
        )
        return result

    async def start_sign_in_merge(self, user_id: str, wait_timeout: float | None = None) -> MergeResult:
        """Run the sign-in merge, waiting at most `wait_timeout` seconds for it.

        The merge is shielded from the caller going away; when the wait runs
        out it keeps going in the background and a pending result is returned.

        Raises
        ------
            MergeInProgressError: If a merge for this guest record is already running.
        """
        if self.store.guest_key is None:
            return MergeResult(status="nothing_to_merge")

        task = self.coordinator.start(self.store.guest_key, self.merge_progress_on_sign_in(user_id))

        if self.gamification is not None:
            await self.gamification.ensure_profile(user_id)

        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=wait_timeout)
        except TimeoutError:
            logger.info(f"Merge for user {user_id} still running after {wait_timeout}s, continuing in background")
            return MergeResult(status="pending")

    async def get_active_record(self, identity: Identity) -> ProgressRecord | None:
        """Load the record that is authoritative for this identity."""
        if identity.user_id is not None:
            return await self.store.load_remote(identity.user_id)
        return await self.store.load_guest()

    async def get_resume_target(
        self, identity: Identity, snapshot: CatalogSnapshot | None = None
    ) -> ResumeTarget | None:
        """Resolve the item the learner should continue with, if any."""
        snapshot = snapshot or self.snapshot
        progress = await self.get_active_record(identity)
        return resolve_next(progress, snapshot.index, snapshot.catalog)

    async def record_progress_tick(
        self,
        identity: Identity,
        item_id: str,
        watched_seconds: float,
        completed: bool = False,
    ) -> TickResult:
        """Store one playback update for an item.

        Watched time is capped at a known duration, reaching the completion
        threshold of a known duration marks the item completed, and a
        completed item never goes back to incomplete. A tick is only written
        when playback moved more than `save_interval` seconds past the saved
        position or the item became completed; otherwise it is skipped.

        The current record is read before writing. If that read fails the
        tick is not written, since the stored entry might be completed.

        Raises
        ------
            ResourceNotFoundError: If the item is not in the catalog.
        """
        position = self.snapshot.index.get(item_id)
        if position is None:
            raise ResourceNotFoundError("Video", item_id)

        duration = position.item.known_duration
        capped = min(watched_seconds, duration) if duration is not None else watched_seconds
        reached_threshold = duration is not None and capped >= duration * self.completion_threshold
        now = datetime.now(UTC)

        try:
            if identity.user_id is not None:
                record = await self.store.fetch_remote(identity.user_id) or {}
            else:
                record = await self.store.fetch_guest() or {}
        except (DocumentStoreError, StorageError):
            logger.warning(f"Could not read progress before saving {item_id}, dropping the tick", exc_info=True)
            entry = ProgressEntry(
                watched_seconds=capped, last_activity_at=now, completed=completed or reached_threshold
            )
            return TickResult(item_id=item_id, entry=entry, newly_completed=False, saved=False)

        previous = record.get(item_id)
        already_completed = previous is not None and previous.completed
        is_completed = already_completed or completed or reached_threshold
        newly_completed = is_completed and not already_completed

        if previous is not None and not newly_completed and capped <= previous.watched_seconds + self.save_interval:
            return TickResult(item_id=item_id, entry=previous, newly_completed=False, saved=False, skipped=True)

        entry = ProgressEntry(watched_seconds=capped, last_activity_at=now, completed=is_completed)
        updated = {**record, item_id: entry}

        if identity.user_id is None:
            saved = await self.store.save_guest(updated)
            return TickResult(item_id=item_id, entry=entry, newly_completed=newly_completed, saved=saved)

        saved = await self.store.save_entry_remote(
            identity.user_id, item_id, entry.watched_seconds, entry.completed, entry.last_activity_at
        )
        awards = Awards()
        if saved and self.gamification is not None:
            awards = await self.gamification.record_activity(
                identity.user_id, updated, newly_completed, entry.last_activity_at
            )

        return TickResult(item_id=item_id, entry=entry, newly_completed=newly_completed, saved=saved, awards=awards)
