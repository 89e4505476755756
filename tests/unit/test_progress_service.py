"""Tests for progress ticks, resume lookup and the sign-in merge flow."""

import asyncio

import pytest

from learnpath.catalog.models import Catalog
from learnpath.catalog.provider import make_snapshot
from learnpath.core.identity import Identity
from learnpath.documents import DocumentStoreError, InMemoryDocumentStore
from learnpath.exceptions import MergeInProgressError, ResourceNotFoundError
from learnpath.gamification.service import GamificationService
from learnpath.progress.service import MergeCoordinator, ProgressService
from learnpath.progress.store import ProgressStore
from learnpath.storage import LocalStorage
from learnpath.storage.exceptions import FileReadError
from tests.factories import entry, make_catalog, make_collection


GUEST = Identity(user_id=None, guest_id="guest")
USER = Identity(user_id="user-1", guest_id="guest")


class UnreadableDocuments(InMemoryDocumentStore):
    """Accepts writes but fails every read."""

    async def get(self, key):
        raise DocumentStoreError("read timeout")


class RejectingDocuments(InMemoryDocumentStore):
    """Fails writes that touch any of the given item ids."""

    def __init__(self, collection: str, reject: set[str]) -> None:
        super().__init__(collection)
        self.reject = reject

    async def put(self, key, patch):
        if self.reject & set(patch):
            raise DocumentStoreError("write rejected")
        await super().put(key, patch)


class FlakyReads(InMemoryDocumentStore):
    """Fails reads while `failing` is set; writes always go through."""

    def __init__(self, collection: str) -> None:
        super().__init__(collection)
        self.failing = False

    async def get(self, key):
        if self.failing:
            raise DocumentStoreError("read timeout")
        return await super().get(key)


class FlakyGuestStorage(LocalStorage):
    """Local storage whose reads fail while `failing` is set."""

    failing = False

    async def read(self, key):
        if self.failing:
            raise FileReadError(f"Failed to read local storage key: {key}")
        return await super().read(key)


class YieldingProfiles(InMemoryDocumentStore):
    """Gives other tasks a turn on every read, as a networked store would."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)


class GatedDocuments(InMemoryDocumentStore):
    """Blocks reads until the gate is opened."""

    def __init__(self, collection: str) -> None:
        super().__init__(collection)
        self.gate = asyncio.Event()

    async def get(self, key):
        await self.gate.wait()
        return await super().get(key)


@pytest.fixture
def catalog() -> Catalog:
    return make_catalog()


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore("userProgress")


@pytest.fixture
def profiles() -> InMemoryDocumentStore:
    return InMemoryDocumentStore("users")


@pytest.fixture
def guest_storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "guest")


def build_service(documents, guest_storage, catalog, profiles=None) -> ProgressService:
    gamification = GamificationService(profiles, catalog, completion_points=10) if profiles is not None else None
    return ProgressService(
        ProgressStore(documents, guest_storage, "guest"),
        make_snapshot(catalog),
        gamification,
        completion_threshold=0.95,
        coordinator=MergeCoordinator(),
    )


@pytest.fixture
def service(documents, guest_storage, catalog, profiles) -> ProgressService:
    return build_service(documents, guest_storage, catalog, profiles)


class TestRecordProgressTick:
    @pytest.mark.asyncio
    async def test_guest_tick_is_saved_locally(self, service: ProgressService, documents) -> None:
        result = await service.record_progress_tick(GUEST, "item1", 120)

        assert result.saved is True
        assert result.entry.watched_seconds == 120
        assert result.entry.completed is False
        assert (await service.store.load_guest())["item1"] == result.entry
        assert await documents.all() == {}

    @pytest.mark.asyncio
    async def test_guest_tick_keeps_other_entries(self, service: ProgressService) -> None:
        await service.record_progress_tick(GUEST, "item1", 10)
        await service.record_progress_tick(GUEST, "item2", 20)

        assert set(await service.store.load_guest()) == {"item1", "item2"}

    @pytest.mark.asyncio
    async def test_watched_time_is_capped_at_duration(self, service: ProgressService) -> None:
        result = await service.record_progress_tick(GUEST, "item1", 5000)

        assert result.entry.watched_seconds == 600
        assert result.entry.completed is True

    @pytest.mark.asyncio
    async def test_completes_at_ninety_five_percent(self, service: ProgressService) -> None:
        below = await service.record_progress_tick(GUEST, "item1", 569)
        at_threshold = await service.record_progress_tick(GUEST, "item1", 570)

        assert below.entry.completed is False
        assert at_threshold.entry.completed is True
        assert at_threshold.newly_completed is True

    @pytest.mark.asyncio
    async def test_completion_is_sticky(self, service: ProgressService) -> None:
        await service.record_progress_tick(GUEST, "item1", 10, completed=True)

        rewatch = await service.record_progress_tick(GUEST, "item1", 40)

        assert rewatch.entry.completed is True
        assert rewatch.entry.watched_seconds == 40
        assert rewatch.newly_completed is False

    @pytest.mark.asyncio
    async def test_unknown_duration_is_not_capped(self, documents, guest_storage) -> None:
        catalog = Catalog(categories={"html": (make_collection("c1", "html", ["live"], duration=None),)})
        service = build_service(documents, guest_storage, catalog)

        result = await service.record_progress_tick(GUEST, "live", 9000)

        assert result.entry.watched_seconds == 9000
        assert result.entry.completed is False

    @pytest.mark.asyncio
    async def test_unknown_item_is_rejected(self, service: ProgressService) -> None:
        with pytest.raises(ResourceNotFoundError):
            await service.record_progress_tick(GUEST, "not-in-catalog", 10)

    @pytest.mark.asyncio
    async def test_identified_tick_writes_remote_only(self, service: ProgressService, documents) -> None:
        result = await service.record_progress_tick(USER, "item3", 30)

        assert result.saved is True
        assert (await service.store.load_remote("user-1"))["item3"] == result.entry
        assert await service.store.load_guest() is None

    @pytest.mark.asyncio
    async def test_completion_points_are_awarded_once(self, service: ProgressService, profiles) -> None:
        first = await service.record_progress_tick(USER, "item1", 600)
        again = await service.record_progress_tick(USER, "item1", 600)

        assert first.awards.points == 10
        assert again.awards.points == 0
        assert (await profiles.get("user-1"))["points"] == 10

    @pytest.mark.asyncio
    async def test_finishing_a_collection_awards_its_badge_once(self, service: ProgressService, profiles) -> None:
        await service.record_progress_tick(USER, "item1", 600)
        finished = await service.record_progress_tick(USER, "item2", 600)
        replay = await service.record_progress_tick(USER, "item2", 600)

        assert "playlist-complete-c1" in finished.awards.badges
        assert replay.awards.badges == []
        assert (await profiles.get("user-1"))["badges"].count("playlist-complete-c1") == 1

    @pytest.mark.asyncio
    async def test_guest_ticks_earn_nothing(self, service: ProgressService, profiles) -> None:
        result = await service.record_progress_tick(GUEST, "item1", 600)

        assert result.awards.points == 0
        assert await profiles.all() == {}

    @pytest.mark.asyncio
    async def test_failed_remote_write_is_reported_without_awards(self, guest_storage, catalog, profiles) -> None:
        service = build_service(RejectingDocuments("userProgress", {"item1"}), guest_storage, catalog, profiles)

        result = await service.record_progress_tick(USER, "item1", 600)

        assert result.saved is False
        assert result.awards.points == 0
        assert await profiles.all() == {}


class TestTickThrottle:
    @pytest.mark.asyncio
    async def test_small_advance_is_not_written(self, service: ProgressService) -> None:
        first = await service.record_progress_tick(GUEST, "item1", 100)

        nudge = await service.record_progress_tick(GUEST, "item1", 105)

        assert nudge.skipped is True
        assert nudge.saved is False
        assert nudge.entry == first.entry
        assert (await service.store.load_guest())["item1"] == first.entry

    @pytest.mark.asyncio
    async def test_advance_past_interval_is_written(self, service: ProgressService) -> None:
        await service.record_progress_tick(GUEST, "item1", 100)

        result = await service.record_progress_tick(GUEST, "item1", 105.5)

        assert result.skipped is False
        assert result.saved is True
        assert (await service.store.load_guest())["item1"].watched_seconds == 105.5

    @pytest.mark.asyncio
    async def test_completion_is_written_inside_the_interval(self, service: ProgressService) -> None:
        await service.record_progress_tick(GUEST, "item1", 567)

        result = await service.record_progress_tick(GUEST, "item1", 570)

        assert result.skipped is False
        assert result.newly_completed is True
        assert (await service.store.load_guest())["item1"].completed is True

    @pytest.mark.asyncio
    async def test_first_tick_for_an_item_is_always_written(self, service: ProgressService) -> None:
        result = await service.record_progress_tick(GUEST, "item1", 1)

        assert result.saved is True


class TestTickReadFailures:
    @pytest.mark.asyncio
    async def test_unreadable_remote_never_uncompletes(self, guest_storage, catalog, profiles) -> None:
        documents = FlakyReads("userProgress")
        service = build_service(documents, guest_storage, catalog, profiles)
        await service.record_progress_tick(USER, "item1", 600)

        documents.failing = True
        result = await service.record_progress_tick(USER, "item1", 30)
        documents.failing = False

        assert result.saved is False
        assert result.newly_completed is False
        stored = (await service.store.load_remote("user-1"))["item1"]
        assert stored.completed is True
        assert stored.watched_seconds == 600

    @pytest.mark.asyncio
    async def test_unreadable_remote_awards_nothing(self, guest_storage, catalog, profiles) -> None:
        documents = FlakyReads("userProgress")
        service = build_service(documents, guest_storage, catalog, profiles)
        await service.record_progress_tick(USER, "item1", 600)

        documents.failing = True
        result = await service.record_progress_tick(USER, "item1", 600)

        assert result.awards.points == 0
        assert (await profiles.get("user-1"))["points"] == 10

    @pytest.mark.asyncio
    async def test_unreadable_guest_record_is_not_overwritten(self, documents, tmp_path, catalog) -> None:
        guest_storage = FlakyGuestStorage(tmp_path / "guest")
        service = build_service(documents, guest_storage, catalog)
        await service.record_progress_tick(GUEST, "item1", 50)
        await service.record_progress_tick(GUEST, "item2", 60)

        guest_storage.failing = True
        result = await service.record_progress_tick(GUEST, "item3", 70)
        guest_storage.failing = False

        assert result.saved is False
        assert set(await service.store.load_guest()) == {"item1", "item2"}


class TestConcurrentRewards:
    @pytest.mark.asyncio
    async def test_simultaneous_completions_both_earn_points(self, documents, guest_storage, catalog) -> None:
        profiles = YieldingProfiles("users")
        service = build_service(documents, guest_storage, catalog, profiles)

        first, second = await asyncio.gather(
            service.record_progress_tick(USER, "item1", 600),
            service.record_progress_tick(USER, "item5", 600),
        )

        assert first.awards.points == second.awards.points == 10
        assert (await profiles.get("user-1"))["points"] == 20


class TestResumeTarget:
    @pytest.mark.asyncio
    async def test_guest_without_progress_has_nothing_to_resume(self, service: ProgressService) -> None:
        assert await service.get_resume_target(GUEST) is None

    @pytest.mark.asyncio
    async def test_identified_user_resumes_from_remote_record(self, service: ProgressService) -> None:
        await service.record_progress_tick(GUEST, "item1", 50)
        await service.record_progress_tick(USER, "item6", 75)

        target = await service.get_resume_target(USER)

        assert target is not None
        assert target.item.id == "item6"
        assert target.resume_seconds == 75


class TestSignInMerge:
    @pytest.mark.asyncio
    async def test_no_guest_record_is_nothing_to_merge(self, service: ProgressService) -> None:
        result = await service.merge_progress_on_sign_in("user-1")

        assert result.status == "nothing_to_merge"
        assert result.written == []

    @pytest.mark.asyncio
    async def test_merge_writes_changes_and_clears_guest(self, service: ProgressService, documents) -> None:
        await service.store.save_entry_remote("user-1", "item1", 90, False, entry(minutes=9).last_activity_at)
        await service.store.save_guest({"item1": entry(watched=20, minutes=5), "item2": entry(completed=True)})

        result = await service.merge_progress_on_sign_in("user-1")

        assert result.status == "completed"
        assert result.written == ["item2"]
        assert result.guest_cleared is True
        assert await service.store.load_guest() is None
        assert await service.store.load_remote("user-1") == {
            "item1": entry(watched=90, minutes=9),
            "item2": entry(completed=True),
        }

    @pytest.mark.asyncio
    async def test_guest_is_cleared_even_when_nothing_changed(self, service: ProgressService, documents) -> None:
        await service.store.save_entry_remote("user-1", "item1", 90, True, entry(minutes=9).last_activity_at)
        await service.store.save_guest({"item1": entry(watched=20, minutes=5)})

        result = await service.merge_progress_on_sign_in("user-1")

        assert result.status == "completed"
        assert result.written == []
        assert result.guest_cleared is True

    @pytest.mark.asyncio
    async def test_unreadable_remote_is_merged_as_empty(self, guest_storage, catalog) -> None:
        service = build_service(UnreadableDocuments("userProgress"), guest_storage, catalog)
        await service.store.save_guest({"item1": entry(), "item2": entry(minutes=1)})

        result = await service.merge_progress_on_sign_in("user-1")

        assert result.status == "completed"
        assert sorted(result.written) == ["item1", "item2"]
        assert result.guest_cleared is True

    @pytest.mark.asyncio
    async def test_failed_write_keeps_guest_record(self, guest_storage, catalog) -> None:
        service = build_service(RejectingDocuments("userProgress", {"item2"}), guest_storage, catalog)
        guest = {"item1": entry(), "item2": entry(minutes=1)}
        await service.store.save_guest(guest)

        result = await service.merge_progress_on_sign_in("user-1")

        assert result.status == "partial"
        assert result.written == ["item1"]
        assert result.failed == ["item2"]
        assert result.guest_cleared is False
        assert await service.store.load_guest() == guest

    @pytest.mark.asyncio
    async def test_sign_in_merge_creates_profile(self, service: ProgressService, profiles) -> None:
        await service.store.save_guest({"item1": entry()})

        result = await service.start_sign_in_merge("user-1", wait_timeout=5)

        assert result.status == "completed"
        assert (await profiles.get("user-1"))["points"] == 0

    @pytest.mark.asyncio
    async def test_concurrent_merge_is_rejected_and_first_finishes_in_background(
        self, guest_storage, catalog
    ) -> None:
        documents = GatedDocuments("userProgress")
        service = build_service(documents, guest_storage, catalog)
        await service.store.save_guest({"item1": entry()})

        first = await service.start_sign_in_merge("user-1", wait_timeout=0.01)
        with pytest.raises(MergeInProgressError):
            await service.start_sign_in_merge("user-1", wait_timeout=0.01)

        assert first.status == "pending"
        assert service.coordinator.is_running("guest")

        documents.gate.set()
        while service.coordinator.is_running("guest"):
            await asyncio.sleep(0.01)

        assert await service.store.load_guest() is None
        assert "item1" in (await documents.all())["user-1"]
