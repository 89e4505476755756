"""Uniform access to guest (local) and identified (remote) progress records.

The load, save and clear operations never raise past this boundary: failed
reads come back as None and failed writes as False, with the cause logged.
The fetch variants raise instead, so read-modify-write callers can tell a
failed read from a record that does not exist.
"""

import json
import logging
from datetime import datetime

from learnpath.documents import DocumentStore, DocumentStoreError
from learnpath.storage import AbstractStorage, StorageError, StorageFileNotFoundError

from .models import ProgressEntry, ProgressRecord, dump_progress_record, parse_progress_record


logger = logging.getLogger(__name__)

GUEST_PROGRESS_KEY = "guest-progress.json"


class ProgressStore:
    """Progress adapter for one session: a guest storage namespace plus the remote store.

    A signed-in session that sent no guest id has no guest namespace; it
    reads as having no guest record and cannot write one.
    """

    def __init__(
        self, documents: DocumentStore, guest_storage: AbstractStorage | None, guest_key: str | None
    ) -> None:
        self.documents = documents
        self.guest_storage = guest_storage
        self.guest_key = guest_key

    async def fetch_guest(self) -> ProgressRecord | None:
        """Read the guest record, or None when there is none.

        Raises
        ------
            StorageError: If the record exists but cannot be read.
        """
        if self.guest_storage is None:
            return None

        try:
            content = await self.guest_storage.read(GUEST_PROGRESS_KEY)
        except StorageFileNotFoundError:
            return None

        try:
            raw = json.loads(content)
        except json.JSONDecodeError:
            logger.warning(f"Guest progress for {self.guest_key} is not valid JSON, ignoring it")
            return None

        return parse_progress_record(raw, "guest")

    async def load_guest(self) -> ProgressRecord | None:
        """Read the guest record, or None when there is none or it cannot be read."""
        try:
            return await self.fetch_guest()
        except StorageError as e:
            logger.warning(f"Could not read guest progress for {self.guest_key}: {e}")
            return None

    async def save_guest(self, record: ProgressRecord) -> bool:
        """Overwrite the guest record."""
        if self.guest_storage is None:
            logger.warning("Cannot save guest progress without a guest id")
            return False
        try:
            await self.guest_storage.write(GUEST_PROGRESS_KEY, json.dumps(dump_progress_record(record)))
        except StorageError as e:
            logger.warning(f"Could not save guest progress for {self.guest_key}: {e}")
            return False
        return True

    async def clear_guest(self) -> bool:
        """Remove the guest record entirely."""
        if self.guest_storage is None:
            return False
        try:
            await self.guest_storage.delete(GUEST_PROGRESS_KEY)
        except StorageError as e:
            logger.warning(f"Could not clear guest progress for {self.guest_key}: {e}")
            return False
        return True

    async def fetch_remote(self, user_id: str) -> ProgressRecord | None:
        """Read the identified record, or None when the user has none.

        Raises
        ------
            DocumentStoreError: If the store cannot be read.
        """
        document = await self.documents.get(user_id)
        if document is None:
            return None
        return parse_progress_record(document, "remote")

    async def load_remote(self, user_id: str) -> ProgressRecord | None:
        """Read the identified record, or None when absent or the store is unavailable."""
        try:
            return await self.fetch_remote(user_id)
        except DocumentStoreError:
            logger.warning(f"Could not load remote progress for user {user_id}", exc_info=True)
            return None

    async def save_entry_remote(
        self,
        user_id: str,
        item_id: str,
        watched_seconds: float,
        completed: bool,
        last_activity_at: datetime,
    ) -> bool:
        """Upsert one entry of the identified record, leaving other entries alone."""
        entry = ProgressEntry(
            watched_seconds=watched_seconds, last_activity_at=last_activity_at, completed=completed
        )
        patch = {
            item_id: {
                "watchedSeconds": entry.watched_seconds,
                "lastActivityAt": entry.last_activity_at,
                "completed": entry.completed,
            }
        }
        try:
            await self.documents.put(user_id, patch)
        except DocumentStoreError:
            logger.warning(f"Could not save remote progress for user {user_id}, item {item_id}", exc_info=True)
            return False
        return True
