"""Progress entries and the loaders that normalize stored variants into them."""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator


logger = logging.getLogger(__name__)


class ProgressEntry(BaseModel):
    """Watch state of one catalog item.

    Accepts the stored field names (`watchedSeconds`, `lastActivityAt`) as
    well as the older `watchedTime` / `lastWatched` ones, and always holds a
    timezone-aware UTC `last_activity_at`.
    """

    model_config = ConfigDict(frozen=True)

    watched_seconds: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("watchedSeconds", "watchedTime", "watched_seconds"),
        serialization_alias="watchedSeconds",
    )
    last_activity_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("lastActivityAt", "lastWatched", "last_activity_at"),
        serialization_alias="lastActivityAt",
    )
    completed: bool = False

    @field_validator("last_activity_at", mode="before")
    @classmethod
    def unwrap_server_timestamp(cls, value: Any) -> Any:
        """Turn `{seconds, nanoseconds}` server timestamp maps into epoch floats."""
        if isinstance(value, Mapping):
            seconds = value.get("seconds", value.get("_seconds"))
            nanos = value.get("nanoseconds", value.get("_nanoseconds", 0))
            if isinstance(seconds, int | float) and isinstance(nanos, int | float):
                return seconds + nanos / 1_000_000_000
        return value

    @field_validator("last_activity_at")
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        """Naive values are taken as UTC; aware values are converted to UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


ProgressRecord = dict[str, ProgressEntry]


def parse_progress_record(raw: Any, source: str) -> ProgressRecord:
    """Build a ProgressRecord from a stored mapping.

    Entries that fail validation (bad timestamp, missing field, negative
    time) are skipped individually and logged; the rest are kept.
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Ignoring {source} progress: expected an object, got {type(raw).__name__}")
        return {}

    record: ProgressRecord = {}
    for item_id, raw_entry in raw.items():
        try:
            record[str(item_id)] = ProgressEntry.model_validate(raw_entry)
        except ValidationError as e:
            logger.warning(f"Skipping malformed {source} progress entry {item_id}: {e.error_count()} error(s)")
    return record


def dump_entry(entry: ProgressEntry) -> dict[str, Any]:
    """Serialize one entry with ISO-8601 timestamps."""
    return entry.model_dump(mode="json", by_alias=True)


def dump_progress_record(record: ProgressRecord) -> dict[str, Any]:
    """Serialize a whole record with ISO-8601 timestamps."""
    return {item_id: dump_entry(entry) for item_id, entry in record.items()}
