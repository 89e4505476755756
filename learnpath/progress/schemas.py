"""Schemas for progress API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from learnpath.catalog.models import Category, ContentItem
from learnpath.gamification.models import Awards

from .models import ProgressEntry


class ApiModel(BaseModel):
    """Base schema with camelCase field aliases."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ProgressTickRequest(ApiModel):
    """Schema for a playback progress tick."""

    watched_seconds: float = Field(..., ge=0, allow_inf_nan=False, description="Current position in seconds")
    completed: bool = Field(False, description="Explicitly mark the item completed")


class ProgressEntryResponse(ApiModel):
    """Schema for one progress entry."""

    watched_seconds: float
    last_activity_at: datetime
    completed: bool

    @classmethod
    def from_entry(cls, entry: ProgressEntry) -> "ProgressEntryResponse":
        """Build the response from a progress entry."""
        return cls(
            watched_seconds=entry.watched_seconds,
            last_activity_at=entry.last_activity_at,
            completed=entry.completed,
        )


class ProgressRecordResponse(ApiModel):
    """Schema for the active progress record."""

    is_guest: bool
    progress: dict[str, ProgressEntryResponse]


class ProgressTickResponse(ApiModel):
    """Schema for the result of a progress tick."""

    item_id: str
    entry: ProgressEntryResponse
    newly_completed: bool
    saved: bool
    skipped: bool = False
    awards: Awards


class MergeResponse(ApiModel):
    """Schema for the result of a sign-in merge."""

    status: str
    written: list[str]
    failed: list[str]
    guest_cleared: bool


class ResumeTargetResponse(ApiModel):
    """Schema for the item to continue with."""

    item: ContentItem
    collection_id: str
    category: Category
    resume_seconds: float
    resume_path: str
