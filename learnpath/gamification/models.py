"""User profile document and leaderboard rows."""

from datetime import UTC, date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserProfile(BaseModel):
    """Profile document stored in the `users` collection."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    uid: str
    display_name: str = ""
    email: str = ""
    avatar_url: str | None = None
    points: int = Field(0, ge=0)
    badges: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    last_activity_date: date | None = None


class LeaderboardEntry(BaseModel):
    """One ranked row of the leaderboard."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    uid: str
    display_name: str
    avatar_url: str | None = None
    points: int
    rank: int


class Awards(BaseModel):
    """What one progress update earned."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    points: int = 0
    badges: list[str] = Field(default_factory=list)
