"""Business logic for points, badges, streaks and the leaderboard."""

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from learnpath.catalog.models import Catalog
from learnpath.documents import DocumentStore, DocumentStoreError
from learnpath.documents.base import Document
from learnpath.progress.models import ProgressRecord

from .badges import earned_badges, next_streak
from .models import Awards, LeaderboardEntry, UserProfile


logger = logging.getLogger(__name__)


class GamificationService:
    """Service for user profiles and the rewards earned by watching."""

    def __init__(self, profiles: DocumentStore, catalog: Catalog, completion_points: int) -> None:
        """Initialize gamification service."""
        self.profiles = profiles
        self.catalog = catalog
        self.completion_points = completion_points

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Load a profile; unreadable or malformed profiles come back as None."""
        try:
            document = await self.profiles.get(user_id)
        except DocumentStoreError:
            logger.warning(f"Could not load profile for user {user_id}", exc_info=True)
            return None

        if document is None:
            return None
        return self._parse_profile(user_id, document)

    def _parse_profile(self, user_id: str, document: dict[str, Any]) -> UserProfile | None:
        try:
            return UserProfile.model_validate({"uid": user_id, **document})
        except ValidationError as e:
            logger.warning(f"Profile for user {user_id} is malformed: {e.error_count()} error(s)")
            return None

    async def ensure_profile(self, user_id: str, display_name: str = "", email: str = "") -> UserProfile | None:
        """Return the user's profile, creating an empty one on first sign-in.

        A profile that exists but is malformed is never overwritten.
        """

        def create_if_missing(document: Document | None) -> Document | None:
            if document is not None:
                return None
            return UserProfile(uid=user_id, display_name=display_name, email=email).model_dump(
                mode="json", by_alias=True
            )

        try:
            document = await self.profiles.update(user_id, create_if_missing)
        except DocumentStoreError:
            logger.warning(f"Could not load or create profile for user {user_id}", exc_info=True)
            return None

        if document is None:
            return None
        return self._parse_profile(user_id, document)

    async def record_activity(
        self,
        user_id: str,
        progress: ProgressRecord,
        newly_completed: bool,
        now: datetime | None = None,
    ) -> Awards:
        """Apply streak, points and badges for one saved progress update.

        `progress` is the user's record including the update. Points, badges
        and streak are computed from the stored profile inside one atomic
        update, so concurrent completions each count. Failures are logged and
        reported as nothing awarded.
        """
        today = (now or datetime.now(UTC)).astimezone(UTC).date()
        points = self.completion_points if newly_completed else 0
        awarded = Awards()

        def apply_activity(document: Document | None) -> Document | None:
            nonlocal awarded
            awarded = Awards()

            if document is None:
                profile = UserProfile(uid=user_id)
                document = profile.model_dump(mode="json", by_alias=True)
            else:
                profile = self._parse_profile(user_id, document)
                if profile is None:
                    return None

            patch: dict[str, Any] = {}
            streak = next_streak(profile.current_streak, profile.last_activity_date, today)
            if streak != profile.current_streak or profile.last_activity_date != today:
                patch["currentStreak"] = streak
                patch["longestStreak"] = max(profile.longest_streak, streak)
                patch["lastActivityDate"] = today.isoformat()

            if points:
                patch["points"] = profile.points + points

            new_badges = [b for b in earned_badges(self.catalog, progress, streak) if b not in profile.badges]
            if new_badges:
                patch["badges"] = [*profile.badges, *new_badges]

            if not patch:
                return None

            awarded = Awards(points=points, badges=new_badges)
            return {**document, **patch}

        try:
            await self.profiles.update(user_id, apply_activity)
        except DocumentStoreError:
            logger.warning(f"Could not update rewards for user {user_id}", exc_info=True)
            return Awards()

        if awarded.points or awarded.badges:
            logger.info(f"User {user_id} earned {awarded.points} points and badges {awarded.badges}")
        return awarded

    async def get_leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Profiles ranked by points, highest first."""
        try:
            documents = await self.profiles.all()
        except DocumentStoreError:
            logger.warning("Could not load profiles for the leaderboard", exc_info=True)
            return []

        profiles = [
            profile
            for user_id, document in documents.items()
            if (profile := self._parse_profile(user_id, document)) is not None
        ]

        profiles.sort(key=lambda p: (-p.points, p.display_name.lower(), p.uid))
        return [
            LeaderboardEntry(
                uid=profile.uid,
                display_name=profile.display_name or profile.uid,
                avatar_url=profile.avatar_url,
                points=profile.points,
                rank=rank,
            )
            for rank, profile in enumerate(profiles[:limit], start=1)
        ]
