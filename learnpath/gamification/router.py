"""Profile and leaderboard API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from learnpath.core.identity import RequiredUserId
from learnpath.exceptions import ResourceNotFoundError

from .dependencies import Gamification
from .models import LeaderboardEntry, UserProfile


router = APIRouter(prefix="/api/v1", tags=["gamification"])


@router.get("/users/me/profile")
async def get_my_profile(user_id: RequiredUserId, service: Gamification) -> UserProfile:
    """Get the signed-in user's points, badges and streaks."""
    profile = await service.get_profile(user_id)
    if profile is None:
        raise ResourceNotFoundError("Profile", user_id)
    return profile


@router.get("/leaderboard")
async def get_leaderboard(
    service: Gamification,
    limit: Annotated[int, Query(ge=1, le=100, description="Number of entries")] = 10,
) -> list[LeaderboardEntry]:
    """Get the top users by points."""
    return await service.get_leaderboard(limit)
