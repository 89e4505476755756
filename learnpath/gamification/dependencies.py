from typing import Annotated

from fastapi import Depends

from learnpath.catalog.provider import get_catalog_snapshot
from learnpath.config import get_settings
from learnpath.documents import PROFILE_COLLECTION, get_document_store

from .service import GamificationService


def get_gamification_service() -> GamificationService:
    """Build the gamification service over the profile collection."""
    return GamificationService(
        get_document_store(PROFILE_COLLECTION),
        get_catalog_snapshot().catalog,
        completion_points=get_settings().VIDEO_COMPLETION_POINTS,
    )


Gamification = Annotated[GamificationService, Depends(get_gamification_service)]
