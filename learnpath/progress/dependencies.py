from typing import Annotated

from fastapi import Depends

from learnpath.catalog.provider import get_catalog_snapshot
from learnpath.config import get_settings
from learnpath.core.identity import CurrentIdentity
from learnpath.documents import PROGRESS_COLLECTION, get_document_store
from learnpath.gamification.dependencies import Gamification
from learnpath.storage import get_guest_storage

from .service import ProgressService
from .store import ProgressStore


def get_progress_service(identity: CurrentIdentity, gamification: Gamification) -> ProgressService:
    """Build the progress service for the requesting identity."""
    store = ProgressStore(
        documents=get_document_store(PROGRESS_COLLECTION),
        guest_storage=get_guest_storage(identity.guest_id) if identity.guest_id is not None else None,
        guest_key=identity.guest_id,
    )
    return ProgressService(
        store,
        get_catalog_snapshot(),
        gamification,
        completion_threshold=get_settings().COMPLETION_THRESHOLD,
        save_interval=get_settings().PROGRESS_SAVE_INTERVAL_SECONDS,
    )


Progress = Annotated[ProgressService, Depends(get_progress_service)]
