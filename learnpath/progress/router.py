"""Progress tracking API endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from learnpath.config import get_settings
from learnpath.core.identity import CurrentIdentity, RequiredUserId, get_required_guest_id
from learnpath.middleware.security import limiter

from .dependencies import Progress
from .schemas import (
    MergeResponse,
    ProgressEntryResponse,
    ProgressRecordResponse,
    ProgressTickRequest,
    ProgressTickResponse,
    ResumeTargetResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/progress", tags=["progress"])

progress_rate_limit = limiter.limit(get_settings().PROGRESS_RATE_LIMIT)


@router.get("")
async def get_progress(identity: CurrentIdentity, service: Progress) -> ProgressRecordResponse:
    """Get the active progress record (remote for users, local for guests)."""
    record = await service.get_active_record(identity) or {}
    return ProgressRecordResponse(
        is_guest=identity.is_guest,
        progress={item_id: ProgressEntryResponse.from_entry(entry) for item_id, entry in record.items()},
    )


@router.get("/resume", response_model=None)
async def get_resume_target(identity: CurrentIdentity, service: Progress) -> ResumeTargetResponse | Response:
    """Get the item to continue with; 204 when there is nothing to show."""
    target = await service.get_resume_target(identity)
    if target is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return ResumeTargetResponse(
        item=target.item,
        collection_id=target.collection_id,
        category=target.category,
        resume_seconds=target.resume_seconds,
        resume_path=target.resume_path,
    )


@router.post("/merge", dependencies=[Depends(get_required_guest_id)])
async def merge_guest_progress(user_id: RequiredUserId, service: Progress) -> MergeResponse:
    """Merge the guest's local progress into the signed-in user's record.

    Needs both ids: X-User-Id for the target and X-Guest-Id for the guest
    record being folded in.
    """
    result = await service.start_sign_in_merge(user_id, wait_timeout=get_settings().MERGE_WAIT_TIMEOUT_SECONDS)
    return MergeResponse(
        status=result.status,
        written=result.written,
        failed=result.failed,
        guest_cleared=result.guest_cleared,
    )


@router.put("/{item_id}")
@progress_rate_limit
async def record_progress(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    item_id: str,
    tick: ProgressTickRequest,
    identity: CurrentIdentity,
    service: Progress,
) -> ProgressTickResponse:
    """Record a playback progress tick for an item."""
    result = await service.record_progress_tick(identity, item_id, tick.watched_seconds, tick.completed)

    if not result.saved and not result.skipped:
        logger.warning(f"Progress tick for {item_id} was not persisted")

    return ProgressTickResponse(
        item_id=result.item_id,
        entry=ProgressEntryResponse.from_entry(result.entry),
        newly_completed=result.newly_completed,
        saved=result.saved,
        skipped=result.skipped,
        awards=result.awards,
    )
