"""Activity log endpoints."""

from fastapi import APIRouter, Depends, Query

from pharmapos.api.dependencies import get_activity_logger
from pharmapos.application.dto.responses import ActivityLogListResponse
from pharmapos.core.services import ActivityLogger

router = APIRouter(prefix="/api/activity-logs", tags=["activity"])


@router.get("", response_model=ActivityLogListResponse)
async def list_activity(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ActivityLogListResponse:
    """Recent activity, newest first."""
    total = await activity.total()
    logs = await activity.recent(limit=limit, offset=offset)
    return ActivityLogListResponse(
        logs=logs,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(logs) < total,
    )
