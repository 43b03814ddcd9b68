from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from islanders.core.runtime import Runtime

from .deps import get_runtime, get_user_id
from .schemas import MarkReadResponse, NotificationListResponse


router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(default=False),
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> NotificationListResponse:
    items = await runtime.emitter.list_for_user(user_id, unread_only=unread_only)
    return NotificationListResponse(items=items, unread=sum(1 for n in items if not n.read))


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: str,
    user_id: str = Depends(get_user_id),
    runtime: Runtime = Depends(get_runtime),
) -> MarkReadResponse:
    if not await runtime.emitter.mark_read(user_id, notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return MarkReadResponse(id=notification_id, read=True)
