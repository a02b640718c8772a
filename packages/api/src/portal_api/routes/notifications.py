# This project was developed with assistance from AI tools.
"""Per-user notification routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from portal_db import get_db
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.notification import NotificationItem, NotificationListResponse
from ..services import notification as notification_service

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    """The caller's most recent notifications, newest first."""
    rows = await notification_service.list_notifications(session, user)
    items = [NotificationItem.model_validate(n) for n in rows]
    return NotificationListResponse(
        data=items,
        unread_count=sum(1 for n in items if not n.read),
    )


@router.patch("/{notification_id}/read", response_model=NotificationItem)
async def mark_notification_read(
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationItem:
    notification = await notification_service.mark_read(session, user, notification_id)
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return NotificationItem.model_validate(notification)


@router.patch("/jobs/{job_id}/read")
async def mark_job_notifications_read(
    job_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> dict[str, int]:
    """Mark every unread notification the caller has for one job as read."""
    updated = await notification_service.mark_job_read(session, user, job_id)
    return {"updated": updated}
