"""Notifications router — fetch, read, and mark-all-read."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ideation.database import get_db
from ideation.models.notification import Notification
from ideation.models.player import Player
from ideation.routers.auth import require_player
from ideation.schemas.auth import MessageOut
from ideation.schemas.notification import NotificationList
from ideation.schemas.records import NotificationRecord, to_record, to_records

router = APIRouter(prefix="/notifications", tags=["notifications"])

RECENT_LIMIT = 20


@router.get("", response_model=NotificationList)
async def get_notifications(
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """Return last 20 notifications + unread count for the current player."""
    # Unread count
    count_result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_user_id == current_player.user_id,
            Notification.read == False,  # noqa: E712
        )
    )
    unread_count = count_result.scalar() or 0

    # Last 20 notifications
    result = await db.execute(
        select(Notification)
        .where(Notification.recipient_user_id == current_player.user_id)
        .order_by(desc(Notification.created_at))
        .limit(RECENT_LIMIT)
    )

    return NotificationList(
        unread_count=unread_count,
        notifications=to_records(NotificationRecord, result.scalars().all()),
    )


@router.post("/{notification_id}/read", response_model=NotificationRecord)
async def mark_read(
    notification_id: str,
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """Mark a single notification as read."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_user_id == current_player.user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.read = True
    await db.commit()
    return to_record(NotificationRecord, notification)


@router.post("/read-all", response_model=MessageOut)
async def mark_all_read(
    current_player: Player = Depends(require_player),
    db: AsyncSession = Depends(get_db),
):
    """Mark all notifications as read for the current player."""
    await db.execute(
        update(Notification)
        .where(
            Notification.recipient_user_id == current_player.user_id,
            Notification.read == False,  # noqa: E712
        )
        .values(read=True)
    )
    await db.commit()
    return {"message": "All notifications marked as read"}
