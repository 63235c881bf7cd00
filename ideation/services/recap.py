"""
Daily recap — one digest email per player for the last day's notifications.

Every notification picked up by a run is marked as sent in one transaction
after all emails have settled, whatever their outcome. A failed send is not
retried; a crash before the commit may repeat a send on the next run.
Passes are serialized within a process. Across processes the scheduled
run must be enabled on a single worker (RECAP_ENABLED).
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from ideation.config import settings
from ideation.database import async_session
from ideation.models.notification import Notification, NotificationType
from ideation.models.player import Player
from ideation.schemas.records import NotificationRecord, PlayerRecord, to_record, to_records
from ideation.services.notifications import render_email, send_email
from ideation.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

Sender = Callable[[str, str, str], Awaitable[bool]]

RECAP_SUBJECT = "Daily Recap: New Notifications on {app_name}"

_recap_lock = asyncio.Lock()


@dataclass
class RecapSummary:
    emails_sent: int = 0
    emails_failed: int = 0
    recipients_skipped: int = 0
    notifications_marked: int = 0
    already_running: bool = False


def group_by_recipient(notifications: List[NotificationRecord]) -> Dict[str, List[NotificationRecord]]:
    """Group preserving query order, both across and within recipients."""
    grouped: Dict[str, List[NotificationRecord]] = {}
    for notification in notifications:
        grouped.setdefault(notification.recipient_user_id, []).append(notification)
    return grouped


def notification_link(notification: NotificationRecord) -> str:
    base = f"{settings.PLATFORM_URL.rstrip('/')}/ideas/{notification.idea_id}"
    if notification.type == NotificationType.comment_mention.value:
        return f"{base}#comment-{notification.entity_id}"
    return base


def render_recap(player: PlayerRecord, notifications: List[NotificationRecord]) -> str:
    items = [
        {
            "link": notification_link(n),
            "message": n.message,
            "timestamp": n.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        }
        for n in notifications
    ]
    return render_email("recap_email.html", display_name=player.display_name, items=items)


async def _deliver(send: Sender, player: PlayerRecord, html: str) -> bool:
    subject = RECAP_SUBJECT.format(app_name=settings.APP_NAME)
    try:
        return await send(player.email, subject, html)
    except Exception as e:
        logger.error(f"Failed to send daily recap email to {player.email}: {e}")
        return False


async def _prepare(
    db,
    send: Sender,
    user_id: str,
    notifications: List[NotificationRecord],
    summary: RecapSummary,
):
    """Return the pending delivery for one recipient, or None when nothing is sent."""
    row = await db.get(Player, user_id)
    player = to_record(PlayerRecord, row) if row is not None else None

    if player is None or not player.email:
        logger.warning(f"User {user_id} not found or has no email. Skipping recap email.")
        summary.recipients_skipped += 1
        return None

    if not player.receive_recap_emails:
        logger.info(f"User {user_id} opted out of recap emails. Skipping.")
        summary.recipients_skipped += 1
        return None

    return player, _deliver(send, player, render_recap(player, notifications))


async def send_daily_recap(
    session_factory: Optional[async_sessionmaker] = None,
    now: Optional[datetime] = None,
    send: Sender = send_email,
) -> RecapSummary:
    """
    Run one recap pass over unsent notifications of the last window.

    Only one pass runs at a time in a process; a pass requested while another
    is running returns at once with ``already_running`` set.
    """
    if _recap_lock.locked():
        logger.warning("Daily recap is already running. Skipping this pass.")
        return RecapSummary(already_running=True)

    async with _recap_lock:
        return await _run_recap(session_factory or async_session, now or utcnow(), send)


async def _run_recap(session_factory: async_sessionmaker, now: datetime, send: Sender) -> RecapSummary:
    cutoff = now - timedelta(hours=settings.RECAP_WINDOW_HOURS)
    summary = RecapSummary()

    async with session_factory() as db:
        result = await db.execute(
            select(Notification)
            .where(
                Notification.recap_email_sent == False,  # noqa: E712
                Notification.created_at > cutoff,
            )
            .order_by(Notification.created_at.asc())
        )
        pending = to_records(NotificationRecord, result.scalars().all())
        grouped = group_by_recipient(pending)

        to_mark: List[str] = []
        deliveries = []
        recipients = []

        for user_id, notifications in grouped.items():
            # Picked-up notifications are marked whatever happens to their recipient
            to_mark.extend(n.id for n in notifications)
            try:
                prepared = await _prepare(db, send, user_id, notifications, summary)
            except Exception as e:
                logger.exception(f"Could not prepare recap for {user_id}: {e}")
                summary.emails_failed += 1
                continue
            if prepared is not None:
                player, delivery = prepared
                recipients.append(player)
                deliveries.append(delivery)

        outcomes = await asyncio.gather(*deliveries)
        for player, delivered in zip(recipients, outcomes):
            if delivered:
                logger.info(f"Daily recap email sent to {player.email}")
                summary.emails_sent += 1
            else:
                logger.error(f"Daily recap email to {player.email} was not delivered")
                summary.emails_failed += 1

        if to_mark:
            await db.execute(
                update(Notification)
                .where(Notification.id.in_(to_mark))
                .values(recap_email_sent=True)
            )
        await db.commit()
        summary.notifications_marked = len(to_mark)

    logger.info("Daily recap email process completed.")
    return summary
