"""
Mention fan-out — write triggers for ideas and comments.

Each trigger receives the entity as it was before and after a write and
creates one notification per newly tagged player. Deletions are ignored.
Triggers always return None; failures are logged, never raised.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Dict, Generic, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from sqlalchemy.ext.asyncio import async_sessionmaker

from ideation.database import async_session
from ideation.models.idea import Idea
from ideation.models.notification import Notification, NotificationType
from ideation.models.player import Player
from ideation.schemas.records import CommentRecord, IdeaRecord

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"
UNKNOWN_IDEA = "an idea"
SNIPPET_LENGTH = 80

S = TypeVar("S")


@dataclass(frozen=True)
class WriteEvent(Generic[S]):
    """Before/after snapshots of one written entity; ``after`` is None on delete."""
    entity_id: str
    before: Optional[S] = None
    after: Optional[S] = None


def newly_tagged(before: Sequence[str], after: Sequence[str]) -> List[str]:
    """Ids in ``after`` but not in ``before``, in ``after`` order, each once."""
    seen = set(before)
    added = []
    for user_id in after:
        if user_id not in seen:
            seen.add(user_id)
            added.append(user_id)
    return added


def _snippet(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= SNIPPET_LENGTH:
        return text
    return text[: SNIPPET_LENGTH - 1].rstrip() + "…"


def mention_message(notification_type: NotificationType, sender_name: str, title: str) -> str:
    if notification_type == NotificationType.idea_mention:
        return f'{sender_name} mentioned you in an idea: "{title}"'
    return f'{sender_name} mentioned you in a comment on: "{title}"'


async def resolve_display_name(session_factory: async_sessionmaker, user_id: str) -> str:
    try:
        async with session_factory() as db:
            player = await db.get(Player, user_id)
    except Exception as e:
        logger.error(f"Error fetching display name for {user_id}: {e}")
        return UNKNOWN_USER
    if player is None or not player.display_name:
        return UNKNOWN_USER
    return player.display_name


async def resolve_idea_title(session_factory: async_sessionmaker, idea_id: str) -> str:
    try:
        async with session_factory() as db:
            idea = await db.get(Idea, idea_id)
    except Exception as e:
        logger.error(f"Error fetching idea {idea_id}: {e}")
        return UNKNOWN_IDEA
    if idea is None or not idea.short_description:
        return UNKNOWN_IDEA
    return idea.short_description


async def _insert_notification(session_factory: async_sessionmaker, notification: Notification) -> None:
    async with session_factory() as db:
        db.add(notification)
        await db.commit()


async def create_mention_notifications(
    session_factory: async_sessionmaker,
    recipient_ids: Sequence[str],
    sender_id: str,
    notification_type: NotificationType,
    entity_id: str,
    idea_id: str,
    entity_title: str,
) -> int:
    """Insert one notification per recipient concurrently; returns how many succeeded."""
    recipients = [uid for uid in recipient_ids if uid != sender_id]
    if not recipients:
        return 0

    sender_name = await resolve_display_name(session_factory, sender_id)
    message = mention_message(notification_type, sender_name, _snippet(entity_title))

    results = await asyncio.gather(
        *(
            _insert_notification(
                session_factory,
                Notification(
                    recipient_user_id=uid,
                    sender_user_id=sender_id,
                    type=notification_type,
                    entity_id=entity_id,
                    idea_id=idea_id,
                    message=message,
                    read=False,
                    recap_email_sent=False,
                ),
            )
            for uid in recipients
        ),
        return_exceptions=True,
    )

    created = 0
    for uid, result in zip(recipients, results):
        if isinstance(result, Exception):
            logger.error(f"Failed to notify {uid} about {notification_type.value} {entity_id}: {result}")
        else:
            created += 1
    logger.info(f"Created {created} notifications of type {notification_type.value}.")
    return created


async def on_idea_write(
    event: WriteEvent[IdeaRecord],
    session_factory: Optional[async_sessionmaker] = None,
) -> None:
    """Notify players newly tagged on an idea."""
    if event.after is None:
        return None
    session_factory = session_factory or async_session

    before = event.before.tagged_users if event.before else []
    added = newly_tagged(before, event.after.tagged_users)
    if not added:
        return None

    logger.info(f"Idea {event.entity_id}: new users tagged: {', '.join(added)}")
    await create_mention_notifications(
        session_factory,
        added,
        event.after.user_id,
        NotificationType.idea_mention,
        entity_id=event.entity_id,
        idea_id=event.entity_id,
        entity_title=event.after.short_description,
    )
    return None


async def on_comment_write(
    event: WriteEvent[CommentRecord],
    session_factory: Optional[async_sessionmaker] = None,
) -> None:
    """Notify players newly tagged on a comment, titled by the parent idea."""
    if event.after is None:
        return None
    session_factory = session_factory or async_session

    before = event.before.tagged_users if event.before else []
    added = newly_tagged(before, event.after.tagged_users)
    if not added:
        return None

    logger.info(f"Comment {event.entity_id}: new users tagged: {', '.join(added)}")
    idea_title = await resolve_idea_title(session_factory, event.after.idea_id)
    await create_mention_notifications(
        session_factory,
        added,
        event.after.user_id,
        NotificationType.comment_mention,
        entity_id=event.entity_id,
        idea_id=event.after.idea_id,
        entity_title=idea_title,
    )
    return None


def extract_mentions(text: str, names_to_ids: Dict[str, str]) -> List[str]:
    """
    Player ids mentioned as ``@First Last`` in ``text``, in order of
    appearance. ``names_to_ids`` maps lower-cased full names to user ids.
    """
    found = []
    lowered = text.lower()
    for name, user_id in names_to_ids.items():
        match = re.search(r"@" + re.escape(name) + r"(?![a-z])", lowered)
        if match:
            found.append((match.start(), user_id))
    ordered = [user_id for _, user_id in sorted(found)]
    return newly_tagged([], ordered)


def build_mention_directory(entries: Iterable[Tuple[Optional[str], Optional[str]]]) -> Dict[str, str]:
    """
    Map lower-cased names to user ids from ``(name, user_id)`` pairs.
    A name shared by several players is left out so it cannot notify the wrong one.
    """
    owners: Dict[str, Set[str]] = {}
    for name, user_id in entries:
        if name and user_id:
            owners.setdefault(name.strip().lower(), set()).add(user_id)

    directory = {}
    for name, user_ids in owners.items():
        if len(user_ids) > 1:
            logger.warning(f"Name {name!r} is shared by {len(user_ids)} players; it cannot be @mentioned.")
            continue
        directory[name] = next(iter(user_ids))
    return directory
