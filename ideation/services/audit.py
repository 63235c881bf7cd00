"""Best-effort audit trail for the registration and sign-in flows."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ideation.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


async def record_audit(
    session_factory: async_sessionmaker,
    event: str,
    email: Optional[str] = None,
    detail: Optional[str] = None,
) -> None:
    """
    Append an audit entry in its own transaction so it survives the
    rollback of the failing request. Errors are logged and swallowed.
    """
    try:
        async with session_factory() as db:
            db.add(AuditLog(event=event, email=email, detail=detail))
            await db.commit()
    except Exception as e:
        logger.error(f"Could not write audit log {event} for {email}: {e}")
