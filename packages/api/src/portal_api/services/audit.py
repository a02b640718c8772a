# This project was developed with assistance from AI tools.
"""Append-only audit trail for onboarding jobs.

Each event stores the SHA-256 digest of the event before it, so editing or
deleting a row breaks the chain at that point. Writers take a PostgreSQL
transaction-scoped advisory lock so two moves never chain off the same
predecessor.
"""

import hashlib
import json
import logging

from portal_db import AuditEvent
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)

AUDIT_LOCK_KEY = 910_017
GENESIS = "genesis"
SYSTEM_USER = "system"

JOB_CREATED = "job_created"
STATUS_MOVED = "status_moved"
MOVE_REQUESTED = "move_requested"
MOVE_APPROVED = "move_approved"
MOVE_REJECTED = "move_rejected"


def chain_hash(event: AuditEvent) -> str:
    """Digest a successor stores as its ``prev_hash``."""
    fields = [
        str(event.id),
        str(event.timestamp),
        event.event_type or "",
        "" if event.job_id is None else str(event.job_id),
        json.dumps(event.event_data, sort_keys=True, default=str),
    ]
    return hashlib.sha256("|".join(fields).encode()).hexdigest()


async def _chain_tail(session: AsyncSession) -> AuditEvent | None:
    result = await session.execute(select(AuditEvent).order_by(AuditEvent.id.desc()).limit(1))
    return result.scalar_one_or_none()


async def write_audit_event(
    session: AsyncSession,
    *,
    event_type: str,
    user: UserContext | None = None,
    job_id: int | None = None,
    event_data: dict | None = None,
) -> AuditEvent:
    """Append an event in the caller's transaction.

    The lock is held until that transaction ends, so the event lands
    atomically with the change it records. Events without a user are
    attributed to ``system``.
    """
    await session.execute(text(f"SELECT pg_advisory_xact_lock({AUDIT_LOCK_KEY})"))
    tail = await _chain_tail(session)

    event = AuditEvent(
        event_type=event_type,
        user_id=user.email if user else SYSTEM_USER,
        user_role=user.role.value if user else None,
        job_id=job_id,
        event_data=event_data,
        prev_hash=chain_hash(tail) if tail is not None else GENESIS,
    )
    session.add(event)
    await session.flush()
    return event


async def verify_audit_chain(session: AsyncSession) -> dict:
    """Walk the trail in id order and report the first broken link.

    Returns ``{"status": "OK", "events_checked": n}`` or, on a mismatch,
    ``{"status": "TAMPERED", "first_break_id": id, "events_checked": n}``.
    """
    result = await session.execute(select(AuditEvent).order_by(AuditEvent.id.asc()))
    events = list(result.scalars().all())

    expected = GENESIS
    for checked, event in enumerate(events, start=1):
        if event.prev_hash != expected:
            logger.error("Audit chain broken at event %s", event.id)
            return {"status": "TAMPERED", "first_break_id": event.id, "events_checked": checked}
        expected = chain_hash(event)

    return {"status": "OK", "events_checked": len(events)}


async def get_events_by_job(session: AsyncSession, job_id: int) -> list[AuditEvent]:
    """Audit trail for one job, oldest first."""
    stmt = (
        select(AuditEvent)
        .where(AuditEvent.job_id == job_id)
        .order_by(AuditEvent.timestamp.asc(), AuditEvent.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
