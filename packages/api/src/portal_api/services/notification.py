# This project was developed with assistance from AI tools.
"""In-app notifications for tags, new tickets and pipeline events."""

import logging
from collections.abc import Iterable

from portal_db import OnboardingJob, OnboardingNotification
from portal_db.mentions import normalize_emails
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)


def display_name(job: OnboardingJob) -> str:
    """``"<client number> - <client name>"``, or just the name when unnumbered."""
    if job.client_number is not None:
        return f"{job.client_number} - {job.client_name or ''}"
    return job.client_name or ""


def snippet_of(body: str) -> str:
    return (body or "").strip()[: settings.COMMENT_SNIPPET_LENGTH]


async def notify(
    session: AsyncSession,
    recipients: Iterable[str | None],
    job: OnboardingJob,
    snippet: str,
    *,
    author_email: str | None = None,
    author_name: str | None = None,
) -> list[OnboardingNotification]:
    """Queue one unread notification per distinct recipient.

    Rows are added to the session; the caller owns the commit.
    """
    rows = [
        OnboardingNotification(
            user_email=email,
            job_id=job.id,
            job_number=job.job_number,
            client_number=job.client_number,
            client_name=job.client_name or "",
            snippet=snippet,
            author_email=author_email or "system",
            author_name=author_name or "System",
            read=False,
        )
        for email in normalize_emails(recipients)
    ]
    session.add_all(rows)
    if rows:
        logger.info(
            "Queued %d notification(s) for job %s: %s",
            len(rows),
            job.job_number,
            snippet[:40],
        )
    return rows


async def list_notifications(
    session: AsyncSession,
    user: UserContext,
    *,
    limit: int | None = None,
) -> list[OnboardingNotification]:
    """Latest notifications for the caller, newest first."""
    stmt = (
        select(OnboardingNotification)
        .where(OnboardingNotification.user_email == user.email.lower())
        .order_by(OnboardingNotification.created_at.desc(), OnboardingNotification.id.desc())
        .limit(limit or settings.NOTIFICATION_LIMIT)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def mark_read(
    session: AsyncSession,
    user: UserContext,
    notification_id: int,
) -> OnboardingNotification | None:
    """Mark one of the caller's notifications read.

    Returns None for unknown ids and for notifications addressed to someone
    else, so the route answers 404 either way.
    """
    stmt = select(OnboardingNotification).where(
        OnboardingNotification.id == notification_id,
        OnboardingNotification.user_email == user.email.lower(),
    )
    result = await session.execute(stmt)
    notification = result.scalar_one_or_none()
    if notification is None:
        return None
    notification.read = True
    await session.commit()
    return notification


async def mark_job_read(session: AsyncSession, user: UserContext, job_id: int) -> int:
    """Mark every unread notification the caller has for one job as read."""
    stmt = (
        update(OnboardingNotification)
        .where(
            OnboardingNotification.user_email == user.email.lower(),
            OnboardingNotification.job_id == job_id,
            OnboardingNotification.read.is_(False),
        )
        .values(read=True)
    )
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount or 0
