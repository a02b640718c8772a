# This project was developed with assistance from AI tools.
"""Unresolved tagged comments ("issues") for the caller."""

from portal_db import JobComment
from sqlalchemy import cast, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext


def is_unresolved_for(comment: JobComment, email: str) -> bool:
    """True when ``email`` is tagged on the comment and has not resolved it."""
    email = email.lower()
    tagged = {(e or "").lower() for e in comment.tagged_emails or []}
    resolved = {(r.get("email") or "").lower() for r in comment.resolutions or []}
    return email in tagged and email not in resolved


async def list_unresolved_issues(session: AsyncSession, user: UserContext) -> list[JobComment]:
    """Comments tagging the caller that they have not resolved, newest first."""
    email = user.email.lower()
    stmt = (
        select(JobComment)
        .options(selectinload(JobComment.job))
        .where(cast(JobComment.tagged_emails, JSONB).contains([email]))
        .order_by(JobComment.created_at.desc())
    )
    result = await session.execute(stmt)
    return [c for c in result.scalars().all() if is_unresolved_for(c, email)]
