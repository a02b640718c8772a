# This project was developed with assistance from AI tools.
"""Onboarding job service: tickets, status moves, comments and attachments.

Status moves are decided by ``portal_db.pipeline.evaluate_move`` so the
server enforces exactly the rules the board applies before sending a move.
"""

import logging
from datetime import UTC, datetime

from portal_db import JobAttachment, JobComment, MoveHistoryEntry, OnboardingJob
from portal_db.enums import MoveRequestState, OnboardingStatus, OnboardingSubRole, UserRole
from portal_db.mentions import normalize_emails, resolve_mentions
from portal_db.pipeline import (
    LINKEDIN_STATUSES,
    MoveDecision,
    MoveOutcome,
    allowed_statuses_for_plan,
    evaluate_move,
    status_label,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from .audit import JOB_CREATED, STATUS_MOVED, write_audit_event
from .counter import next_client_number, next_job_number
from .directory import active_emails, get_mentionable_users, next_linkedin_member, next_resume_maker
from .notification import display_name, notify, snippet_of
from .scope import apply_board_scope

logger = logging.getLogger(__name__)

CREATED_MARKER = "created"
SYSTEM_ACTOR = "system"

_ADMIN_ONLY_FIELDS = {
    "resume_maker_email",
    "resume_maker_name",
    "linkedin_member_email",
    "linkedin_member_name",
    "client_name",
}


class DuplicateClientError(ValueError):
    """Raised when a job already exists for the client email."""


class MoveRejectedError(Exception):
    """Raised when the pipeline rules reject a status move."""

    def __init__(self, decision: MoveDecision):
        super().__init__(decision.message)
        self.decision = decision


class MoveApprovalRequiredError(Exception):
    """Raised when the caller may only request, not apply, a status move."""


class ForbiddenActionError(PermissionError):
    """Raised when the caller lacks permission for a field or comment action."""


def _now() -> datetime:
    return datetime.now(UTC)


def _job_query():
    return select(OnboardingJob).options(
        selectinload(OnboardingJob.comments),
        selectinload(OnboardingJob.move_history),
        selectinload(OnboardingJob.attachments),
        selectinload(OnboardingJob.move_requests),
    )


def pending_request(job: OnboardingJob):
    """The job's pending move request, if any."""
    for req in job.move_requests or []:
        if req.state == MoveRequestState.PENDING:
            return req
    return None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_jobs(
    session: AsyncSession,
    user: UserContext,
    *,
    status: OnboardingStatus | None = None,
) -> list[OnboardingJob]:
    """Board cards visible to the caller, ordered by job number.

    Heavy collections (comments, history, attachments) are not loaded; the
    board fetches them when a card is opened.
    """
    stmt = select(OnboardingJob).order_by(OnboardingJob.job_number.asc())
    stmt = apply_board_scope(stmt, user.data_scope)
    if status is not None:
        stmt = stmt.where(OnboardingJob.status == status)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_job(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
) -> OnboardingJob | None:
    """Return a single job with its collections if visible to the caller.

    Returns None (which the route maps to 404) for out-of-scope jobs.
    """
    stmt = apply_board_scope(_job_query().where(OnboardingJob.id == job_id), user.data_scope)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def load_job(session: AsyncSession, job_id: int) -> OnboardingJob | None:
    """Reload a job after a write, refreshing identity-mapped collections."""
    stmt = (
        _job_query()
        .where(OnboardingJob.id == job_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def create_job(
    session: AsyncSession,
    user: UserContext,
    *,
    client_email: str,
    client_name: str,
    plan_type: str,
    client_number: int | None = None,
    csm_email: str | None = None,
    csm_name: str | None = None,
    dashboard_manager_name: str | None = None,
    bachelors_start_date: str | None = None,
    masters_end_date: str | None = None,
    dashboard_credentials: dict | None = None,
) -> OnboardingJob:
    """Open a ticket for a new client.

    Allocates the job and client numbers, assigns the next resume maker in
    rotation, records the initial history entry and notifies every active CSM.

    Raises:
        DuplicateClientError: a job already exists for ``client_email``.
    """
    email = client_email.strip().lower()
    existing = await session.execute(
        select(OnboardingJob.id).where(OnboardingJob.client_email == email)
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateClientError("Onboarding job already exists for this client")

    job_number = await next_job_number(session)
    if client_number is None:
        client_number = await next_client_number(session)
    maker = await next_resume_maker(session)

    now = _now()
    job = OnboardingJob(
        job_number=job_number,
        client_number=client_number,
        client_email=email,
        client_name=client_name.strip(),
        plan_type=plan_type,
        status=OnboardingStatus.RESUME_IN_PROGRESS,
        csm_email=(csm_email or "").strip().lower() or None,
        csm_name=csm_name or None,
        resume_maker_email=maker.email.lower() if maker else None,
        resume_maker_name=(maker.name or maker.email) if maker else None,
        dashboard_manager_name=dashboard_manager_name or None,
        bachelors_start_date=bachelors_start_date or None,
        masters_end_date=masters_end_date or None,
        dashboard_credentials=dashboard_credentials,
        linkedin_phase_started=False,
        created_at=now,
        updated_at=now,
    )
    job.move_history = [
        MoveHistoryEntry(
            from_status=CREATED_MARKER,
            to_status=OnboardingStatus.RESUME_IN_PROGRESS.value,
            moved_by=SYSTEM_ACTOR,
            moved_at=now,
        )
    ]
    session.add(job)
    await session.flush()

    csms = await active_emails(session, UserRole.CSM)
    await notify(
        session,
        csms,
        job,
        f"New client ticket created: {display_name(job)}",
        author_email=user.email,
        author_name=user.name,
    )
    await write_audit_event(
        session,
        event_type=JOB_CREATED,
        user=user,
        job_id=job.id,
        event_data={
            "job_number": job_number,
            "client_number": client_number,
            "plan_type": plan_type,
            "resume_maker": job.resume_maker_email,
        },
    )
    job_id = job.id  # capture before commit
    await session.commit()
    logger.info("Created onboarding job %s for client %s", job_number, client_number)
    return await load_job(session, job_id)


# ---------------------------------------------------------------------------
# Status moves
# ---------------------------------------------------------------------------


def decide_move(job: OnboardingJob, user: UserContext, target: OnboardingStatus) -> MoveDecision:
    return evaluate_move(
        current=job.status,
        target=target,
        plan=job.plan_type,
        role=user.role,
        sub_role=user.sub_role,
        linkedin_phase_started=bool(job.linkedin_phase_started),
    )


def _enters_linkedin_phase(job: OnboardingJob, target: OnboardingStatus) -> bool:
    if target in LINKEDIN_STATUSES:
        return True
    return (
        target == OnboardingStatus.RESUME_APPROVED
        and OnboardingStatus.LINKEDIN_IN_PROGRESS in allowed_statuses_for_plan(job.plan_type)
    )


async def _start_linkedin_phase(
    session: AsyncSession,
    job: OnboardingJob,
    user: UserContext,
) -> None:
    """Flag the LinkedIn phase, assign a LinkedIn member and tell the team."""
    job.linkedin_phase_started = True
    if not job.linkedin_member_email:
        member = await next_linkedin_member(session)
        if member is not None:
            job.linkedin_member_email = member.email.lower()
            job.linkedin_member_name = member.name or member.email

    team = await active_emails(
        session,
        UserRole.ONBOARDING_TEAM,
        OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION,
    )
    await notify(
        session,
        team,
        job,
        f"LinkedIn phase started: {display_name(job)}",
        author_email=user.email,
        author_name=user.name,
    )


async def apply_move(
    session: AsyncSession,
    job: OnboardingJob,
    target: OnboardingStatus,
    user: UserContext,
) -> None:
    """Persist an already-authorised status move (caller commits).

    A request still pending at this point was filed against the old status,
    so it is closed as superseded and its requester told.
    """
    from_status = job.status
    now = _now()
    stale = pending_request(job)
    if stale is not None:
        stale.state = MoveRequestState.SUPERSEDED
        stale.resolved_by = user.email
        stale.resolved_at = now
        await notify(
            session,
            [stale.requested_by_email],
            job,
            f"Move request superseded: {display_name(job)} was moved to {status_label(target)}",
            author_email=user.email,
            author_name=user.name,
        )
        logger.info(
            "Move request %s on job %s superseded by a direct move", stale.id, job.job_number
        )
    job.status = target
    job.updated_at = now
    job.move_history.append(
        MoveHistoryEntry(
            from_status=from_status.value,
            to_status=target.value,
            moved_by=user.email or "unknown",
            moved_at=now,
        )
    )

    if not job.linkedin_phase_started and _enters_linkedin_phase(job, target):
        await _start_linkedin_phase(session, job, user)

    await write_audit_event(
        session,
        event_type=STATUS_MOVED,
        user=user,
        job_id=job.id,
        event_data={"from": from_status.value, "to": target.value},
    )
    logger.info(
        "Job %s moved %s -> %s by %s",
        job.job_number,
        from_status.value,
        target.value,
        user.email,
    )


async def patch_job(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    **updates,
) -> OnboardingJob | None:
    """Apply a partial update: status move, reassignments, rename, comment.

    Raises:
        MoveRejectedError: the move breaks a plan or permission rule.
        MoveApprovalRequiredError: the caller must file a move request.
        ForbiddenActionError: a non-admin touched an admin-only field.
    """
    job = await get_job(session, user, job_id)
    if job is None:
        return None

    restricted = sorted(_ADMIN_ONLY_FIELDS & updates.keys())
    if restricted and user.role != UserRole.ADMIN:
        logger.warning(
            "Non-admin %s attempted to change %s on job %s", user.email, restricted, job_id,
        )
        raise ForbiddenActionError(f"Only admins can change: {', '.join(restricted)}")

    target = updates.get("status")
    if target is not None:
        decision = decide_move(job, user, target)
        if decision.outcome == MoveOutcome.REJECT:
            raise MoveRejectedError(decision)
        if decision.outcome == MoveOutcome.REQUEST:
            raise MoveApprovalRequiredError(
                f'Moving to "{status_label(target)}" needs approval. Submit a move request instead.'
            )
        if decision.outcome == MoveOutcome.APPLY:
            await apply_move(session, job, target, user)

    if "csm_email" in updates:
        job.csm_email = (updates["csm_email"] or "").strip().lower() or None
        job.csm_name = updates.get("csm_name") or None
    if "resume_maker_email" in updates:
        job.resume_maker_email = (updates["resume_maker_email"] or "").strip().lower() or None
        job.resume_maker_name = updates.get("resume_maker_name") or None
    if "linkedin_member_email" in updates:
        job.linkedin_member_email = (updates["linkedin_member_email"] or "").strip().lower() or None
        job.linkedin_member_name = updates.get("linkedin_member_name") or None
    if "client_name" in updates:
        job.client_name = (updates["client_name"] or "").strip() or job.client_name

    comment = updates.get("comment")
    if comment:
        await append_comment(
            session,
            user,
            job,
            comment["body"],
            tagged_emails=comment.get("tagged_emails"),
            tagged_names=comment.get("tagged_names"),
        )

    job.updated_at = _now()
    await session.commit()
    return await load_job(session, job_id)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


def _find_comment(job: OnboardingJob, comment_id: int) -> JobComment | None:
    for comment in job.comments or []:
        if comment.id == comment_id:
            return comment
    return None


async def _resolve_tags(
    session: AsyncSession,
    body: str,
    tagged_emails: list[str] | None,
    tagged_names: list[str] | None,
) -> tuple[list[str], list[str]]:
    """Explicit tags win; otherwise ``@handles`` are resolved against the directory."""
    if tagged_emails is not None:
        emails = normalize_emails(tagged_emails)
        names = list(tagged_names or [])
        names += emails[len(names):]
        return emails, names[: len(emails)]

    directory = await get_mentionable_users(session)
    mentions = resolve_mentions(body, directory)
    return [m.email for m in mentions], [m.name for m in mentions]


async def append_comment(
    session: AsyncSession,
    user: UserContext,
    job: OnboardingJob,
    body: str,
    *,
    tagged_emails: list[str] | None = None,
    tagged_names: list[str] | None = None,
) -> JobComment:
    """Add a comment to a loaded job and notify tagged users (caller commits)."""
    body = (body or "").strip()
    if not body:
        raise ValueError("Comment body is required")

    emails, names = await _resolve_tags(session, body, tagged_emails, tagged_names)
    now = _now()
    comment = JobComment(
        body=body,
        author_email=user.email,
        author_name=user.name or user.email,
        tagged_emails=emails,
        tagged_names=names,
        resolutions=[],
        created_at=now,
    )
    job.comments.append(comment)
    job.updated_at = now

    if emails:
        await notify(
            session,
            emails,
            job,
            snippet_of(body),
            author_email=user.email,
            author_name=user.name,
        )
    return comment


async def add_comment(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    body: str,
    *,
    tagged_emails: list[str] | None = None,
    tagged_names: list[str] | None = None,
) -> OnboardingJob | None:
    job = await get_job(session, user, job_id)
    if job is None:
        return None
    await append_comment(
        session, user, job, body, tagged_emails=tagged_emails, tagged_names=tagged_names,
    )
    await session.commit()
    return await load_job(session, job_id)


async def edit_comment(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    comment_id: int,
    body: str,
) -> OnboardingJob | None:
    """Replace a comment's body. Authors may edit their own; admins any."""
    job = await get_job(session, user, job_id)
    if job is None:
        return None
    comment = _find_comment(job, comment_id)
    if comment is None:
        return None

    if comment.author_email.lower() != user.email.lower() and user.role != UserRole.ADMIN:
        raise ForbiddenActionError("Only the author can edit this comment")

    body = (body or "").strip()
    if not body:
        raise ValueError("Comment body is required")

    now = _now()
    comment.body = body
    comment.edited_at = now
    job.updated_at = now
    await session.commit()
    return await load_job(session, job_id)


async def resolve_comment(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    comment_id: int,
) -> tuple[OnboardingJob, bool] | None:
    """Record that a tagged user resolved a comment.

    Returns ``(job, already_resolved)``; resolving twice is a no-op.
    """
    job = await get_job(session, user, job_id)
    if job is None:
        return None
    comment = _find_comment(job, comment_id)
    if comment is None:
        return None

    email = user.email.lower()
    if email not in normalize_emails(comment.tagged_emails or []):
        raise ForbiddenActionError("Only tagged users can mark this as resolved")

    resolutions = list(comment.resolutions or [])
    if any((r.get("email") or "").lower() == email for r in resolutions):
        return job, True

    now = _now()
    resolutions.append({"email": email, "resolved_at": now.isoformat()})
    # Reassign so the JSON column is flagged dirty.
    comment.resolutions = resolutions
    job.updated_at = now
    await session.commit()
    return await load_job(session, job_id), False


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


async def add_attachment(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    *,
    url: str,
    filename: str,
    name: str | None = None,
) -> JobAttachment | None:
    """Record attachment metadata for a file already uploaded elsewhere."""
    job = await get_job(session, user, job_id)
    if job is None:
        return None

    now = _now()
    attachment = JobAttachment(
        url=url,
        filename=filename,
        name=(name or "").strip() or filename,
        uploaded_by=user.email,
        uploaded_at=now,
    )
    job.attachments.append(attachment)
    job.updated_at = now
    await session.commit()
    return attachment
