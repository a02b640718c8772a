# This project was developed with assistance from AI tools.
"""Move-request workflow.

Users who cannot move a job directly file a request; admins and team leads
approve (which applies the move) or reject (which leaves the job alone).
A job has at most one pending request at a time.
"""

import logging
from datetime import UTC, datetime

from portal_db import MoveRequest, OnboardingJob
from portal_db.enums import MoveRequestState, OnboardingStatus, UserRole
from portal_db.pipeline import MoveOutcome, evaluate_move, status_label
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .audit import MOVE_APPROVED, MOVE_REJECTED, MOVE_REQUESTED, write_audit_event
from .directory import active_emails
from .job import (
    MoveRejectedError,
    apply_move,
    decide_move,
    get_job,
    load_job,
    pending_request,
)
from .notification import display_name, notify

logger = logging.getLogger(__name__)


class MoveRequestConflictError(Exception):
    """Raised when a job already has a pending move request."""


class MoveRequestNotNeededError(ValueError):
    """Raised when the caller could apply the move (or it is a no-op)."""


class NoPendingRequestError(LookupError):
    """Raised when approving or rejecting a job with no pending request."""


class StaleMoveRequestError(Exception):
    """Raised when the job left the request's ``from_status`` before approval."""


async def request_move(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    target: OnboardingStatus,
    note: str | None = None,
) -> MoveRequest | None:
    """File a move request for ``job_id``.

    Raises:
        MoveRejectedError: the target breaks a plan or permission rule.
        MoveRequestNotNeededError: the caller can move the job directly.
        MoveRequestConflictError: another request is already pending.
    """
    job = await get_job(session, user, job_id)
    if job is None:
        return None

    decision = decide_move(job, user, target)
    if decision.outcome == MoveOutcome.REJECT:
        raise MoveRejectedError(decision)
    if decision.outcome == MoveOutcome.NOOP:
        raise MoveRequestNotNeededError("Job is already in that status")
    if decision.outcome == MoveOutcome.APPLY:
        raise MoveRequestNotNeededError("You can move this job directly")

    if pending_request(job) is not None:
        raise MoveRequestConflictError("A move request is already pending for this job")

    request = MoveRequest(
        from_status=job.status,
        to_status=target,
        requested_by_email=user.email,
        requested_by_name=user.name,
        state=MoveRequestState.PENDING,
        note=(note or "").strip() or None,
        created_at=datetime.now(UTC),
    )
    job.move_requests.append(request)

    approvers = await active_emails(session, UserRole.TEAM_LEAD)
    approvers += await active_emails(session, UserRole.ADMIN)
    await notify(
        session,
        approvers,
        job,
        f"Move requested: {display_name(job)} to {status_label(target)}",
        author_email=user.email,
        author_name=user.name,
    )
    await write_audit_event(
        session,
        event_type=MOVE_REQUESTED,
        user=user,
        job_id=job.id,
        event_data={"from": job.status.value, "to": target.value},
    )
    await session.commit()
    logger.info("Move request filed for job %s -> %s by %s", job.job_number, target.value, user.email)
    return request


async def _resolve(
    session: AsyncSession,
    user: UserContext,
    job: OnboardingJob,
    state: MoveRequestState,
    note: str | None,
) -> MoveRequest:
    request = pending_request(job)
    if request is None:
        raise NoPendingRequestError("No pending move request for this job")
    request.state = state
    request.resolved_by = user.email
    request.resolved_at = datetime.now(UTC)
    if note:
        request.note = note.strip()
    return request


async def approve_move(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    note: str | None = None,
) -> OnboardingJob | None:
    """Approve the pending request and apply its move.

    The plan is re-checked against the job as it is now; a request whose
    target the plan no longer allows is rejected with MoveRejectedError, and
    one filed from a status the job has since left raises
    StaleMoveRequestError.
    """
    job = await get_job(session, user, job_id)
    if job is None:
        return None

    request = pending_request(job)
    if request is None:
        raise NoPendingRequestError("No pending move request for this job")
    if OnboardingStatus(request.from_status) != job.status:
        raise StaleMoveRequestError(
            f"Job is in {status_label(job.status)}, but the request was filed from "
            f"{status_label(request.from_status)}. Reject it and file a new one."
        )

    target = OnboardingStatus(request.to_status)
    decision = evaluate_move(
        current=job.status,
        target=target,
        plan=job.plan_type,
        role=user.role,
        sub_role=user.sub_role,
        linkedin_phase_started=bool(job.linkedin_phase_started),
    )
    if decision.outcome == MoveOutcome.REJECT:
        raise MoveRejectedError(decision)

    await _resolve(session, user, job, MoveRequestState.APPROVED, note)
    if decision.outcome == MoveOutcome.APPLY:
        await apply_move(session, job, target, user)

    await notify(
        session,
        [request.requested_by_email],
        job,
        f"Move approved: {display_name(job)} is now {status_label(target)}",
        author_email=user.email,
        author_name=user.name,
    )
    await write_audit_event(
        session,
        event_type=MOVE_APPROVED,
        user=user,
        job_id=job.id,
        event_data={"request_id": request.id, "to": target.value},
    )
    await session.commit()
    return await load_job(session, job_id)


async def reject_move(
    session: AsyncSession,
    user: UserContext,
    job_id: int,
    note: str | None = None,
) -> OnboardingJob | None:
    """Reject the pending request; the job's status is unchanged."""
    job = await get_job(session, user, job_id)
    if job is None:
        return None

    request = await _resolve(session, user, job, MoveRequestState.REJECTED, note)
    await notify(
        session,
        [request.requested_by_email],
        job,
        f"Move rejected: {display_name(job)} stays in {status_label(job.status)}",
        author_email=user.email,
        author_name=user.name,
    )
    await write_audit_event(
        session,
        event_type=MOVE_REJECTED,
        user=user,
        job_id=job.id,
        event_data={"request_id": request.id, "to": OnboardingStatus(request.to_status).value},
    )
    await session.commit()
    return await load_job(session, job_id)
