# This project was developed with assistance from AI tools.
"""Onboarding job routes: board listing, detail, moves, comments, attachments."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from portal_db import OnboardingJob, get_db
from portal_db.enums import OnboardingStatus, UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..middleware.auth import CurrentUser, require_board_access, require_roles
from ..schemas import Pagination
from ..schemas.auth import UserContext
from ..schemas.job import (
    AttachmentCreate,
    AttachmentItem,
    CommentCreate,
    CommentUpdate,
    DirectoryUserItem,
    JobCreate,
    JobListResponse,
    JobResponse,
    JobSummary,
    JobUpdate,
    MoveRequestCreate,
    MoveRequestDecision,
    MoveRequestItem,
    ResolveCommentResponse,
    RoleDirectoryResponse,
)
from ..services import job as job_service
from ..services import move_request as move_service
from ..services.directory import get_role_directory
from ..services.job import (
    DuplicateClientError,
    ForbiddenActionError,
    MoveApprovalRequiredError,
)
from ..services.move_request import (
    MoveRequestConflictError,
    MoveRequestNotNeededError,
    NoPendingRequestError,
    StaleMoveRequestError,
)

router = APIRouter()

_CREATOR_ROLES = (UserRole.ADMIN, UserRole.CSM, UserRole.TEAM_LEAD)
_APPROVER_ROLES = (UserRole.ADMIN, UserRole.TEAM_LEAD)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Onboarding job not found",
    )


def _forbidden(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


def _build_job_response(job: OnboardingJob, user: UserContext) -> JobResponse:
    """Build JobResponse from ORM object, masking credentials when required."""
    resp = JobResponse.model_validate(job)
    updates = {}

    pending = job_service.pending_request(job)
    if pending is not None:
        updates["pending_move_request"] = MoveRequestItem.model_validate(pending)

    creds = resp.dashboard_credentials
    if creds is not None and creds.password and not user.data_scope.see_credentials:
        updates["dashboard_credentials"] = creds.model_copy(
            update={"password": settings.MASKED_PASSWORD}
        )

    return resp.model_copy(update=updates) if updates else resp


@router.get(
    "/",
    response_model=JobListResponse,
    dependencies=[Depends(require_board_access)],
)
async def list_jobs(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    status_filter: OnboardingStatus | None = Query(default=None, alias="status"),
) -> JobListResponse:
    """List board cards visible to the caller, optionally for one status."""
    jobs = await job_service.list_jobs(session, user, status=status_filter)
    return JobListResponse(
        data=[JobSummary.model_validate(j) for j in jobs],
        pagination=Pagination(
            total=len(jobs),
            offset=0,
            limit=len(jobs),
            has_more=False,
        ),
    )


@router.post(
    "/",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_CREATOR_ROLES))],
)
async def create_job(
    body: JobCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Open a ticket for a new client."""
    try:
        job = await job_service.create_job(
            session,
            user,
            client_email=body.client_email,
            client_name=body.client_name,
            plan_type=body.plan_type,
            client_number=body.client_number,
            csm_email=body.csm_email,
            csm_name=body.csm_name,
            dashboard_manager_name=body.dashboard_manager_name,
            bachelors_start_date=body.bachelors_start_date,
            masters_end_date=body.masters_end_date,
            dashboard_credentials=(
                body.dashboard_credentials.model_dump() if body.dashboard_credentials else None
            ),
        )
    except DuplicateClientError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _build_job_response(job, user)


@router.get(
    "/roles",
    response_model=RoleDirectoryResponse,
    dependencies=[Depends(require_board_access)],
)
async def get_roles(
    session: AsyncSession = Depends(get_db),
) -> RoleDirectoryResponse:
    """Active staff by role, plus the @mention directory."""
    directory = await get_role_directory(session)
    return RoleDirectoryResponse(
        **{
            group: [DirectoryUserItem(email=u.email, name=u.name) for u in users]
            for group, users in directory.items()
        }
    )


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    dependencies=[Depends(require_board_access)],
)
async def get_job(
    job_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Full job detail. Returns 404 for jobs outside the caller's columns."""
    job = await job_service.get_job(session, user, job_id)
    if job is None:
        raise _not_found()
    return _build_job_response(job, user)


@router.patch(
    "/{job_id}",
    response_model=JobResponse,
    dependencies=[Depends(require_board_access)],
)
async def update_job(
    job_id: int,
    body: JobUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Move, reassign, rename or comment on a job.

    Rejected moves surface as problem documents carrying the rejection
    reason and the statuses the caller may use instead.
    """
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    try:
        job = await job_service.patch_job(session, user, job_id, **updates)
    except (MoveApprovalRequiredError, ForbiddenActionError) as e:
        raise _forbidden(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if job is None:
        raise _not_found()
    return _build_job_response(job, user)


# ---------------------------------------------------------------------------
# Move requests
# ---------------------------------------------------------------------------


@router.post(
    "/{job_id}/request-move",
    response_model=MoveRequestItem,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_board_access)],
)
async def request_move(
    job_id: int,
    body: MoveRequestCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> MoveRequestItem:
    """File a move for approval by an admin or team lead."""
    try:
        request = await move_service.request_move(
            session, user, job_id, body.target_status, body.note,
        )
    except MoveRequestConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except MoveRequestNotNeededError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if request is None:
        raise _not_found()
    return MoveRequestItem.model_validate(request)


@router.post(
    "/{job_id}/approve-move",
    response_model=JobResponse,
    dependencies=[Depends(require_roles(*_APPROVER_ROLES))],
)
async def approve_move(
    job_id: int,
    user: CurrentUser,
    body: MoveRequestDecision | None = None,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Approve the job's pending move request and apply the move."""
    try:
        job = await move_service.approve_move(
            session, user, job_id, body.note if body else None,
        )
    except NoPendingRequestError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StaleMoveRequestError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    if job is None:
        raise _not_found()
    return _build_job_response(job, user)


@router.post(
    "/{job_id}/reject-move",
    response_model=JobResponse,
    dependencies=[Depends(require_roles(*_APPROVER_ROLES))],
)
async def reject_move(
    job_id: int,
    user: CurrentUser,
    body: MoveRequestDecision | None = None,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Reject the job's pending move request."""
    try:
        job = await move_service.reject_move(
            session, user, job_id, body.note if body else None,
        )
    except NoPendingRequestError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    if job is None:
        raise _not_found()
    return _build_job_response(job, user)


# ---------------------------------------------------------------------------
# Comments and attachments
# ---------------------------------------------------------------------------


@router.post(
    "/{job_id}/comments",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_board_access)],
)
async def add_comment(
    job_id: int,
    body: CommentCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    try:
        job = await job_service.add_comment(
            session,
            user,
            job_id,
            body.body,
            tagged_emails=body.tagged_emails,
            tagged_names=body.tagged_names,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if job is None:
        raise _not_found()
    return _build_job_response(job, user)


@router.patch(
    "/{job_id}/comments/{comment_id}",
    response_model=JobResponse,
    dependencies=[Depends(require_board_access)],
)
async def edit_comment(
    job_id: int,
    comment_id: int,
    body: CommentUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> JobResponse:
    try:
        job = await job_service.edit_comment(session, user, job_id, comment_id, body.body)
    except ForbiddenActionError as e:
        raise _forbidden(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job or comment not found",
        )
    return _build_job_response(job, user)


@router.post(
    "/{job_id}/comments/{comment_id}/resolve",
    response_model=ResolveCommentResponse,
    dependencies=[Depends(require_board_access)],
)
async def resolve_comment(
    job_id: int,
    comment_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ResolveCommentResponse:
    """Mark a comment resolved for the calling tagged user."""
    try:
        result = await job_service.resolve_comment(session, user, job_id, comment_id)
    except ForbiddenActionError as e:
        raise _forbidden(e) from e

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job or comment not found",
        )
    job, already_resolved = result
    return ResolveCommentResponse(
        job=_build_job_response(job, user),
        already_resolved=already_resolved,
    )


@router.post(
    "/{job_id}/attachments",
    response_model=AttachmentItem,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_board_access)],
)
async def add_attachment(
    job_id: int,
    body: AttachmentCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AttachmentItem:
    """Record an uploaded file against a job."""
    attachment = await job_service.add_attachment(
        session, user, job_id, url=body.url, filename=body.filename, name=body.name,
    )
    if attachment is None:
        raise _not_found()
    return AttachmentItem.model_validate(attachment)
