# This project was developed with assistance from AI tools.
"""Shared test factory functions for creating mock objects.

Mock ORM rows carry every attribute the response schemas read, so they can
be passed straight through ``model_validate`` in route tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

from portal_db.enums import MoveRequestState, OnboardingStatus, OnboardingSubRole, UserRole

from portal_api.core.auth import build_data_scope
from portal_api.schemas.auth import UserContext

CREATED = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def make_user(
    role: UserRole = UserRole.ADMIN,
    sub_role: OnboardingSubRole | None = None,
    email: str = "admin@portal.test",
    name: str = "Admin User",
) -> UserContext:
    return UserContext(
        user_id=f"{role.value}-id",
        role=role,
        sub_role=sub_role,
        email=email,
        name=name,
        data_scope=build_data_scope(role, sub_role),
    )


def make_mock_job(
    id=1,
    job_number=5800,
    client_number=5809,
    client_email="client@example.com",
    client_name="Dana Client",
    plan_type="executive",
    status=OnboardingStatus.RESUME_IN_PROGRESS,
    linkedin_phase_started=False,
    dashboard_credentials=None,
    comments=None,
    move_requests=None,
):
    """Create a mock OnboardingJob ORM object.

    Args:
        plan_type: Raw stored plan string, as in the ``plan_type`` column.
        status: Current pipeline status.
        comments: List of mock comments (defaults to empty).
        move_requests: List of mock move requests (defaults to empty).

    Returns:
        MagicMock configured as an OnboardingJob instance.
    """
    job = MagicMock()
    job.id = id
    job.job_number = job_number
    job.client_number = client_number
    job.client_email = client_email
    job.client_name = client_name
    job.plan_type = plan_type
    job.status = status
    job.csm_email = "casey@portal.test"
    job.csm_name = "Casey Csm"
    job.resume_maker_email = "rita@portal.test"
    job.resume_maker_name = "Rita Resume"
    job.linkedin_member_email = None
    job.linkedin_member_name = None
    job.dashboard_manager_name = None
    job.bachelors_start_date = None
    job.masters_end_date = None
    job.dashboard_credentials = dashboard_credentials
    job.linkedin_phase_started = linkedin_phase_started
    job.comments = comments if comments is not None else []
    job.move_history = []
    job.attachments = []
    job.move_requests = move_requests if move_requests is not None else []
    job.pending_move_request = None
    job.created_at = CREATED
    job.updated_at = CREATED
    return job


def make_mock_comment(
    id=11,
    body="Please check @casey",
    author_email="tara@portal.test",
    author_name="Tara Lead",
    tagged_emails=None,
    tagged_names=None,
    resolutions=None,
    job=None,
):
    c = MagicMock()
    c.id = id
    c.job_id = job.id if job is not None else 1
    c.job = job
    c.body = body
    c.author_email = author_email
    c.author_name = author_name
    c.tagged_emails = tagged_emails if tagged_emails is not None else []
    c.tagged_names = tagged_names if tagged_names is not None else []
    c.resolutions = resolutions if resolutions is not None else []
    c.created_at = CREATED
    c.edited_at = None
    return c


def make_mock_request(
    id=21,
    from_status=OnboardingStatus.COVER_LETTER_IN_PROGRESS,
    to_status=OnboardingStatus.COVER_LETTER_DONE,
    requested_by_email="lena@portal.test",
    state=MoveRequestState.PENDING,
):
    r = MagicMock()
    r.id = id
    r.from_status = from_status
    r.to_status = to_status
    r.requested_by_email = requested_by_email
    r.requested_by_name = "Lena Linkedin"
    r.state = state
    r.note = None
    r.resolved_by = None
    r.resolved_at = None
    r.created_at = CREATED
    return r


def make_mock_notification(id=31, user_email="casey@portal.test", read=False, job_id=1):
    n = MagicMock()
    n.id = id
    n.user_email = user_email
    n.job_id = job_id
    n.job_number = 5800
    n.client_number = 5809
    n.client_name = "Dana Client"
    n.snippet = "Please check @casey"
    n.author_email = "tara@portal.test"
    n.author_name = "Tara Lead"
    n.read = read
    n.created_at = CREATED
    return n


def make_portal_user(
    id=1,
    email="rita@portal.test",
    name="Rita Resume",
    role=UserRole.ONBOARDING_TEAM,
    sub_role=OnboardingSubRole.RESUME_MAKER,
    is_active=True,
):
    u = MagicMock()
    u.id = id
    u.email = email
    u.name = name
    u.role = role
    u.sub_role = sub_role
    u.is_active = is_active
    u.last_resume_assigned_at = None
    u.last_linkedin_assigned_at = None
    return u


def make_result(*, single=None, items=None, rowcount=0):
    """A mock ``Result`` supporting the access patterns the services use."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = single
    result.unique.return_value.scalar_one_or_none.return_value = single
    result.scalars.return_value.all.return_value = items or []
    result.unique.return_value.scalars.return_value.all.return_value = items or []
    result.scalar_one.return_value = len(items or [])
    result.rowcount = rowcount
    return result


def make_session(*results):
    """AsyncMock session whose ``execute`` returns ``results`` in order.

    ``add``/``add_all`` are synchronous in SQLAlchemy, so they are MagicMocks.
    """
    session = AsyncMock()
    if results:
        session.execute = AsyncMock(side_effect=list(results))
    else:
        session.execute = AsyncMock(return_value=make_result())
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session
