# This project was developed with assistance from AI tools.
"""Client-side records parsed from backend responses."""

from datetime import datetime

from portal_db.enums import MoveRequestState, OnboardingStatus, OnboardingSubRole, PlanType, UserRole
from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class JobCard(_Record):
    """One card on the board."""

    id: int
    job_number: int
    client_number: int | None = None
    client_email: str
    client_name: str
    plan_type: str | None = None
    status: OnboardingStatus
    csm_email: str | None = None
    csm_name: str | None = None
    resume_maker_email: str | None = None
    resume_maker_name: str | None = None
    linkedin_member_email: str | None = None
    linkedin_member_name: str | None = None
    dashboard_manager_name: str | None = None
    linkedin_phase_started: bool = False
    created_at: datetime
    updated_at: datetime

    @property
    def plan(self) -> PlanType:
        return PlanType.normalize(self.plan_type)

    @property
    def display_name(self) -> str:
        if self.client_number is not None:
            return f"{self.client_number} - {self.client_name}"
        return self.client_name


class Resolution(_Record):
    email: str
    resolved_at: datetime


class Comment(_Record):
    id: int
    body: str
    author_email: str
    author_name: str | None = None
    tagged_emails: tuple[str, ...] = ()
    tagged_names: tuple[str, ...] = ()
    resolutions: tuple[Resolution, ...] = ()
    created_at: datetime
    edited_at: datetime | None = None

    def is_resolved_by(self, email: str) -> bool:
        email = email.lower()
        return any(r.email.lower() == email for r in self.resolutions)


class MoveHistoryItem(_Record):
    from_status: str
    to_status: str
    moved_by: str
    moved_at: datetime


class Attachment(_Record):
    id: int
    url: str
    filename: str
    name: str | None = None
    uploaded_by: str
    uploaded_at: datetime


class MoveRequest(_Record):
    id: int
    from_status: OnboardingStatus
    to_status: OnboardingStatus
    requested_by_email: str
    requested_by_name: str | None = None
    state: MoveRequestState
    note: str | None = None
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime


class DashboardCredentials(_Record):
    username: str = ""
    password: str = ""
    login_url: str = ""


class JobDetail(JobCard):
    """An opened card with its collections loaded."""

    bachelors_start_date: str | None = None
    masters_end_date: str | None = None
    dashboard_credentials: DashboardCredentials | None = None
    comments: tuple[Comment, ...] = ()
    move_history: tuple[MoveHistoryItem, ...] = ()
    attachments: tuple[Attachment, ...] = ()
    pending_move_request: MoveRequest | None = None


class DirectoryUser(_Record):
    email: str
    name: str


class RoleDirectory(_Record):
    csms: tuple[DirectoryUser, ...] = ()
    resume_makers: tuple[DirectoryUser, ...] = ()
    linkedin_members: tuple[DirectoryUser, ...] = ()
    team_leads: tuple[DirectoryUser, ...] = ()
    admins: tuple[DirectoryUser, ...] = ()
    mentionable_users: tuple[DirectoryUser, ...] = ()


class BoardUser(_Record):
    """The signed-in user, as persisted in the session file."""

    email: str
    name: str = ""
    role: UserRole
    sub_role: OnboardingSubRole | None = None


class Notification(_Record):
    id: int
    job_id: int | None = None
    job_number: int | None = None
    client_number: int | None = None
    client_name: str | None = None
    snippet: str
    author_email: str | None = None
    author_name: str | None = None
    read: bool = False
    created_at: datetime


class Issue(_Record):
    job_id: int
    job_number: int
    client_number: int | None = None
    client_name: str
    comment_id: int
    body: str
    author_email: str
    author_name: str | None = None
    created_at: datetime


class NotificationFeed(_Record):
    data: tuple[Notification, ...] = Field(default_factory=tuple)
    unread_count: int = 0
