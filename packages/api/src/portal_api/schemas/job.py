# This project was developed with assistance from AI tools.
"""Onboarding job request/response schemas."""

from datetime import datetime

from portal_db.enums import MoveRequestState, OnboardingStatus, PlanType
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from . import Pagination


class DashboardCredentials(BaseModel):
    username: str = ""
    password: str = ""
    login_url: str = ""


class JobCreate(BaseModel):
    """Open a ticket for a new client."""

    client_email: str = Field(min_length=3)
    client_name: str = Field(min_length=1)
    plan_type: str = "professional"
    client_number: int | None = Field(default=None, ge=1)
    csm_email: str | None = None
    csm_name: str | None = None
    dashboard_manager_name: str | None = None
    bachelors_start_date: str | None = None
    masters_end_date: str | None = None
    dashboard_credentials: DashboardCredentials | None = None

    @field_validator("plan_type")
    @classmethod
    def _known_plan(cls, value: str) -> str:
        PlanType.parse(value)
        return value.strip()

    @field_validator("client_email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("client_email must be an email address")
        return value


class CommentCreate(BaseModel):
    """New comment. Without explicit tags, @handles in the body are resolved."""

    body: str = Field(min_length=1)
    tagged_emails: list[str] | None = None
    tagged_names: list[str] | None = None


class CommentUpdate(BaseModel):
    body: str = Field(min_length=1)


class JobUpdate(BaseModel):
    """Partial update to an existing job."""

    status: OnboardingStatus | None = None
    csm_email: str | None = None
    csm_name: str | None = None
    resume_maker_email: str | None = None
    resume_maker_name: str | None = None
    linkedin_member_email: str | None = None
    linkedin_member_name: str | None = None
    client_name: str | None = None
    comment: CommentCreate | None = None


class AttachmentCreate(BaseModel):
    url: str = Field(min_length=1)
    filename: str = Field(min_length=1)
    name: str | None = None


class MoveRequestCreate(BaseModel):
    target_status: OnboardingStatus
    note: str | None = None


class MoveRequestDecision(BaseModel):
    note: str | None = None


class ResolutionItem(BaseModel):
    email: str
    resolved_at: datetime


class CommentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    body: str
    author_email: str
    author_name: str | None = None
    tagged_emails: list[str] = Field(default_factory=list)
    tagged_names: list[str] = Field(default_factory=list)
    resolutions: list[ResolutionItem] = Field(default_factory=list)
    created_at: datetime
    edited_at: datetime | None = None


class MoveHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    from_status: str
    to_status: str
    moved_by: str
    moved_at: datetime


class AttachmentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    filename: str
    name: str | None = None
    uploaded_by: str
    uploaded_at: datetime


class MoveRequestItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class JobSummary(BaseModel):
    """Board card projection; collections load when the card is opened."""

    model_config = ConfigDict(from_attributes=True)

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

    @computed_field
    @property
    def plan(self) -> PlanType:
        """Plan tier as the pipeline reads it; unknown stored values map to default."""
        return PlanType.normalize(self.plan_type)


class JobResponse(JobSummary):
    """Full job detail."""

    bachelors_start_date: str | None = None
    masters_end_date: str | None = None
    dashboard_credentials: DashboardCredentials | None = None
    comments: list[CommentItem] = Field(default_factory=list)
    move_history: list[MoveHistoryItem] = Field(default_factory=list)
    attachments: list[AttachmentItem] = Field(default_factory=list)
    pending_move_request: MoveRequestItem | None = None


class JobListResponse(BaseModel):
    data: list[JobSummary]
    pagination: Pagination


class ResolveCommentResponse(BaseModel):
    job: JobResponse
    already_resolved: bool = False


class DirectoryUserItem(BaseModel):
    email: str
    name: str


class RoleDirectoryResponse(BaseModel):
    """Active staff grouped for assignment pickers and @mention completion."""

    csms: list[DirectoryUserItem] = Field(default_factory=list)
    resume_makers: list[DirectoryUserItem] = Field(default_factory=list)
    linkedin_members: list[DirectoryUserItem] = Field(default_factory=list)
    team_leads: list[DirectoryUserItem] = Field(default_factory=list)
    admins: list[DirectoryUserItem] = Field(default_factory=list)
    mentionable_users: list[DirectoryUserItem] = Field(default_factory=list)
