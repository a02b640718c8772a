# This project was developed with assistance from AI tools.
"""Pydantic models for admin endpoints."""

from datetime import datetime

from portal_db.enums import OnboardingSubRole, UserRole
from pydantic import BaseModel, ConfigDict, Field


class AuditEventItem(BaseModel):
    """Single audit event in a query response."""

    id: int
    timestamp: str
    event_type: str
    user_id: str | None = None
    user_role: str | None = None
    job_id: int | None = None
    event_data: dict | str | None = None


class AuditEventsResponse(BaseModel):
    """Response for GET /api/admin/audit."""

    job_id: int
    count: int
    events: list[AuditEventItem]


class AuditChainVerifyResponse(BaseModel):
    """Response for GET /api/admin/audit/verify."""

    status: str
    events_checked: int
    first_break_id: int | None = None


class PortalUserUpsert(BaseModel):
    """Create or update a staff directory entry."""

    email: str = Field(min_length=3)
    name: str = Field(min_length=1)
    role: UserRole
    sub_role: OnboardingSubRole | None = None


class PortalUserItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email: str
    name: str
    role: UserRole
    sub_role: OnboardingSubRole | None = None
    is_active: bool = True
    last_resume_assigned_at: datetime | None = None
    last_linkedin_assigned_at: datetime | None = None


class PortalUserListResponse(BaseModel):
    data: list[PortalUserItem]
    count: int
