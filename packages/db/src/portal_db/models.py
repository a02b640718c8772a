# This project was developed with assistance from AI tools.
"""
Onboarding portal -- domain models

Client onboarding tickets moving through the status pipeline, together with
their comments, move history, attachments, move requests, in-app
notifications, the staff directory, numbering counters and the audit trail.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import MoveRequestState, OnboardingStatus, OnboardingSubRole, UserRole


def _values(enum_cls) -> list[str]:
    """Persist enum values (``"resume_in_progress"``) rather than member names."""
    return [member.value for member in enum_cls]


def _enum(enum_cls, name: str) -> Enum:
    return Enum(enum_cls, name=name, native_enum=False, length=50, values_callable=_values)


class PortalUser(Base):
    """Staff directory entry backing role lookups and round-robin assignment."""

    __tablename__ = "portal_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(_enum(UserRole, "user_role"), nullable=False)
    sub_role = Column(
        _enum(OnboardingSubRole, "onboarding_sub_role"),
        nullable=True,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    last_resume_assigned_at = Column(DateTime(timezone=True), nullable=True)
    last_linkedin_assigned_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<PortalUser(email='{self.email}', role='{self.role}')>"


class Counter(Base):
    """Named sequence; rows are locked with SELECT ... FOR UPDATE on increment."""

    __tablename__ = "counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Counter(name='{self.name}', value={self.value})>"


class OnboardingJob(Base):
    """One client's onboarding ticket."""

    __tablename__ = "onboarding_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_number = Column(Integer, unique=True, nullable=False, index=True)
    client_number = Column(Integer, nullable=True, index=True)
    client_email = Column(String(255), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    # Stored as written; read through PlanType.normalize().
    plan_type = Column(String(50), nullable=True)
    status = Column(
        _enum(OnboardingStatus, "onboarding_status"),
        nullable=False,
        default=OnboardingStatus.RESUME_IN_PROGRESS,
        index=True,
    )
    csm_email = Column(String(255), nullable=True, index=True)
    csm_name = Column(String(255), nullable=True)
    resume_maker_email = Column(String(255), nullable=True, index=True)
    resume_maker_name = Column(String(255), nullable=True)
    linkedin_member_email = Column(String(255), nullable=True, index=True)
    linkedin_member_name = Column(String(255), nullable=True)
    dashboard_manager_name = Column(String(255), nullable=True)
    bachelors_start_date = Column(String(50), nullable=True)
    masters_end_date = Column(String(50), nullable=True)
    dashboard_credentials = Column(JSON, nullable=True)
    linkedin_phase_started = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    comments = relationship(
        "JobComment", back_populates="job", cascade="all, delete-orphan",
        order_by="JobComment.created_at",
    )
    move_history = relationship(
        "MoveHistoryEntry", back_populates="job", cascade="all, delete-orphan",
        order_by="MoveHistoryEntry.moved_at",
    )
    attachments = relationship(
        "JobAttachment", back_populates="job", cascade="all, delete-orphan",
        order_by="JobAttachment.uploaded_at",
    )
    move_requests = relationship(
        "MoveRequest", back_populates="job", cascade="all, delete-orphan",
        order_by="MoveRequest.created_at",
    )

    def __repr__(self):
        return f"<OnboardingJob(job_number='{self.job_number}', status='{self.status}')>"


class JobComment(Base):
    """Comment on a job, optionally tagging staff who must resolve it."""

    __tablename__ = "job_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(
        Integer, ForeignKey("onboarding_jobs.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    body = Column(Text, nullable=False)
    author_email = Column(String(255), nullable=False)
    author_name = Column(String(255), nullable=True)
    tagged_emails = Column(JSON, nullable=False, default=list)
    tagged_names = Column(JSON, nullable=False, default=list)
    # [{"email": ..., "resolved_at": iso8601}]
    resolutions = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)

    job = relationship("OnboardingJob", back_populates="comments")

    def __repr__(self):
        return f"<JobComment(id={self.id}, job_id={self.job_id})>"


class MoveHistoryEntry(Base):
    """Append-only record of a status change ("created" for the first entry)."""

    __tablename__ = "job_move_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(
        Integer, ForeignKey("onboarding_jobs.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_status = Column(String(50), nullable=False)
    to_status = Column(String(50), nullable=False)
    moved_by = Column(String(255), nullable=False)
    moved_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    job = relationship("OnboardingJob", back_populates="move_history")


class JobAttachment(Base):
    """Attachment metadata; file bytes live with the upload provider."""

    __tablename__ = "job_attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(
        Integer, ForeignKey("onboarding_jobs.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    url = Column(Text, nullable=False)
    filename = Column(String(500), nullable=False)
    name = Column(String(500), nullable=True)
    uploaded_by = Column(String(255), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    job = relationship("OnboardingJob", back_populates="attachments")


class MoveRequest(Base):
    """A status move filed by a user who cannot move the job directly."""

    __tablename__ = "move_requests"
    __table_args__ = (
        Index(
            "uq_move_requests_one_pending",
            "job_id",
            unique=True,
            postgresql_where=text("state = 'pending'"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(
        Integer, ForeignKey("onboarding_jobs.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_status = Column(
        _enum(OnboardingStatus, "onboarding_status"), nullable=False,
    )
    to_status = Column(
        _enum(OnboardingStatus, "onboarding_status"), nullable=False,
    )
    requested_by_email = Column(String(255), nullable=False)
    requested_by_name = Column(String(255), nullable=True)
    state = Column(
        _enum(MoveRequestState, "move_request_state"),
        nullable=False,
        default=MoveRequestState.PENDING,
        index=True,
    )
    note = Column(Text, nullable=True)
    resolved_by = Column(String(255), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    job = relationship("OnboardingJob", back_populates="move_requests")

    def __repr__(self):
        return f"<MoveRequest(job_id={self.job_id}, to='{self.to_status}', state='{self.state}')>"


class OnboardingNotification(Base):
    """In-app notification row for a single recipient."""

    __tablename__ = "onboarding_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_email = Column(String(255), nullable=False, index=True)
    job_id = Column(
        Integer, ForeignKey("onboarding_jobs.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    job_number = Column(Integer, nullable=True)
    client_number = Column(Integer, nullable=True)
    client_name = Column(String(255), nullable=True)
    snippet = Column(Text, nullable=False)
    author_email = Column(String(255), nullable=True)
    author_name = Column(String(255), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class AuditEvent(Base):
    """Append-only audit trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    prev_hash = Column(String(64), nullable=True)
    user_id = Column(String(255), nullable=True)
    user_role = Column(String(50), nullable=True)
    event_type = Column(String(100), nullable=False, index=True)
    job_id = Column(Integer, nullable=True, index=True)
    event_data = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, type='{self.event_type}')>"
