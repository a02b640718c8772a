# This project was developed with assistance from AI tools.
"""Structural checks on the ORM metadata (no database required)."""

from portal_db import Base, OnboardingJob
from portal_db.enums import MoveRequestState, OnboardingStatus


def test_expected_tables_registered():
    assert set(Base.metadata.tables) == {
        "portal_users",
        "counters",
        "onboarding_jobs",
        "job_comments",
        "job_move_history",
        "job_attachments",
        "move_requests",
        "onboarding_notifications",
        "audit_events",
    }


def test_job_status_defaults_to_first_stage():
    column = OnboardingJob.__table__.c.status
    assert column.default.arg == OnboardingStatus.RESUME_IN_PROGRESS


def test_child_tables_cascade_from_jobs():
    for table in ("job_comments", "job_move_history", "job_attachments", "move_requests"):
        fk = next(iter(Base.metadata.tables[table].c.job_id.foreign_keys))
        assert fk.column.table.name == "onboarding_jobs"
        assert fk.ondelete == "CASCADE"


def test_single_pending_request_index():
    indexes = {ix.name: ix for ix in Base.metadata.tables["move_requests"].indexes}
    pending = indexes["uq_move_requests_one_pending"]
    assert pending.unique
    assert MoveRequestState.PENDING.value in str(pending.dialect_options["postgresql"]["where"])
