# This project was developed with assistance from AI tools.
"""onboarding schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:41.503118

"""

import sqlalchemy as sa
from alembic import op

revision = "3f1c2a9d7b10"
down_revision = None
branch_labels = None
depends_on = None

# Counters hold the last issued value: first job is 5800, first client 5809.
JOB_NUMBER_SEED = 5799
CLIENT_NUMBER_SEED = 5808

TRIGGER_FUNCTION = """
CREATE OR REPLACE FUNCTION audit_events_prevent_mutation()
RETURNS TRIGGER AS $$
BEGIN
    RAISE EXCEPTION 'audit_events is append-only: % denied for row %', TG_OP, OLD.id;
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;
"""


def upgrade() -> None:
    op.create_table(
        "portal_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("sub_role", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_resume_assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_linkedin_assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_portal_users_email", "portal_users", ["email"], unique=True)

    op.create_table(
        "counters",
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("name"),
    )
    op.bulk_insert(
        sa.table("counters", sa.column("name", sa.String), sa.column("value", sa.Integer)),
        [
            {"name": "job_number", "value": JOB_NUMBER_SEED},
            {"name": "client_number", "value": CLIENT_NUMBER_SEED},
        ],
    )

    op.create_table(
        "onboarding_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_number", sa.Integer(), nullable=False),
        sa.Column("client_number", sa.Integer(), nullable=True),
        sa.Column("client_email", sa.String(255), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("plan_type", sa.String(50), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="resume_in_progress"),
        sa.Column("csm_email", sa.String(255), nullable=True),
        sa.Column("csm_name", sa.String(255), nullable=True),
        sa.Column("resume_maker_email", sa.String(255), nullable=True),
        sa.Column("resume_maker_name", sa.String(255), nullable=True),
        sa.Column("linkedin_member_email", sa.String(255), nullable=True),
        sa.Column("linkedin_member_name", sa.String(255), nullable=True),
        sa.Column("dashboard_manager_name", sa.String(255), nullable=True),
        sa.Column("bachelors_start_date", sa.String(50), nullable=True),
        sa.Column("masters_end_date", sa.String(50), nullable=True),
        sa.Column("dashboard_credentials", sa.JSON(), nullable=True),
        sa.Column("linkedin_phase_started", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_onboarding_jobs_job_number", "onboarding_jobs", ["job_number"], unique=True)
    op.create_index("ix_onboarding_jobs_client_number", "onboarding_jobs", ["client_number"])
    op.create_index("ix_onboarding_jobs_client_email", "onboarding_jobs", ["client_email"])
    op.create_index("ix_onboarding_jobs_status", "onboarding_jobs", ["status"])
    op.create_index("ix_onboarding_jobs_csm_email", "onboarding_jobs", ["csm_email"])
    op.create_index("ix_onboarding_jobs_resume_maker_email", "onboarding_jobs", ["resume_maker_email"])
    op.create_index("ix_onboarding_jobs_linkedin_member_email", "onboarding_jobs", ["linkedin_member_email"])

    op.create_table(
        "job_comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author_email", sa.String(255), nullable=False),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("tagged_emails", sa.JSON(), nullable=False),
        sa.Column("tagged_names", sa.JSON(), nullable=False),
        sa.Column("resolutions", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["job_id"], ["onboarding_jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_job_comments_job_id", "job_comments", ["job_id"])

    op.create_table(
        "job_move_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("from_status", sa.String(50), nullable=False),
        sa.Column("to_status", sa.String(50), nullable=False),
        sa.Column("moved_by", sa.String(255), nullable=False),
        sa.Column("moved_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["onboarding_jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_job_move_history_job_id", "job_move_history", ["job_id"])

    op.create_table(
        "job_attachments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("filename", sa.String(500), nullable=False),
        sa.Column("name", sa.String(500), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["onboarding_jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_job_attachments_job_id", "job_attachments", ["job_id"])

    op.create_table(
        "move_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=False),
        sa.Column("from_status", sa.String(50), nullable=False),
        sa.Column("to_status", sa.String(50), nullable=False),
        sa.Column("requested_by_email", sa.String(255), nullable=False),
        sa.Column("requested_by_name", sa.String(255), nullable=True),
        sa.Column("state", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("resolved_by", sa.String(255), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["onboarding_jobs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_move_requests_job_id", "move_requests", ["job_id"])
    op.create_index("ix_move_requests_state", "move_requests", ["state"])
    # At most one pending request per job.
    op.create_index(
        "uq_move_requests_one_pending",
        "move_requests",
        ["job_id"],
        unique=True,
        postgresql_where=sa.text("state = 'pending'"),
    )

    op.create_table(
        "onboarding_notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=True),
        sa.Column("job_number", sa.Integer(), nullable=True),
        sa.Column("client_number", sa.Integer(), nullable=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("snippet", sa.Text(), nullable=False),
        sa.Column("author_email", sa.String(255), nullable=True),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["job_id"], ["onboarding_jobs.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_onboarding_notifications_user_email", "onboarding_notifications", ["user_email"])
    op.create_index("ix_onboarding_notifications_job_id", "onboarding_notifications", ["job_id"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("prev_hash", sa.String(64), nullable=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("user_role", sa.String(50), nullable=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("job_id", sa.Integer(), nullable=True),
        sa.Column("event_data", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_events_event_type", "audit_events", ["event_type"])
    op.create_index("ix_audit_events_job_id", "audit_events", ["job_id"])

    op.execute(TRIGGER_FUNCTION)
    op.execute(
        "CREATE TRIGGER audit_events_no_update BEFORE UPDATE ON audit_events "
        "FOR EACH ROW EXECUTE FUNCTION audit_events_prevent_mutation();"
    )
    op.execute(
        "CREATE TRIGGER audit_events_no_delete BEFORE DELETE ON audit_events "
        "FOR EACH ROW EXECUTE FUNCTION audit_events_prevent_mutation();"
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS audit_events_no_delete ON audit_events")
    op.execute("DROP TRIGGER IF EXISTS audit_events_no_update ON audit_events")
    op.execute("DROP FUNCTION IF EXISTS audit_events_prevent_mutation()")
    op.drop_table("audit_events")
    op.drop_table("onboarding_notifications")
    op.drop_table("move_requests")
    op.drop_table("job_attachments")
    op.drop_table("job_move_history")
    op.drop_table("job_comments")
    op.drop_table("onboarding_jobs")
    op.drop_table("counters")
    op.drop_table("portal_users")
