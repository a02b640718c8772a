# This project was developed with assistance from AI tools.
"""Unit tests for the onboarding job service."""

from unittest.mock import AsyncMock, patch

import pytest
from portal_db.enums import MoveRequestState, OnboardingStatus, OnboardingSubRole, UserRole
from portal_db.pipeline import MoveOutcome, RejectReason

from factories import (
    make_mock_comment,
    make_mock_job,
    make_mock_request,
    make_portal_user,
    make_result,
    make_session,
    make_user,
)
from portal_api.services import job as job_service
from portal_api.services.directory import DirectoryUser
from portal_api.services.job import (
    DuplicateClientError,
    ForbiddenActionError,
    MoveApprovalRequiredError,
    MoveRejectedError,
)

SVC = "portal_api.services.job"

TEAM_LEAD = make_user(UserRole.TEAM_LEAD, email="tara@portal.test", name="Tara Lead")
INTERN = make_user(UserRole.OPERATIONS_INTERN, email="ivan@portal.test", name="Ivan Intern")
CSM = make_user(UserRole.CSM, email="casey@portal.test", name="Casey Csm")
LINKEDIN = make_user(
    UserRole.ONBOARDING_TEAM,
    OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION,
    email="lena@portal.test",
    name="Lena Linkedin",
)


@pytest.fixture
def side_effects():
    """Patch the collaborators that write notifications and audit rows."""
    with (
        patch(f"{SVC}.notify", new_callable=AsyncMock) as notify,
        patch(f"{SVC}.write_audit_event", new_callable=AsyncMock) as audit,
        patch(f"{SVC}.active_emails", new_callable=AsyncMock, return_value=["x@portal.test"]),
    ):
        yield notify, audit


# ---------------------------------------------------------------------------
# create_job
# ---------------------------------------------------------------------------


async def test_create_job_rejects_duplicate_client_email():
    session = make_session(make_result(single=17))

    with pytest.raises(DuplicateClientError):
        await job_service.create_job(
            session, CSM, client_email="dup@example.com", client_name="Dup", plan_type="executive",
        )
    session.commit.assert_not_awaited()


async def test_create_job_allocates_numbers_and_assigns_resume_maker(side_effects):
    notify, audit = side_effects
    session = make_session(make_result(single=None))
    maker = make_portal_user(email="Rita@Portal.test", name="Rita Resume")
    loaded = make_mock_job()

    with (
        patch(f"{SVC}.next_job_number", new_callable=AsyncMock, return_value=5800),
        patch(f"{SVC}.next_client_number", new_callable=AsyncMock, return_value=5809),
        patch(f"{SVC}.next_resume_maker", new_callable=AsyncMock, return_value=maker),
        patch(f"{SVC}.load_job", new_callable=AsyncMock, return_value=loaded),
    ):
        result = await job_service.create_job(
            session,
            CSM,
            client_email=" New@Example.com ",
            client_name="  New Client ",
            plan_type="professional",
        )

    assert result is loaded
    job = session.add.call_args[0][0]
    assert job.job_number == 5800
    assert job.client_number == 5809
    assert job.client_email == "new@example.com"
    assert job.client_name == "New Client"
    assert job.status == OnboardingStatus.RESUME_IN_PROGRESS
    assert job.resume_maker_email == "rita@portal.test"
    assert job.linkedin_phase_started is False

    assert len(job.move_history) == 1
    first = job.move_history[0]
    assert (first.from_status, first.to_status, first.moved_by) == (
        "created",
        "resume_in_progress",
        "system",
    )

    assert notify.await_args.args[3] == "New client ticket created: 5809 - New Client"
    audit.assert_awaited_once()
    session.commit.assert_awaited_once()


async def test_create_job_keeps_explicit_client_number(side_effects):
    session = make_session(make_result(single=None))
    with (
        patch(f"{SVC}.next_job_number", new_callable=AsyncMock, return_value=5801),
        patch(f"{SVC}.next_client_number", new_callable=AsyncMock) as next_client,
        patch(f"{SVC}.next_resume_maker", new_callable=AsyncMock, return_value=None),
        patch(f"{SVC}.load_job", new_callable=AsyncMock, return_value=make_mock_job()),
    ):
        await job_service.create_job(
            session, CSM, client_email="a@b.com", client_name="A", plan_type="default",
            client_number=4321,
        )

    next_client.assert_not_awaited()
    job = session.add.call_args[0][0]
    assert job.client_number == 4321
    assert job.resume_maker_email is None


# ---------------------------------------------------------------------------
# patch_job status moves
# ---------------------------------------------------------------------------


def _patch_job_context(job):
    return (
        patch(f"{SVC}.get_job", new_callable=AsyncMock, return_value=job),
        patch(f"{SVC}.load_job", new_callable=AsyncMock, return_value=job),
    )


async def test_patch_job_not_found_returns_none():
    session = make_session()
    with patch(f"{SVC}.get_job", new_callable=AsyncMock, return_value=None):
        assert await job_service.patch_job(session, TEAM_LEAD, 99, status=None) is None


async def test_plan_mismatch_rejected_with_permitted_statuses():
    job = make_mock_job(plan_type="professional", status=OnboardingStatus.LINKEDIN_DONE)
    session = make_session()
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx, pytest.raises(MoveRejectedError) as exc_info:
        await job_service.patch_job(
            session, INTERN, job.id, status=OnboardingStatus.COVER_LETTER_IN_PROGRESS,
        )

    decision = exc_info.value.decision
    assert decision.reason == RejectReason.PLAN_MISMATCH
    assert OnboardingStatus.COVER_LETTER_IN_PROGRESS not in decision.permitted
    assert job.status == OnboardingStatus.LINKEDIN_DONE
    session.commit.assert_not_awaited()


async def test_request_outcome_requires_move_request():
    job = make_mock_job(status=OnboardingStatus.COVER_LETTER_IN_PROGRESS)
    session = make_session()
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx, pytest.raises(MoveApprovalRequiredError):
        await job_service.patch_job(
            session, LINKEDIN, job.id, status=OnboardingStatus.COVER_LETTER_DONE,
        )
    assert job.status == OnboardingStatus.COVER_LETTER_IN_PROGRESS


async def test_team_lead_applies_move_directly(side_effects):
    _, audit = side_effects
    job = make_mock_job(
        status=OnboardingStatus.LINKEDIN_DONE, linkedin_phase_started=True,
    )
    session = make_session()
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx:
        result = await job_service.patch_job(
            session, TEAM_LEAD, job.id, status=OnboardingStatus.APPLICATIONS_READY,
        )

    assert result is job
    assert job.status == OnboardingStatus.APPLICATIONS_READY
    entry = job.move_history[-1]
    assert entry.from_status == "linkedin_done"
    assert entry.to_status == "applications_ready"
    assert entry.moved_by == "tara@portal.test"
    assert audit.await_args.kwargs["event_data"] == {
        "from": "linkedin_done",
        "to": "applications_ready",
    }
    session.commit.assert_awaited_once()


async def test_direct_move_supersedes_pending_request(side_effects):
    notify, _ = side_effects
    request = make_mock_request()
    job = make_mock_job(
        status=OnboardingStatus.COVER_LETTER_IN_PROGRESS,
        linkedin_phase_started=True,
        move_requests=[request],
    )
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx:
        await job_service.patch_job(
            make_session(), TEAM_LEAD, job.id, status=OnboardingStatus.APPLICATIONS_READY,
        )

    assert request.state == MoveRequestState.SUPERSEDED
    assert request.resolved_by == "tara@portal.test"
    assert job_service.pending_request(job) is None
    assert notify.await_args.args[1] == ["lena@portal.test"]
    assert notify.await_args.args[3] == (
        "Move request superseded: 5809 - Dana Client was moved to Applications Ready"
    )


async def test_non_admin_cannot_reassign_resume_maker():
    job = make_mock_job()
    session = make_session()
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx, pytest.raises(ForbiddenActionError):
        await job_service.patch_job(
            session, TEAM_LEAD, job.id, resume_maker_email="other@portal.test",
        )


async def test_admin_renames_client_and_reassigns_csm():
    admin = make_user()
    job = make_mock_job()
    session = make_session()
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx:
        await job_service.patch_job(
            session,
            admin,
            job.id,
            client_name="  Renamed ",
            csm_email="NEW@portal.test",
            csm_name="New Csm",
        )

    assert job.client_name == "Renamed"
    assert job.csm_email == "new@portal.test"
    assert job.csm_name == "New Csm"


# ---------------------------------------------------------------------------
# LinkedIn phase side effects
# ---------------------------------------------------------------------------


async def test_resume_approved_on_linkedin_plan_starts_phase(side_effects):
    notify, _ = side_effects
    job = make_mock_job(plan_type="professional", status=OnboardingStatus.RESUME_IN_REVIEW)
    member = make_portal_user(email="lena@portal.test", name="Lena Linkedin")
    session = make_session()

    with patch(f"{SVC}.next_linkedin_member", new_callable=AsyncMock, return_value=member):
        await job_service.apply_move(session, job, OnboardingStatus.RESUME_APPROVED, TEAM_LEAD)

    assert job.linkedin_phase_started is True
    assert job.linkedin_member_email == "lena@portal.test"
    assert job.linkedin_member_name == "Lena Linkedin"
    assert notify.await_args.args[3] == "LinkedIn phase started: 5809 - Dana Client"


async def test_resume_approved_on_default_plan_does_not_start_phase(side_effects):
    notify, _ = side_effects
    job = make_mock_job(plan_type="default", status=OnboardingStatus.RESUME_IN_REVIEW)
    session = make_session()

    with patch(f"{SVC}.next_linkedin_member", new_callable=AsyncMock) as next_member:
        await job_service.apply_move(session, job, OnboardingStatus.RESUME_APPROVED, TEAM_LEAD)

    assert job.linkedin_phase_started is False
    next_member.assert_not_awaited()
    notify.assert_not_awaited()


async def test_existing_linkedin_member_kept(side_effects):
    job = make_mock_job(status=OnboardingStatus.RESUME_APPROVED)
    job.linkedin_member_email = "kept@portal.test"
    session = make_session()

    with patch(f"{SVC}.next_linkedin_member", new_callable=AsyncMock) as next_member:
        await job_service.apply_move(
            session, job, OnboardingStatus.LINKEDIN_IN_PROGRESS, TEAM_LEAD,
        )

    next_member.assert_not_awaited()
    assert job.linkedin_member_email == "kept@portal.test"
    assert job.linkedin_phase_started is True


def test_decide_move_linkedin_pickup_applies():
    job = make_mock_job(status=OnboardingStatus.RESUME_APPROVED, linkedin_phase_started=True)
    decision = job_service.decide_move(job, LINKEDIN, OnboardingStatus.LINKEDIN_IN_PROGRESS)
    assert decision.outcome == MoveOutcome.APPLY


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


async def test_comment_mentions_resolved_and_notified():
    job = make_mock_job()
    session = make_session()
    directory = [
        DirectoryUser(email="casey@portal.test", name="Casey Csm"),
        DirectoryUser(email="tara@portal.test", name="Tara Lead"),
    ]

    with (
        patch(f"{SVC}.get_mentionable_users", new_callable=AsyncMock, return_value=directory),
        patch(f"{SVC}.notify", new_callable=AsyncMock) as notify,
    ):
        comment = await job_service.append_comment(
            session, INTERN, job, "  @casey please confirm with @tara.  ",
        )

    assert comment.body == "@casey please confirm with @tara."
    assert comment.tagged_emails == ["casey@portal.test", "tara@portal.test"]
    assert comment.tagged_names == ["Casey Csm", "Tara Lead"]
    assert comment.author_email == "ivan@portal.test"
    assert job.comments == [comment]
    assert notify.await_args.args[1] == ["casey@portal.test", "tara@portal.test"]


async def test_explicit_tags_skip_mention_resolution():
    job = make_mock_job()
    session = make_session()

    with (
        patch(f"{SVC}.get_mentionable_users", new_callable=AsyncMock) as directory,
        patch(f"{SVC}.notify", new_callable=AsyncMock),
    ):
        comment = await job_service.append_comment(
            session, INTERN, job, "see @casey", tagged_emails=["Rita@portal.test"],
        )

    directory.assert_not_awaited()
    assert comment.tagged_emails == ["rita@portal.test"]
    assert comment.tagged_names == ["rita@portal.test"]


async def test_empty_comment_rejected():
    with pytest.raises(ValueError, match="Comment body is required"):
        await job_service.append_comment(make_session(), INTERN, make_mock_job(), "   ")


async def test_only_author_or_admin_edits_comment():
    comment = make_mock_comment(author_email="tara@portal.test")
    job = make_mock_job(comments=[comment])
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx, pytest.raises(ForbiddenActionError):
        await job_service.edit_comment(make_session(), INTERN, job.id, comment.id, "new")

    with get_ctx, load_ctx:
        await job_service.edit_comment(make_session(), TEAM_LEAD, job.id, comment.id, "new")
    assert comment.body == "new"
    assert comment.edited_at is not None


async def test_resolve_comment_requires_tag():
    comment = make_mock_comment(tagged_emails=["casey@portal.test"])
    job = make_mock_job(comments=[comment])
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx, pytest.raises(ForbiddenActionError):
        await job_service.resolve_comment(make_session(), INTERN, job.id, comment.id)


async def test_resolve_comment_records_resolution_once():
    comment = make_mock_comment(tagged_emails=["Casey@portal.test"])
    job = make_mock_job(comments=[comment])
    get_ctx, load_ctx = _patch_job_context(job)

    with get_ctx, load_ctx:
        _, already = await job_service.resolve_comment(make_session(), CSM, job.id, comment.id)
    assert already is False
    assert [r["email"] for r in comment.resolutions] == ["casey@portal.test"]

    session = make_session()
    with get_ctx, load_ctx:
        _, already = await job_service.resolve_comment(session, CSM, job.id, comment.id)
    assert already is True
    assert len(comment.resolutions) == 1
    session.commit.assert_not_awaited()


async def test_resolve_unknown_comment_returns_none():
    job = make_mock_job()
    get_ctx, load_ctx = _patch_job_context(job)
    with get_ctx, load_ctx:
        assert await job_service.resolve_comment(make_session(), CSM, job.id, 404) is None


async def test_add_attachment_defaults_name_to_filename():
    job = make_mock_job()
    with patch(f"{SVC}.get_job", new_callable=AsyncMock, return_value=job):
        attachment = await job_service.add_attachment(
            make_session(), CSM, job.id, url="https://files/cv.pdf", filename="cv.pdf",
        )
    assert attachment.name == "cv.pdf"
    assert attachment.uploaded_by == "casey@portal.test"
    assert job.attachments == [attachment]
