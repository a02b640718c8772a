# This project was developed with assistance from AI tools.
"""Unit tests for data scope construction (core.auth.build_data_scope)."""

from portal_db.enums import OnboardingStatus, OnboardingSubRole, UserRole
from portal_db.pipeline import ALL_STATUSES, LINKEDIN_COVER_LETTER_STATUSES, RESUME_STATUSES

from portal_api.core.auth import build_data_scope


def test_admin_scope_full_board_with_credentials():
    scope = build_data_scope(UserRole.ADMIN)
    assert scope.full_board is True
    assert scope.see_credentials is True
    assert scope.visible_statuses == ALL_STATUSES


def test_csm_sees_credentials():
    scope = build_data_scope(UserRole.CSM)
    assert scope.full_board is True
    assert scope.see_credentials is True


def test_team_lead_and_intern_full_board_masked_credentials():
    for role in (UserRole.TEAM_LEAD, UserRole.OPERATIONS_INTERN):
        scope = build_data_scope(role)
        assert scope.full_board is True
        assert scope.see_credentials is False


def test_resume_maker_scope_resume_columns():
    scope = build_data_scope(UserRole.ONBOARDING_TEAM, OnboardingSubRole.RESUME_MAKER)
    assert scope.full_board is False
    assert scope.visible_statuses == RESUME_STATUSES
    assert OnboardingStatus.LINKEDIN_IN_PROGRESS not in scope.visible_statuses


def test_linkedin_member_scope_phase_two_columns():
    scope = build_data_scope(
        UserRole.ONBOARDING_TEAM, OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION
    )
    assert scope.visible_statuses == LINKEDIN_COVER_LETTER_STATUSES


def test_cover_letter_writer_sees_nothing():
    scope = build_data_scope(UserRole.ONBOARDING_TEAM, OnboardingSubRole.COVER_LETTER_WRITER)
    assert scope.visible_statuses == ()
    assert scope.full_board is False
