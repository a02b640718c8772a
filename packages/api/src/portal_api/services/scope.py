# This project was developed with assistance from AI tools.
"""Board scope filtering for job queries.

Onboarding team members only see jobs in their own columns. Resume-approved
jobs whose LinkedIn phase has started also surface for users who see the
LinkedIn column.
"""

from portal_db import OnboardingJob
from portal_db.enums import OnboardingStatus
from sqlalchemy import and_, false, or_

from ..schemas.auth import DataScope


def apply_board_scope(stmt, scope: DataScope):
    """Restrict a job query to what ``scope`` may see."""
    if scope.full_board:
        return stmt
    if not scope.visible_statuses:
        return stmt.where(false())

    clause = OnboardingJob.status.in_(scope.visible_statuses)
    if OnboardingStatus.LINKEDIN_IN_PROGRESS in scope.visible_statuses:
        clause = or_(
            clause,
            and_(
                OnboardingJob.status == OnboardingStatus.RESUME_APPROVED,
                OnboardingJob.linkedin_phase_started.is_(True),
            ),
        )
    return stmt.where(clause)
