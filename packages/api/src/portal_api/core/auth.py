# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Shared by the request middleware and the test persona factories so that
both derive board visibility the same way.
"""

from portal_db.enums import OnboardingSubRole, UserRole
from portal_db.pipeline import FULL_BOARD_ROLES, visible_columns_for_user

from ..schemas.auth import DataScope

_CREDENTIAL_ROLES = frozenset({UserRole.ADMIN, UserRole.CSM})


def build_data_scope(role: UserRole, sub_role: OnboardingSubRole | None = None) -> DataScope:
    """Build board visibility rules from the user's role and sub-role."""
    return DataScope(
        visible_statuses=visible_columns_for_user(role, sub_role),
        full_board=role in FULL_BOARD_ROLES,
        see_credentials=role in _CREDENTIAL_ROLES,
    )
