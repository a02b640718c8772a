# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from portal_db.enums import OnboardingStatus, OnboardingSubRole, UserRole
from pydantic import BaseModel, ConfigDict, Field


class DataScope(BaseModel):
    """Board visibility rules injected by RBAC middleware."""

    visible_statuses: tuple[OnboardingStatus, ...] = ()
    full_board: bool = False
    see_credentials: bool = False


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    sub_role: OnboardingSubRole | None = None
    email: str
    name: str
    data_scope: DataScope = Field(default_factory=DataScope)


class TokenPayload(BaseModel):
    """Decoded JWT token claims from Keycloak."""

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    realm_access: dict = Field(default_factory=dict)
