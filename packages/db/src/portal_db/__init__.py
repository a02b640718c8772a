# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    MoveRequestState,
    OnboardingStatus,
    OnboardingSubRole,
    PlanType,
    UserRole,
)
from .models import (
    AuditEvent,
    Counter,
    JobAttachment,
    JobComment,
    MoveHistoryEntry,
    MoveRequest,
    OnboardingJob,
    OnboardingNotification,
    PortalUser,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "OnboardingStatus",
    "PlanType",
    "UserRole",
    "OnboardingSubRole",
    "MoveRequestState",
    # Models
    "AuditEvent",
    "Counter",
    "JobAttachment",
    "JobComment",
    "MoveHistoryEntry",
    "MoveRequest",
    "OnboardingJob",
    "OnboardingNotification",
    "PortalUser",
]
