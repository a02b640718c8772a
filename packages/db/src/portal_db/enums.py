# This project was developed with assistance from AI tools.
"""
Domain enums for the client onboarding pipeline.

Shared domain types used by both SQLAlchemy models (db package),
Pydantic schemas (api package) and the board client.
"""

import enum


class OnboardingStatus(str, enum.Enum):
    RESUME_IN_PROGRESS = "resume_in_progress"
    RESUME_DRAFT_DONE = "resume_draft_done"
    RESUME_IN_REVIEW = "resume_in_review"
    RESUME_APPROVED = "resume_approved"
    LINKEDIN_IN_PROGRESS = "linkedin_in_progress"
    LINKEDIN_DONE = "linkedin_done"
    COVER_LETTER_IN_PROGRESS = "cover_letter_in_progress"
    COVER_LETTER_DONE = "cover_letter_done"
    APPLICATIONS_READY = "applications_ready"
    APPLICATIONS_IN_PROGRESS = "applications_in_progress"
    COMPLETED = "completed"

    @classmethod
    def terminal_statuses(cls) -> frozenset["OnboardingStatus"]:
        """Statuses with no outgoing transitions."""
        return frozenset({cls.COMPLETED})

    @classmethod
    def valid_transitions(cls) -> dict["OnboardingStatus", frozenset["OnboardingStatus"]]:
        """Directly reachable statuses for each status in the pipeline."""
        return {
            cls.RESUME_IN_PROGRESS: frozenset({cls.RESUME_DRAFT_DONE}),
            cls.RESUME_DRAFT_DONE: frozenset({cls.RESUME_IN_REVIEW}),
            cls.RESUME_IN_REVIEW: frozenset({cls.RESUME_APPROVED}),
            cls.RESUME_APPROVED: frozenset({cls.LINKEDIN_IN_PROGRESS}),
            cls.LINKEDIN_IN_PROGRESS: frozenset({cls.LINKEDIN_DONE}),
            cls.LINKEDIN_DONE: frozenset(
                {cls.COVER_LETTER_IN_PROGRESS, cls.APPLICATIONS_READY}
            ),
            cls.COVER_LETTER_IN_PROGRESS: frozenset({cls.COVER_LETTER_DONE}),
            cls.COVER_LETTER_DONE: frozenset({cls.APPLICATIONS_READY}),
            cls.APPLICATIONS_READY: frozenset({cls.APPLICATIONS_IN_PROGRESS}),
            cls.APPLICATIONS_IN_PROGRESS: frozenset({cls.COMPLETED}),
            cls.COMPLETED: frozenset(),
        }


class PlanType(str, enum.Enum):
    EXECUTIVE = "executive"
    PROFESSIONAL = "professional"
    DEFAULT = "default"

    @classmethod
    def aliases(cls) -> dict[str, "PlanType"]:
        """Accepted spellings, keyed by normalised (lowercase) name."""
        return {
            "executive": cls.EXECUTIVE,
            "professional": cls.PROFESSIONAL,
            "default": cls.DEFAULT,
            "starter": cls.DEFAULT,
            "ignite": cls.DEFAULT,
        }

    @classmethod
    def parse(cls, value: "str | PlanType | None") -> "PlanType":
        """Strict parse: raises ValueError for unknown plan names."""
        if isinstance(value, PlanType):
            return value
        key = (value or "").strip().lower()
        try:
            return cls.aliases()[key]
        except KeyError:
            raise ValueError(f"Unknown plan type: {value!r}") from None

    @classmethod
    def normalize(cls, value: "str | PlanType | None") -> "PlanType":
        """Lenient parse for stored values: unknown or missing -> DEFAULT."""
        try:
            return cls.parse(value)
        except ValueError:
            return cls.DEFAULT


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CSM = "csm"
    TEAM_LEAD = "team_lead"
    OPERATIONS_INTERN = "operations_intern"
    ONBOARDING_TEAM = "onboarding_team"


class OnboardingSubRole(str, enum.Enum):
    RESUME_MAKER = "resume_maker"
    LINKEDIN_AND_COVER_LETTER_OPTIMIZATION = "linkedin_and_cover_letter_optimization"
    COVER_LETTER_WRITER = "cover_letter_writer"


class MoveRequestState(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUPERSEDED = "superseded"
