# This project was developed with assistance from AI tools.
"""Onboarding status pipeline: transition, plan and role gating rules.

Pure decision functions consulted by the API before persisting a move and by
the board client before issuing one. Nothing here touches the database.
"""

import enum
from dataclasses import dataclass

from .enums import OnboardingStatus, OnboardingSubRole, PlanType, UserRole

S = OnboardingStatus

ALL_STATUSES: tuple[OnboardingStatus, ...] = tuple(OnboardingStatus)

RESUME_STATUSES: tuple[OnboardingStatus, ...] = (
    S.RESUME_IN_PROGRESS,
    S.RESUME_DRAFT_DONE,
    S.RESUME_IN_REVIEW,
    S.RESUME_APPROVED,
)

LINKEDIN_COVER_LETTER_STATUSES: tuple[OnboardingStatus, ...] = (
    S.LINKEDIN_IN_PROGRESS,
    S.LINKEDIN_DONE,
    S.COVER_LETTER_IN_PROGRESS,
    S.COVER_LETTER_DONE,
)

LINKEDIN_STATUSES: frozenset[OnboardingStatus] = frozenset(
    {S.LINKEDIN_IN_PROGRESS, S.LINKEDIN_DONE}
)

PLAN_STATUSES: dict[PlanType, tuple[OnboardingStatus, ...]] = {
    PlanType.EXECUTIVE: ALL_STATUSES,
    PlanType.PROFESSIONAL: RESUME_STATUSES + (S.LINKEDIN_IN_PROGRESS, S.LINKEDIN_DONE),
    PlanType.DEFAULT: RESUME_STATUSES,
}

PLAN_LABELS: dict[PlanType, str] = {
    PlanType.EXECUTIVE: "Executive plan",
    PlanType.PROFESSIONAL: "Professional plan",
    PlanType.DEFAULT: "This plan",
}

STATUS_LABELS: dict[OnboardingStatus, str] = {
    S.RESUME_IN_PROGRESS: "Resume In Progress",
    S.RESUME_DRAFT_DONE: "Resume Draft Done",
    S.RESUME_IN_REVIEW: "Resume In Review (Client)",
    S.RESUME_APPROVED: "Resume Approved",
    S.LINKEDIN_IN_PROGRESS: "LinkedIn Optimization In Progress",
    S.LINKEDIN_DONE: "LinkedIn Done",
    S.COVER_LETTER_IN_PROGRESS: "Cover Letter Draft In Progress",
    S.COVER_LETTER_DONE: "Cover Letter Done",
    S.APPLICATIONS_READY: "Applications Ready",
    S.APPLICATIONS_IN_PROGRESS: "Applications In Progress",
    S.COMPLETED: "Completed",
}

PHASE_GROUPS: tuple[tuple[str, tuple[OnboardingStatus, ...]], ...] = (
    ("Resume – Phase 1", RESUME_STATUSES),
    ("LinkedIn & Cover Letter – Phase 2", LINKEDIN_COVER_LETTER_STATUSES),
    ("Job Applications – Phase 3", (S.APPLICATIONS_READY, S.APPLICATIONS_IN_PROGRESS)),
    ("End", (S.COMPLETED,)),
)

DIRECT_MOVE_ROLES = frozenset({UserRole.ADMIN, UserRole.CSM, UserRole.TEAM_LEAD})
APPROVER_ROLES = frozenset({UserRole.ADMIN, UserRole.TEAM_LEAD})
FULL_BOARD_ROLES = frozenset(
    {UserRole.ADMIN, UserRole.CSM, UserRole.TEAM_LEAD, UserRole.OPERATIONS_INTERN}
)

_SUB_ROLE_COLUMNS: dict[OnboardingSubRole, tuple[OnboardingStatus, ...]] = {
    OnboardingSubRole.RESUME_MAKER: RESUME_STATUSES,
    OnboardingSubRole.LINKEDIN_AND_COVER_LETTER_OPTIMIZATION: LINKEDIN_COVER_LETTER_STATUSES,
}


def status_label(status: OnboardingStatus | str) -> str:
    """Human-readable label, falling back to the raw value."""
    try:
        return STATUS_LABELS[OnboardingStatus(status)]
    except ValueError:
        return str(status)


def _labels(statuses) -> str:
    return ", ".join(status_label(s) for s in statuses)


# ---------------------------------------------------------------------------
# Core queries
# ---------------------------------------------------------------------------


def allowed_next_statuses(current: OnboardingStatus) -> frozenset[OnboardingStatus]:
    """Statuses directly reachable from ``current``. Empty for terminal statuses."""
    return OnboardingStatus.valid_transitions().get(OnboardingStatus(current), frozenset())


def is_valid_transition(current: OnboardingStatus, target: OnboardingStatus) -> bool:
    return OnboardingStatus(target) in allowed_next_statuses(current)


def allowed_statuses_for_plan(plan: PlanType | str | None) -> tuple[OnboardingStatus, ...]:
    """Ordered statuses a job on ``plan`` may occupy.

    Unrecognised or missing plans resolve to the minimal (default) set.
    """
    return PLAN_STATUSES[PlanType.normalize(plan)]


def visible_columns_for_user(
    role: UserRole,
    sub_role: OnboardingSubRole | None = None,
) -> tuple[OnboardingStatus, ...]:
    """Board columns shown to a user. An empty tuple means access denied."""
    if role in FULL_BOARD_ROLES:
        return ALL_STATUSES
    if role == UserRole.ONBOARDING_TEAM and sub_role is not None:
        return _SUB_ROLE_COLUMNS.get(sub_role, ())
    return ()


def can_user_move_directly(role: UserRole) -> bool:
    return role in DIRECT_MOVE_ROLES


def can_approve_moves(role: UserRole) -> bool:
    return role in APPROVER_ROLES


def is_linkedin_pickup(
    current: OnboardingStatus,
    target: OnboardingStatus,
    linkedin_phase_started: bool,
) -> bool:
    """A resume_approved job shown in the LinkedIn column being claimed."""
    return (
        linkedin_phase_started
        and current == S.RESUME_APPROVED
        and target == S.LINKEDIN_IN_PROGRESS
    )


def shows_in_linkedin_column(status: OnboardingStatus, plan, linkedin_phase_started: bool) -> bool:
    """Whether a job is forked into the linkedin_in_progress column view."""
    return (
        linkedin_phase_started
        and status == S.RESUME_APPROVED
        and S.LINKEDIN_IN_PROGRESS in allowed_statuses_for_plan(plan)
    )


# ---------------------------------------------------------------------------
# Move evaluation
# ---------------------------------------------------------------------------


class MoveOutcome(str, enum.Enum):
    NOOP = "noop"
    APPLY = "apply"
    REQUEST = "request"
    REJECT = "reject"


class RejectReason(str, enum.Enum):
    PLAN_MISMATCH = "plan_mismatch"
    PERMISSION_DENIED = "permission_denied"
    INVALID_TRANSITION = "invalid_transition"


@dataclass(frozen=True)
class MoveDecision:
    """Result of evaluating a requested status move."""

    outcome: MoveOutcome
    reason: RejectReason | None = None
    message: str = ""
    permitted: tuple[OnboardingStatus, ...] = ()

    @property
    def allowed(self) -> bool:
        return self.outcome in (MoveOutcome.APPLY, MoveOutcome.REQUEST)


def _plan_mismatch(plan: PlanType, target: OnboardingStatus) -> MoveDecision:
    allowed = PLAN_STATUSES[plan]
    return MoveDecision(
        outcome=MoveOutcome.REJECT,
        reason=RejectReason.PLAN_MISMATCH,
        message=(
            f'This plan doesn\'t support moving to "{status_label(target)}". '
            f"{PLAN_LABELS[plan]} only supports: {_labels(allowed)}"
        ),
        permitted=allowed,
    )


def _permission_denied(
    target: OnboardingStatus, permitted: tuple[OnboardingStatus, ...]
) -> MoveDecision:
    allowed_text = _labels(permitted) if permitted else "none"
    return MoveDecision(
        outcome=MoveOutcome.REJECT,
        reason=RejectReason.PERMISSION_DENIED,
        message=(
            f'You don\'t have permission to move to "{status_label(target)}". '
            f"Your role only allows: {allowed_text}"
        ),
        permitted=permitted,
    )


def _invalid_transition(current: OnboardingStatus, target: OnboardingStatus) -> MoveDecision:
    nxt = allowed_next_statuses(current)
    return MoveDecision(
        outcome=MoveOutcome.REJECT,
        reason=RejectReason.INVALID_TRANSITION,
        message=(
            f"Invalid status transition from {status_label(current)} "
            f"to {status_label(target)}"
        ),
        permitted=tuple(s for s in ALL_STATUSES if s in nxt),
    )


def evaluate_move(
    *,
    current: OnboardingStatus,
    target: OnboardingStatus,
    plan: PlanType | str | None,
    role: UserRole,
    sub_role: OnboardingSubRole | None = None,
    linkedin_phase_started: bool = False,
) -> MoveDecision:
    """Decide what happens when a user asks to move a job to ``target``.

    Used by the "move to" menu, the long-press sheet and the API. Direct-move
    roles may jump non-adjacent stages; everyone else files a move request
    for any status on their own board.
    """
    current = OnboardingStatus(current)
    target = OnboardingStatus(target)
    plan_type = PlanType.normalize(plan)

    if target == current:
        return MoveDecision(outcome=MoveOutcome.NOOP)

    if target not in PLAN_STATUSES[plan_type]:
        return _plan_mismatch(plan_type, target)

    if can_user_move_directly(role):
        return MoveDecision(outcome=MoveOutcome.APPLY)

    permitted = visible_columns_for_user(role, sub_role)
    if target not in permitted:
        return _permission_denied(target, permitted)

    if is_linkedin_pickup(current, target, linkedin_phase_started):
        return MoveDecision(outcome=MoveOutcome.APPLY)

    return MoveDecision(outcome=MoveOutcome.REQUEST)


def check_drop(
    *,
    current: OnboardingStatus,
    target: OnboardingStatus,
    plan: PlanType | str | None,
    role: UserRole,
    sub_role: OnboardingSubRole | None = None,
    linkedin_phase_started: bool = False,
) -> MoveDecision:
    """Validate a drag-and-drop onto a column.

    Checks run in order (adjacency, plan, direct-move privilege) and stop at
    the first failure.
    """
    current = OnboardingStatus(current)
    target = OnboardingStatus(target)

    if target == current:
        return MoveDecision(outcome=MoveOutcome.NOOP)

    if not (
        is_valid_transition(current, target)
        or is_linkedin_pickup(current, target, linkedin_phase_started)
    ):
        return _invalid_transition(current, target)

    return evaluate_move(
        current=current,
        target=target,
        plan=plan,
        role=role,
        sub_role=sub_role,
        linkedin_phase_started=linkedin_phase_started,
    )


def move_options(
    *,
    current: OnboardingStatus,
    plan: PlanType | str | None,
    role: UserRole,
    sub_role: OnboardingSubRole | None = None,
) -> tuple[OnboardingStatus, ...]:
    """Statuses offered in the long-press "move to" sheet.

    Visible to the role, permitted by the plan and different from the current
    status. Adjacency is not consulted.
    """
    plan_statuses = allowed_statuses_for_plan(plan)
    return tuple(
        s
        for s in visible_columns_for_user(role, sub_role)
        if s in plan_statuses and s != current
    )


def phase_groups() -> tuple[tuple[str, tuple[OnboardingStatus, ...]], ...]:
    """Board phases in display order, each with its member statuses."""
    return PHASE_GROUPS
