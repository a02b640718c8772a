# This project was developed with assistance from AI tools.
"""Board error taxonomy.

Every failure the board surfaces is a ``BoardError``. None of them are fatal:
the caller shows the message and the store is left as it was before the
failed action.
"""

from portal_db.enums import OnboardingStatus
from portal_db.pipeline import MoveDecision, RejectReason


class BoardError(Exception):
    """Base class for board failures."""

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NetworkError(BoardError):
    """Transport failure or timeout; the request may not have reached the server."""

    default_message = "Network error"


class ApiError(BoardError):
    """Non-2xx response from the backend."""

    def __init__(self, status: int, message: str | None = None):
        self.status = status
        super().__init__(message or f"Request failed with status {status}")


class ValidationError(ApiError):
    """4xx response; ``message`` is the server's ``detail`` verbatim."""


class MoveRejectedError(BoardError):
    """A status move that may not happen, with the statuses still open."""

    reason: RejectReason

    def __init__(
        self,
        message: str,
        permitted: tuple[OnboardingStatus, ...] = (),
        status: int | None = None,
    ):
        self.permitted = tuple(permitted)
        self.status = status
        super().__init__(message)


class PermissionDeniedError(MoveRejectedError):
    reason = RejectReason.PERMISSION_DENIED


class PlanMismatchError(MoveRejectedError):
    reason = RejectReason.PLAN_MISMATCH


class InvalidTransitionError(MoveRejectedError):
    reason = RejectReason.INVALID_TRANSITION


class MoveInProgressError(BoardError):
    default_message = "Another move is still being saved"


_REJECTIONS: dict[RejectReason, type[MoveRejectedError]] = {
    RejectReason.PERMISSION_DENIED: PermissionDeniedError,
    RejectReason.PLAN_MISMATCH: PlanMismatchError,
    RejectReason.INVALID_TRANSITION: InvalidTransitionError,
}


def rejection_error(
    reason: RejectReason | str,
    message: str,
    permitted=(),
    status: int | None = None,
) -> MoveRejectedError:
    """Build the error class matching a rejection reason."""
    error_cls = _REJECTIONS[RejectReason(reason)]
    return error_cls(message, tuple(OnboardingStatus(s) for s in permitted), status)


def error_for_decision(decision: MoveDecision) -> MoveRejectedError:
    """Error raised client-side when a local move check rejects."""
    return rejection_error(decision.reason, decision.message, decision.permitted)
