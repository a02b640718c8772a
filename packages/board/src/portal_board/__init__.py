# This project was developed with assistance from AI tools.
"""Kanban board client for the onboarding portal.

Holds the in-memory board state, talks to the REST backend over httpx and
applies mutations optimistically with rollback on failure.
"""

__version__ = "0.1.0"

from .board import OnboardingBoard
from .client import BoardClient
from .config import BoardSettings, board_settings
from .errors import (
    ApiError,
    BoardError,
    InvalidTransitionError,
    MoveInProgressError,
    NetworkError,
    PermissionDeniedError,
    PlanMismatchError,
    ValidationError,
)
from .store import BoardStore

__all__ = [
    "__version__",
    "ApiError",
    "BoardClient",
    "BoardError",
    "BoardSettings",
    "BoardStore",
    "InvalidTransitionError",
    "MoveInProgressError",
    "NetworkError",
    "OnboardingBoard",
    "PermissionDeniedError",
    "PlanMismatchError",
    "ValidationError",
    "board_settings",
]
