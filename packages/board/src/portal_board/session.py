# This project was developed with assistance from AI tools.
"""Persisted sign-in state for the board client."""

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .config import board_settings
from .models import BoardUser

logger = logging.getLogger(__name__)


class OtpTrust(BaseModel):
    """Remembers that an admin passed the one-time-password check."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    trust_token: str = Field(alias="trustToken")
    verified_at: datetime = Field(alias="verifiedAt")

    def is_valid(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return now - self.verified_at < timedelta(days=board_settings.OTP_TRUST_DAYS)


class SessionState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: BoardUser | None = None
    auth_token: str | None = Field(default=None, alias="authToken")
    admin_otp_trust: OtpTrust | None = Field(default=None, alias="adminOtpTrust")

    def trusted_otp(self, email: str, now: datetime | None = None) -> OtpTrust | None:
        """The stored OTP trust for ``email`` if it has not expired."""
        trust = self.admin_otp_trust
        if trust is None or trust.email.lower() != email.lower():
            return None
        return trust if trust.is_valid(now) else None


def load_session(path: Path | None = None) -> SessionState:
    """Read the session file; a missing file is an empty session."""
    path = path or board_settings.SESSION_FILE
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return SessionState()
    return SessionState.model_validate_json(raw)


def save_session(state: SessionState, path: Path | None = None) -> None:
    path = path or board_settings.SESSION_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(by_alias=True, exclude_none=True), encoding="utf-8")
    logger.debug("Saved session to %s", path)


def clear_session(path: Path | None = None) -> None:
    path = path or board_settings.SESSION_FILE
    path.unlink(missing_ok=True)
