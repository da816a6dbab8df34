"""Persisted login session schema."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Session(BaseModel):
    """Login session written by ``terminus auth login``.

    Attributes:
        session: Session token sent with every API request.
        user_uuid: Id of the logged-in user.
        expires_at: Expiry in epoch seconds (0 when unknown).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    session: SecretStr
    user_uuid: str = Field(..., min_length=1)
    expires_at: int = 0

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True if the session has a known expiry in the past."""
        if not self.expires_at:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now.timestamp()
