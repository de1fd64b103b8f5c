"""Domain models for journal users and their Google credentials."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class GoogleCredentials:
    """OAuth credential obtained by the external Google sign-in flow."""

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def is_valid(self, now: datetime | None = None) -> bool:
        """Return true when the access token is present and not expired."""
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return _as_utc(now or datetime.now(tz=UTC)) < _as_utc(self.expires_at)


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: str
    username: str
    profile_image: str | None = None
    google_id: str | None = None
    google_access_token: str | None = None
    google_refresh_token: str | None = None
    google_token_expires_at: datetime | None = None
    updated_at: datetime | None = None


def _as_utc(value: datetime) -> datetime:
    """Timestamps without a timezone are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
