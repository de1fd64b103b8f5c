"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from photo_journal.domain.models import GoogleCredentials, UserRecord
from photo_journal.services.users import UserRepository

_USER_COLUMNS = (
    "id, username, profile_image, google_id, google_access_token, "
    "google_refresh_token, google_token_expires_at, updated_at"
)


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_user(self, user_id: str) -> UserRecord | None:
        """Return the user with the given id, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def create_user(
        self, user_id: str, username: str, profile_image: str | None
    ) -> UserRecord:
        """Create a new user row and return it."""
        response = (
            self.client.table("users")
            .insert(
                {
                    "id": user_id,
                    "username": username,
                    "profile_image": profile_image,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def update_tokens(
        self, user_id: str, credentials: GoogleCredentials
    ) -> UserRecord:
        """Store Google tokens on the user row."""
        expires_at = credentials.expires_at
        response = (
            self.client.table("users")
            .update(
                {
                    "google_access_token": credentials.access_token,
                    "google_refresh_token": credentials.refresh_token,
                    "google_token_expires_at": (
                        expires_at.isoformat() if expires_at else None
                    ),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", user_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update user tokens")
        return _parse_user(response.data[0])


def _parse_user(row: dict[str, object]) -> UserRecord:
    """Parse a users row into a domain model."""
    return UserRecord(
        id=str(row["id"]),
        username=str(row.get("username", "")),
        profile_image=row.get("profile_image"),
        google_id=row.get("google_id"),
        google_access_token=row.get("google_access_token"),
        google_refresh_token=row.get("google_refresh_token"),
        google_token_expires_at=_parse_datetime(row.get("google_token_expires_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        parsed = datetime.fromisoformat(raw)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed
    return None
