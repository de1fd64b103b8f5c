"""User-related business logic."""

from dataclasses import dataclass
from typing import Protocol

from photo_journal.domain.models import GoogleCredentials, UserRecord

DEFAULT_USERNAME = "Demo User"
DEFAULT_AVATAR = "https://api.dicebear.com/7.x/avataaars/svg?seed=demo"


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_user(self, user_id: str) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def create_user(
        self, user_id: str, username: str, profile_image: str | None
    ) -> UserRecord:
        """Create and return a new user record."""

    def update_tokens(
        self, user_id: str, credentials: GoogleCredentials
    ) -> UserRecord:
        """Store Google tokens for a user and return the updated record."""


@dataclass
class UserService:
    """Application service for user lifecycle and credentials."""

    repository: UserRepository

    def ensure_user(self, user_id: str) -> UserRecord:
        """Return the user, creating a demo profile when it does not exist."""
        existing = self.repository.get_user(user_id)
        if existing:
            return existing
        return self.repository.create_user(
            user_id, username=DEFAULT_USERNAME, profile_image=DEFAULT_AVATAR
        )

    def get_credentials(self, user_id: str) -> GoogleCredentials | None:
        """Return the user's Google credential, if one has been stored."""
        user = self.repository.get_user(user_id)
        if user is None or not user.google_access_token:
            return None
        return GoogleCredentials(
            access_token=user.google_access_token,
            refresh_token=user.google_refresh_token,
            expires_at=user.google_token_expires_at,
        )

    def store_credentials(
        self, user_id: str, credentials: GoogleCredentials
    ) -> UserRecord:
        """Persist a credential handed over by the external OAuth flow."""
        self.ensure_user(user_id)
        return self.repository.update_tokens(user_id, credentials)
