"""Services for people mentioned in journal entries."""

from dataclasses import dataclass
from typing import Protocol

from photo_journal.domain.entries import Person


class PeopleRepository(Protocol):
    """Persistence interface for people."""

    def list_people(self, user_id: str) -> list[Person]:
        """Return people for a user."""

    def create_person(self, user_id: str, payload: dict[str, object]) -> Person:
        """Create a person and return it."""


@dataclass
class PeopleService:
    """Application service for people."""

    repository: PeopleRepository

    def list_people(self, user_id: str) -> list[Person]:
        """Return people ordered by name."""
        return sorted(
            self.repository.list_people(user_id), key=lambda person: person.name.lower()
        )

    def create_person(self, user_id: str, payload: dict[str, object]) -> Person:
        """Create a person with a trimmed name."""
        cleaned = dict(payload)
        cleaned["name"] = str(cleaned.get("name", "")).strip()
        return self.repository.create_person(user_id, cleaned)
