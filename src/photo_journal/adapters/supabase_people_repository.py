"""Supabase-backed people repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from photo_journal.domain.entries import Person
from photo_journal.services.people import PeopleRepository


@dataclass
class SupabasePeopleRepository(PeopleRepository):
    """Supabase implementation for people persistence."""

    client: Client

    def list_people(self, user_id: str) -> list[Person]:
        """Return people for a user ordered by name."""
        response = (
            self.client.table("people")
            .select("*")
            .eq("user_id", user_id)
            .order("name")
            .execute()
        )
        return [_parse_person(row) for row in response.data or []]

    def create_person(self, user_id: str, payload: dict[str, object]) -> Person:
        """Create a person row and return it."""
        response = (
            self.client.table("people")
            .insert({"user_id": user_id, **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create person")
        return _parse_person(response.data[0])


def _parse_person(row: dict[str, object]) -> Person:
    return Person(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        name=str(row.get("name", "")),
        google_contact_id=row.get("google_contact_id"),
        avatar=row.get("avatar"),
        relationship=row.get("relationship"),
    )
