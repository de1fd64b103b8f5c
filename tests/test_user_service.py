"""Tests for user and people services."""

from datetime import UTC, datetime
from uuid import uuid4

from photo_journal.domain.entries import Person
from photo_journal.domain.models import GoogleCredentials
from photo_journal.services.people import PeopleService
from photo_journal.services.users import DEFAULT_USERNAME, UserService
from tests.conftest import InMemoryPeopleRepository, InMemoryUserRepository


def test_ensure_user_creates_demo_profile() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    user = service.ensure_user("user-1")

    assert user.username == DEFAULT_USERNAME
    assert user.profile_image is not None
    assert service.ensure_user("user-1") is user


def test_credentials_roundtrip_through_user_record() -> None:
    service = UserService(InMemoryUserRepository())
    expires_at = datetime(2030, 1, 1, tzinfo=UTC)

    assert service.get_credentials("user-1") is None
    service.store_credentials(
        "user-1",
        GoogleCredentials(
            access_token="access", refresh_token="refresh", expires_at=expires_at
        ),
    )
    credentials = service.get_credentials("user-1")

    assert credentials == GoogleCredentials(
        access_token="access", refresh_token="refresh", expires_at=expires_at
    )


def test_credentials_validity() -> None:
    now = datetime(2024, 8, 24, tzinfo=UTC)

    assert GoogleCredentials(access_token="a").is_valid(now) is True
    assert GoogleCredentials(access_token="").is_valid(now) is False
    assert (
        GoogleCredentials(access_token="a", expires_at=now).is_valid(now) is False
    )


def test_credentials_without_timezone_are_read_as_utc() -> None:
    now = datetime(2024, 8, 24, tzinfo=UTC)

    assert GoogleCredentials("a", expires_at=datetime(2030, 1, 1)).is_valid(now)
    assert not GoogleCredentials("a", expires_at=datetime(2024, 8, 1)).is_valid(now)
    assert GoogleCredentials(
        "a", expires_at=datetime(2030, 1, 1, tzinfo=UTC)
    ).is_valid(datetime(2024, 8, 24))


def test_people_sorted_and_trimmed() -> None:
    repository = InMemoryPeopleRepository(
        people=[Person(id=uuid4(), user_id="user-1", name="zoe")]
    )
    service = PeopleService(repository)

    created = service.create_person("user-1", {"name": "  Anna  "})
    repository.people.append(Person(id=uuid4(), user_id="user-2", name="Bob"))

    assert created.name == "Anna"
    assert [person.name for person in service.list_people("user-1")] == [
        "Anna",
        "zoe",
    ]
