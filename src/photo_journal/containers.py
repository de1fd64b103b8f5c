"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photo_journal.adapters.fixture_picker_client import FixturePickerClient
from photo_journal.adapters.google_picker_client import HttpxPickerClient
from photo_journal.adapters.supabase_journal_repository import (
    SupabaseJournalEntryRepository,
    SupabaseJournalPhotoRepository,
)
from photo_journal.adapters.supabase_people_repository import (
    SupabasePeopleRepository,
)
from photo_journal.adapters.supabase_user_repository import SupabaseUserRepository
from photo_journal.config import Settings, is_google_oauth_configured
from photo_journal.domain.photos import PollingConfig
from photo_journal.services.entries import JournalEntryService
from photo_journal.services.people import PeopleService
from photo_journal.services.photo_fetch import PhotoFetchService
from photo_journal.services.photo_sessions import PhotoSessionClient
from photo_journal.services.picker import PhotoPickerService, PickerWatchRegistry
from photo_journal.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_session_client: PhotoSessionClient
    picker_service: PhotoPickerService
    picker_watches: PickerWatchRegistry
    user_service: UserService
    journal_service: JournalEntryService
    people_service: PeopleService
    close_resources: Callable[[], Awaitable[None]]


def build_photo_session_client(settings: Settings) -> PhotoSessionClient:
    """Pick the live Picker API client or the fixture client, once."""
    polling = PollingConfig(
        interval_ms=settings.picker_poll_interval_ms,
        timeout_ms=settings.picker_timeout_ms,
    )
    if is_google_oauth_configured(settings):
        return HttpxPickerClient.create(
            base_url=settings.google_picker_base_url, default_polling=polling
        )
    return FixturePickerClient(
        polling_config=polling,
        finalize_after_polls=settings.fixture_finalize_after_polls,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_service = UserService(SupabaseUserRepository(supabase_client))
    journal_service = JournalEntryService(
        entry_repository=SupabaseJournalEntryRepository(supabase_client),
        photo_repository=SupabaseJournalPhotoRepository(supabase_client),
    )
    people_service = PeopleService(SupabasePeopleRepository(supabase_client))
    photo_session_client = build_photo_session_client(resolved_settings)
    picker_service = PhotoPickerService(
        client=photo_session_client,
        fetch_service=PhotoFetchService(photo_session_client),
    )
    picker_watches = PickerWatchRegistry(picker_service)

    async def close_resources() -> None:
        await picker_watches.close()
        await photo_session_client.close()

    return AppContainer(
        settings=resolved_settings,
        photo_session_client=photo_session_client,
        picker_service=picker_service,
        picker_watches=picker_watches,
        user_service=user_service,
        journal_service=journal_service,
        people_service=people_service,
        close_resources=close_resources,
    )
