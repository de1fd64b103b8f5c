"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import UTC, datetime
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response, status

from photo_journal.api.admin import router as admin_router
from photo_journal.api.models import (
    CredentialsPayload,
    EntryCreate,
    EntryUpdate,
    PersonCreate,
)
from photo_journal.app_logging import configure_logging
from photo_journal.config import is_google_oauth_configured
from photo_journal.containers import AppContainer
from photo_journal.domain.entries import JournalEntry
from photo_journal.domain.errors import (
    FetchFailed,
    NotAuthenticated,
    PhotoProviderError,
    PickerAlreadyWatched,
    SessionNotFound,
)
from photo_journal.domain.models import GoogleCredentials, UserRecord
from photo_journal.services.picker import WatchStatus

_PROVIDER_ERROR_STATUS: list[tuple[type[PhotoProviderError], int, str]] = [
    (NotAuthenticated, status.HTTP_401_UNAUTHORIZED, "Google sign-in required"),
    (SessionNotFound, status.HTTP_404_NOT_FOUND, "Picker session not found"),
    (FetchFailed, status.HTTP_502_BAD_GATEWAY, "Failed to fetch selected photos"),
]


def _current_user_id(
    request: Request, x_user_id: str | None = Header(default=None)
) -> str:
    """Acting user from ``X-User-Id``, defaulting to the demo user."""
    container: AppContainer = request.app.state.container
    return x_user_id or container.settings.default_user_id


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not is_google_oauth_configured(app.state.container.settings):
            logger.info("Google OAuth not configured, using fixture photo picker")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/oauth-config")
    async def oauth_config(request: Request) -> dict[str, bool]:
        """Report whether real Google OAuth is configured."""
        state_container: AppContainer = request.app.state.container
        return {"is_configured": is_google_oauth_configured(state_container.settings)}

    @app.get("/api/user")
    async def current_user(
        request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Return the acting user."""
        state_container: AppContainer = request.app.state.container
        return _user_json(state_container.user_service.ensure_user(user_id))

    @app.put("/api/user/google-credentials")
    async def store_google_credentials(
        payload: CredentialsPayload,
        request: Request,
        user_id: str = Depends(_current_user_id),
    ) -> dict[str, object]:
        """Store the Google credential produced by the OAuth flow."""
        state_container: AppContainer = request.app.state.container
        user = state_container.user_service.store_credentials(
            user_id,
            GoogleCredentials(
                access_token=payload.access_token,
                refresh_token=payload.refresh_token,
                expires_at=payload.expires_at,
            ),
        )
        return _user_json(user)

    @app.get("/api/journal-entries")
    async def list_entries(
        request: Request,
        start: datetime | None = None,
        end: datetime | None = None,
        user_id: str = Depends(_current_user_id),
    ) -> list[dict[str, object]]:
        """List entries, optionally limited to a date range."""
        state_container: AppContainer = request.app.state.container
        journal = state_container.journal_service
        if start is not None or end is not None:
            entries = journal.list_by_date_range(
                user_id,
                start or datetime.min.replace(tzinfo=UTC),
                end or datetime.max.replace(tzinfo=UTC),
            )
        else:
            entries = journal.list_entries(user_id)
        return [_entry_json(entry) for entry in entries]

    @app.get("/api/journal-entries/search")
    async def search_entries(
        request: Request, q: str = "", user_id: str = Depends(_current_user_id)
    ) -> list[dict[str, object]]:
        """Search entries by title or content."""
        if not q.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Search query required",
            )
        state_container: AppContainer = request.app.state.container
        entries = state_container.journal_service.search(user_id, q.strip())
        return [_entry_json(entry) for entry in entries]

    @app.get("/api/journal-entries/category/{category}")
    async def entries_by_category(
        category: str, request: Request, user_id: str = Depends(_current_user_id)
    ) -> list[dict[str, object]]:
        """List entries in a category."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.journal_service.list_by_category(user_id, category)
        return [_entry_json(entry) for entry in entries]

    @app.get("/api/journal-entries/{entry_id}")
    async def get_entry(
        entry_id: UUID, request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Return a single entry owned by the acting user."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.journal_service.get_entry(user_id, entry_id)
        if entry is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Journal entry not found",
            )
        return _entry_json(entry)

    @app.post("/api/journal-entries", status_code=status.HTTP_201_CREATED)
    async def create_entry(
        payload: EntryCreate,
        request: Request,
        user_id: str = Depends(_current_user_id),
    ) -> dict[str, object]:
        """Create an entry with its photo attachments."""
        state_container: AppContainer = request.app.state.container
        state_container.user_service.ensure_user(user_id)
        entry = state_container.journal_service.create_entry(
            user_id,
            payload.model_dump(exclude={"photos"}),
            photos=[photo.to_attachment() for photo in payload.photos or []],
        )
        return _entry_json(entry)

    @app.put("/api/journal-entries/{entry_id}")
    async def update_entry(
        entry_id: UUID,
        payload: EntryUpdate,
        request: Request,
        user_id: str = Depends(_current_user_id),
    ) -> dict[str, object]:
        """Update an entry; photos are replaced when provided."""
        state_container: AppContainer = request.app.state.container
        photos = (
            [photo.to_attachment() for photo in payload.photos]
            if payload.photos is not None
            else None
        )
        entry = state_container.journal_service.update_entry(
            user_id,
            entry_id,
            payload.model_dump(exclude={"photos"}, exclude_unset=True),
            photos=photos,
        )
        if entry is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Journal entry not found",
            )
        return _entry_json(entry)

    @app.delete(
        "/api/journal-entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT
    )
    async def delete_entry(
        entry_id: UUID, request: Request, user_id: str = Depends(_current_user_id)
    ) -> Response:
        """Delete an entry and its attachments."""
        state_container: AppContainer = request.app.state.container
        if not state_container.journal_service.delete_entry(user_id, entry_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Journal entry not found",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/api/people")
    async def list_people(
        request: Request, user_id: str = Depends(_current_user_id)
    ) -> list[dict[str, object]]:
        """List people for the acting user."""
        state_container: AppContainer = request.app.state.container
        return [
            asdict(person)
            for person in state_container.people_service.list_people(user_id)
        ]

    @app.post("/api/people", status_code=status.HTTP_201_CREATED)
    async def create_person(
        payload: PersonCreate,
        request: Request,
        user_id: str = Depends(_current_user_id),
    ) -> dict[str, object]:
        """Create a person."""
        state_container: AppContainer = request.app.state.container
        person = state_container.people_service.create_person(
            user_id, payload.model_dump()
        )
        return asdict(person)

    @app.post("/api/photos/picker/session")
    async def create_picker_session(
        request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Create a picker session for the acting user."""
        state_container: AppContainer = request.app.state.container
        credentials = state_container.user_service.get_credentials(user_id)
        try:
            session = await state_container.picker_service.start(credentials)
        except PhotoProviderError as exc:
            raise _provider_http_error(logger, exc, "create picker session") from exc
        return asdict(session)

    @app.get("/api/photos/picker/session/{session_id}")
    async def poll_picker_session(
        session_id: str, request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Poll a picker session once."""
        state_container: AppContainer = request.app.state.container
        credentials = state_container.user_service.get_credentials(user_id)
        try:
            session = await state_container.picker_service.poll(
                session_id, credentials
            )
        except PhotoProviderError as exc:
            raise _provider_http_error(logger, exc, "poll picker session") from exc
        return asdict(session)

    @app.get("/api/photos/picker/session/{session_id}/photos")
    async def picker_session_photos(
        session_id: str, request: Request, user_id: str = Depends(_current_user_id)
    ) -> list[dict[str, object]]:
        """Return the photos selected in a completed session."""
        state_container: AppContainer = request.app.state.container
        credentials = state_container.user_service.get_credentials(user_id)
        try:
            photos = await state_container.picker_service.fetch_selected(
                session_id, credentials
            )
        except PhotoProviderError as exc:
            raise _provider_http_error(logger, exc, "list picker photos") from exc
        return [asdict(photo) for photo in photos]

    @app.post(
        "/api/photos/picker/session/{session_id}/watch",
        status_code=status.HTTP_202_ACCEPTED,
    )
    async def watch_picker_session(
        session_id: str, request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Start polling a session on the server until it reaches a final state."""
        state_container: AppContainer = request.app.state.container
        credentials = state_container.user_service.get_credentials(user_id)
        try:
            session = await state_container.picker_service.poll(
                session_id, credentials
            )
        except PhotoProviderError as exc:
            raise _provider_http_error(logger, exc, "watch picker session") from exc
        try:
            watch = state_container.picker_watches.watch(session, credentials, user_id)
        except PickerAlreadyWatched as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return asdict(watch)

    @app.get("/api/photos/picker/session/{session_id}/watch")
    async def picker_watch_status(
        session_id: str, request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Return the state of a server-side poller."""
        state_container: AppContainer = request.app.state.container
        watch = state_container.picker_watches.status(session_id)
        return asdict(_owned_watch(watch, user_id))

    @app.delete("/api/photos/picker/session/{session_id}/watch")
    async def cancel_picker_watch(
        session_id: str, request: Request, user_id: str = Depends(_current_user_id)
    ) -> dict[str, object]:
        """Cancel a server-side poller, e.g. when the picker dialog closes."""
        state_container: AppContainer = request.app.state.container
        watches = state_container.picker_watches
        _owned_watch(watches.status(session_id), user_id)
        return asdict(_owned_watch(watches.cancel(session_id), user_id))

    return app


def _provider_http_error(
    logger: logging.Logger, exc: PhotoProviderError, action: str
) -> HTTPException:
    """Map a provider error to an HTTP error, logging unexpected failures."""
    for error_type, status_code, detail in _PROVIDER_ERROR_STATUS:
        if isinstance(exc, error_type):
            logger.warning("Failed to %s: %s", action, exc)
            return HTTPException(status_code=status_code, detail=detail)
    logger.exception("Failed to %s", action, extra={"error": str(exc)})
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Photo provider unavailable",
    )


def _owned_watch(watch: WatchStatus | None, user_id: str) -> WatchStatus:
    if watch is None or watch.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No picker watch found"
        )
    return watch


def _user_json(user: UserRecord) -> dict[str, object]:
    """Public view of a user; tokens are never returned."""
    return {
        "id": user.id,
        "username": user.username,
        "profile_image": user.profile_image,
        "google_connected": bool(user.google_access_token),
    }


def _entry_json(entry: JournalEntry) -> dict[str, object]:
    data = asdict(entry)
    data["people"] = [{"name": name} for name in entry.people]
    return data
