"""Google Photos Picker API client."""

import logging
from dataclasses import dataclass, field

import httpx

from photo_journal.domain.errors import (
    NotAuthenticated,
    ProviderUnavailable,
    SessionNotFound,
)
from photo_journal.domain.models import GoogleCredentials
from photo_journal.domain.photos import PickerSession, PollingConfig
from photo_journal.services.photo_sessions import PhotoSessionClient

_logger = logging.getLogger(__name__)

PICKER_API_BASE_URL = "https://photospicker.googleapis.com/v1"
_PAGE_SIZE = 100


@dataclass
class HttpxPickerClient(PhotoSessionClient):
    """Picker client talking to the live Google Photos Picker API."""

    http_client: httpx.AsyncClient
    base_url: str = PICKER_API_BASE_URL
    default_polling: PollingConfig = field(default_factory=PollingConfig)

    @classmethod
    def create(
        cls,
        base_url: str = PICKER_API_BASE_URL,
        default_polling: PollingConfig | None = None,
    ) -> "HttpxPickerClient":
        """Create a picker client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            base_url=base_url,
            default_polling=default_polling or PollingConfig(),
        )

    async def create_session(
        self, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Create a picker session via POST /sessions."""
        response = await self._request("POST", "/sessions", credentials, json={})
        return _parse_session(response.json(), self.default_polling)

    async def poll_session(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Fetch session state via GET /sessions/{id}."""
        response = await self._request(
            "GET", f"/sessions/{session_id}", credentials, session_id=session_id
        )
        return _parse_session(response.json(), self.default_polling)

    async def list_media_items(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> list[dict[str, object]]:
        """List picked media items, following pagination to the end."""
        items: list[dict[str, object]] = []
        page_token: str | None = None
        while True:
            params: dict[str, object] = {"sessionId": session_id, "pageSize": _PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            response = await self._request(
                "GET",
                "/mediaItems",
                credentials,
                session_id=session_id,
                params=params,
            )
            payload = response.json()
            items.extend(payload.get("mediaItems") or [])
            page_token = payload.get("nextPageToken")
            if not page_token:
                return items

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        credentials: GoogleCredentials | None,
        session_id: str | None = None,
        **kwargs: object,
    ) -> httpx.Response:
        if credentials is None or not credentials.is_valid():
            raise NotAuthenticated("No valid Google access token available")
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                headers={"Authorization": f"Bearer {credentials.access_token}"},
                timeout=10,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"Picker API unreachable: {exc}") from exc
        if response.status_code in {401, 403}:
            raise NotAuthenticated(
                f"Picker API rejected credentials: {response.status_code}"
            )
        if response.status_code == 404 and session_id is not None:
            raise SessionNotFound(f"Picker session not found: {session_id}")
        if response.is_error:
            _logger.warning(
                "Picker API error: method=%s path=%s status=%s",
                method,
                path,
                response.status_code,
            )
            raise ProviderUnavailable(
                f"Picker API error: {response.status_code} - {response.text}"
            )
        return response


def _parse_session(
    payload: dict[str, object], default_polling: PollingConfig
) -> PickerSession:
    """Parse a Picker API session resource."""
    raw_polling = payload.get("pollingConfig") or {}
    polling = PollingConfig(
        interval_ms=_duration_ms(
            raw_polling.get("pollInterval"), default_polling.interval_ms
        ),
        timeout_ms=_duration_ms(raw_polling.get("timeoutIn"), default_polling.timeout_ms),
    )
    return PickerSession(
        id=str(payload["id"]),
        picker_uri=str(payload.get("pickerUri", "")),
        media_items_set=bool(payload.get("mediaItemsSet", False)),
        polling_config=polling,
    )


def _duration_ms(raw: object, default: int) -> int:
    """Convert a protobuf duration string like '5s' or '1.5s' to milliseconds."""
    if not isinstance(raw, str) or not raw.endswith("s"):
        return default
    try:
        value = int(float(raw[:-1]) * 1000)
    except ValueError:
        return default
    return value if value > 0 else default
