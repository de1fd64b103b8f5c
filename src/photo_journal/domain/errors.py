"""Errors raised by photo provider integrations."""


class PhotoProviderError(Exception):
    """Base error for photo provider failures."""


class NotAuthenticated(PhotoProviderError):
    """No usable Google credential is available for the request."""


class ProviderUnavailable(PhotoProviderError):
    """The provider could not be reached or answered with a failure status."""


class SessionNotFound(PhotoProviderError):
    """The provider does not know the picker session (unknown or expired)."""


class FetchFailed(PhotoProviderError):
    """Selected media items could not be fetched for a completed session."""


class PickerAlreadyWatched(Exception):
    """A poller is already attached to the picker session."""
