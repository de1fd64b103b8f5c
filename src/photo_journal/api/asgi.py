"""ASGI entrypoint for the photo journal API."""

from photo_journal.api.app import create_app
from photo_journal.containers import build_container

app = create_app(build_container())
