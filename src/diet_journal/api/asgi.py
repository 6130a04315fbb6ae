"""ASGI entrypoint for the diet journal API."""

from diet_journal.api.app import create_app
from diet_journal.containers import build_container

app = create_app(build_container())
