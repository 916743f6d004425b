"""ASGI entrypoint for the photo booth API."""

from photobooth.api.app import create_app
from photobooth.containers import build_container

app = create_app(build_container())
