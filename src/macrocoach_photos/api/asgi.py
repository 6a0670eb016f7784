"""ASGI entrypoint for the photo storage API."""

from macrocoach_photos.api.app import create_app
from macrocoach_photos.containers import build_container

app = create_app(build_container())
