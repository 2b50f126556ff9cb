"""ASGI entrypoint for the makeup studio API."""

from makeup_studio.api.app import create_app
from makeup_studio.containers import build_container

app = create_app(build_container())
