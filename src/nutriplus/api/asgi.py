"""ASGI entrypoint for the NutriPlus API."""

from nutriplus.api.app import create_app
from nutriplus.containers import build_container

app = create_app(build_container())
