"""ASGI entrypoint for the nutrition lookup API."""

from nutrition_lookup.api.app import create_app
from nutrition_lookup.containers import build_container

app = create_app(build_container())
