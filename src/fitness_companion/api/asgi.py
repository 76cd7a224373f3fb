"""ASGI entrypoint for the fitness companion API."""

from fitness_companion.api.app import create_app
from fitness_companion.containers import build_container

app = create_app(build_container())
