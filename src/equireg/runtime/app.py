from __future__ import annotations

from fastapi import FastAPI

from ..api import create_api_app
from ..core.config import Settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the API app with a registry built from `settings` (env by default)."""

    if settings is None:
        settings = Settings.from_env()
    return create_api_app(settings.build_registry())
