from __future__ import annotations

from fastapi import FastAPI

from ..core.registry import InMemoryRegistry
from .routes import mount_equipment_api


def create_api_app(registry: InMemoryRegistry | None = None) -> FastAPI:
    """Build the HTTP API around one registry instance.

    The registry is reachable as `app.state.registry`; a fresh in-memory one is
    created when none is given.
    """

    if registry is None:
        registry = InMemoryRegistry()

    app = FastAPI(title="equireg", version="0.1.0")
    app.state.registry = registry

    mount_equipment_api(app, registry)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/events")
    def events() -> dict[str, int]:
        # Minimal polling endpoint.
        return {"revision": registry.revision(), "recordCount": registry.record_count()}

    return app
