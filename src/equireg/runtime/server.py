from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

import uvicorn

from ..api import create_api_app
from ..core.config import Settings
from ..core.registry import InMemoryRegistry
from ..sdk.client import RegistryClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryServer:
    host: str
    port: int
    url: str
    registry: InMemoryRegistry = field(repr=False)
    _server: uvicorn.Server | None = field(default=None, repr=False, compare=False)
    _thread: threading.Thread | None = field(default=None, repr=False, compare=False)

    def client(self, caller: str | None = None) -> RegistryClient:
        """Return an HTTP client for this server acting as `caller`."""
        return RegistryClient(self.url, caller=caller)

    def stop(self, *, timeout_s: float = 5.0) -> None:
        if self._server is None:
            return
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout_s)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def run(
    *,
    host: str | None = None,
    port: int | None = None,
    data_file: str | Path | None = None,
    log_level: str | None = None,
    access_log: bool = False,
    startup_timeout_s: float = 10.0,
) -> RegistryServer:
    """Start an equipment registry server in a background thread.

    Unset arguments fall back to the `EQUIREG_*` environment settings.
    `port=0` picks a free port. Returns once the server accepts requests.
    """

    settings = Settings.from_env().override(host=host, port=port, data_file=data_file, log_level=log_level)

    bind_port = settings.port
    if bind_port == 0:
        bind_port = _find_free_port(settings.host)

    registry = settings.build_registry()
    app = create_api_app(registry)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=bind_port,
        log_level=settings.log_level,
        access_log=access_log,
    )
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    deadline = time.monotonic() + startup_timeout_s
    while not server.started:
        if not thread.is_alive():
            raise RuntimeError(f"equireg server failed to start on {settings.host}:{bind_port}")
        if time.monotonic() > deadline:
            server.should_exit = True
            raise RuntimeError(f"equireg server did not start within {startup_timeout_s}s")
        time.sleep(0.01)

    url = f"http://{settings.host}:{bind_port}"
    logger.info("equireg serving at %s (data file: %s)", url, settings.data_file or "in-memory")
    return RegistryServer(host=settings.host, port=bind_port, url=url, registry=registry, _server=server, _thread=thread)
