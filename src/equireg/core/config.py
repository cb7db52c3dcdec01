from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from .registry import InMemoryRegistry, JsonSnapshotStore

LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for a registry server.

    Values come from `EQUIREG_*` environment variables; CLI flags override them.
    Leaving `data_file` unset keeps the registry purely in memory.
    """

    host: str = "127.0.0.1"
    port: int = 8000
    data_file: Path | None = None
    log_level: str = "info"

    @classmethod
    def from_env(cls) -> "Settings":
        port_raw = os.getenv("EQUIREG_PORT", "8000").strip()
        try:
            port = int(port_raw)
        except ValueError as ex:
            raise ValueError(f"Invalid EQUIREG_PORT: {port_raw!r}") from ex

        data_file_raw = os.getenv("EQUIREG_DATA_FILE", "").strip()

        return cls(
            host=os.getenv("EQUIREG_HOST", "127.0.0.1").strip() or "127.0.0.1",
            port=port,
            data_file=Path(data_file_raw) if data_file_raw else None,
            log_level=_normalize_log_level(os.getenv("EQUIREG_LOG_LEVEL", "info")),
        )

    def override(self, **changes: object) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        given = {k: v for k, v in changes.items() if v is not None}
        if "data_file" in given:
            given["data_file"] = Path(str(given["data_file"]))
        if "log_level" in given:
            given["log_level"] = _normalize_log_level(str(given["log_level"]))
        return replace(self, **given)  # type: ignore[arg-type]

    def build_registry(self) -> InMemoryRegistry:
        store = JsonSnapshotStore(self.data_file) if self.data_file is not None else None
        return InMemoryRegistry(store=store)


def _normalize_log_level(value: str) -> str:
    level = str(value).strip().lower()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unsupported log level: {value!r}. Use one of {', '.join(LOG_LEVELS)}.")
    return level
