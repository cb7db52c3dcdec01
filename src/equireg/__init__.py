from __future__ import annotations

from .core.errors import NotAuthorized, NotFound, RegistryError
from .core.records import EquipmentRecord
from .core.registry import InMemoryRegistry, JsonSnapshotStore
from .runtime.server import RegistryServer, run
from .sdk.client import RegistryClient

__all__ = [
    "run",
    "RegistryServer",
    "RegistryClient",
    "InMemoryRegistry",
    "JsonSnapshotStore",
    "EquipmentRecord",
    "RegistryError",
    "NotFound",
    "NotAuthorized",
]
