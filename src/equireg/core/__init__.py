from __future__ import annotations

from .config import Settings
from .errors import NotAuthorized, NotFound, RegistryError
from .records import EquipmentDetails, EquipmentRecord
from .registry import InMemoryRegistry, JsonSnapshotStore, RecordStore, RegistrySnapshot

__all__ = [
    "Settings",
    "RegistryError",
    "NotFound",
    "NotAuthorized",
    "EquipmentRecord",
    "EquipmentDetails",
    "InMemoryRegistry",
    "JsonSnapshotStore",
    "RecordStore",
    "RegistrySnapshot",
]
