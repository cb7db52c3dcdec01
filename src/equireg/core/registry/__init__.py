from __future__ import annotations

from .service import InMemoryRegistry
from .snapshot import JsonSnapshotStore, RecordStore, RegistrySnapshot

__all__ = ["InMemoryRegistry", "JsonSnapshotStore", "RecordStore", "RegistrySnapshot"]
