from __future__ import annotations

import json
import logging
import os
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Protocol

from ..records import EquipmentRecord

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT_VERSION = 1


@dataclass(frozen=True)
class RegistrySnapshot:
    """Full registry state at one committed point."""

    records: dict[int, EquipmentRecord] = field(default_factory=dict)
    owner_counts: dict[str, int] = field(default_factory=dict)
    next_id: int = 1
    revision: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_FORMAT_VERSION,
            "nextId": int(self.next_id),
            "revision": int(self.revision),
            "records": [self.records[k].to_dict() for k in sorted(self.records)],
            "ownerCounts": dict(sorted(self.owner_counts.items())),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegistrySnapshot":
        version = int(data.get("version", SNAPSHOT_FORMAT_VERSION))
        if version != SNAPSHOT_FORMAT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version}")
        records = {}
        for item in data.get("records", []):
            rec = EquipmentRecord.from_dict(item)
            records[rec.id] = rec
        owner_counts = {str(k): int(v) for k, v in dict(data.get("ownerCounts", {})).items()}
        next_id = int(data.get("nextId", 1))
        if records and next_id <= max(records):
            raise ValueError(f"nextId {next_id} would reuse an existing equipment id")
        expected = count_owners(records.values())
        stored = {k: v for k, v in owner_counts.items() if v != 0}
        if stored != expected:
            raise ValueError("ownerCounts do not match the owners of the stored records")
        return cls(
            records=records,
            owner_counts=owner_counts,
            next_id=next_id,
            revision=int(data.get("revision", 0)),
        )


def count_owners(records: Iterable[EquipmentRecord]) -> dict[str, int]:
    return dict(Counter(rec.owner for rec in records))


class RecordStore(Protocol):
    """Durable backing for the registry state."""

    def load(self) -> RegistrySnapshot | None: ...

    def save(self, snapshot: RegistrySnapshot) -> None: ...


class JsonSnapshotStore:
    """Persist the whole registry as one JSON document.

    Each save writes a temp file next to the target and swaps it in with
    `os.replace`, so readers of the file see either the old or the new state.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> RegistrySnapshot | None:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        snap = RegistrySnapshot.from_dict(data)
        logger.info("Loaded %d equipment records from %s", len(snap.records), self.path)
        return snap

    def save(self, snapshot: RegistrySnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            delete=False,
            dir=str(self.path.parent),
            prefix="." + self.path.name + ".",
            suffix=".tmp",
        ) as handle:
            temp_path = Path(handle.name)
            try:
                json.dump(snapshot.to_dict(), handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            except BaseException:
                handle.close()
                temp_path.unlink(missing_ok=True)
                raise
        os.replace(temp_path, self.path)
        logger.debug("Wrote registry snapshot revision %d to %s", snapshot.revision, self.path)
