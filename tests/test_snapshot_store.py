from __future__ import annotations

import json
from pathlib import Path

import pytest

from equireg.core.errors import NotAuthorized
from equireg.core.records import EquipmentRecord
from equireg.core.registry import InMemoryRegistry, JsonSnapshotStore, RegistrySnapshot


class _FailingStore:
    def __init__(self) -> None:
        self.fail = False
        self.saved: list[RegistrySnapshot] = []

    def load(self) -> RegistrySnapshot | None:
        return None

    def save(self, snapshot: RegistrySnapshot) -> None:
        if self.fail:
            raise OSError("disk full")
        self.saved.append(snapshot)


def test_state_survives_restart(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    reg = InMemoryRegistry(store=JsonSnapshotStore(path))
    reg.register("alice", "Refrigerator", "CoolMax 5000", "SN1", 1620000000, 1720000000)
    reg.register("alice", "Freezer", "Arctic", "SN2", 1620000000, 1720000000)
    reg.transfer_ownership("alice", 2, "bob")
    reg.update_last_service_date(1, 1630000000)

    restored = InMemoryRegistry(store=JsonSnapshotStore(path))

    assert restored.get_details(1) == reg.get_details(1)
    assert restored.get_details(2) == reg.get_details(2)
    assert restored.get_owner_equipment_count("alice") == 1
    assert restored.get_owner_equipment_count("bob") == 1
    assert restored.revision() == reg.revision()
    # The allocator resumes where it stopped.
    assert restored.register("carol", "Boiler", "B", "SN3", 0, 0) == 3


def test_snapshot_file_layout(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "registry.json"
    reg = InMemoryRegistry(store=JsonSnapshotStore(path))
    reg.register("alice", "Refrigerator", "CoolMax 5000", "SN1", 1620000000, 1720000000)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["version"] == 1
    assert data["nextId"] == 2
    assert data["revision"] == 1
    assert data["ownerCounts"] == {"alice": 1}
    assert data["records"][0]["owner"] == "alice"
    assert set(data["records"][0]) == {
        "id",
        "owner",
        "equipmentType",
        "model",
        "serialNumber",
        "installationDate",
        "warrantyExpiry",
        "lastServiceDate",
    }
    assert data["records"][0]["lastServiceDate"] == 0
    assert not list(path.parent.glob("*.tmp"))


def test_missing_file_starts_empty(tmp_path: Path) -> None:
    reg = InMemoryRegistry(store=JsonSnapshotStore(tmp_path / "absent.json"))
    assert reg.get_details(1) is None
    assert reg.register("alice", "Pump", "P", "SN", 0, 0) == 1


def test_failed_save_applies_nothing() -> None:
    store = _FailingStore()
    reg = InMemoryRegistry(store=store)
    reg.register("alice", "Pump", "P", "SN", 0, 0)
    store.fail = True

    with pytest.raises(OSError):
        reg.register("alice", "Pump", "P2", "SN2", 0, 0)
    with pytest.raises(OSError):
        reg.transfer_ownership("alice", 1, "bob")
    with pytest.raises(OSError):
        reg.update_last_service_date(1, 5)

    assert reg.get_details(2) is None
    assert reg.get_details(1).owner == "alice"  # type: ignore[union-attr]
    assert reg.get_details(1).last_service_date == 0  # type: ignore[union-attr]
    assert reg.get_owner_equipment_count("alice") == 1
    assert reg.get_owner_equipment_count("bob") == 0
    assert reg.revision() == 1

    store.fail = False
    assert reg.register("alice", "Pump", "P2", "SN2", 0, 0) == 2


def test_rejected_calls_do_not_write() -> None:
    store = _FailingStore()
    reg = InMemoryRegistry(store=store)
    reg.register("alice", "Pump", "P", "SN", 0, 0)

    with pytest.raises(NotAuthorized):
        reg.transfer_ownership("bob", 1, "bob")

    assert len(store.saved) == 1


def test_unsupported_snapshot_version(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    path.write_text(json.dumps({"version": 99, "records": []}), encoding="utf-8")

    with pytest.raises(ValueError):
        InMemoryRegistry(store=JsonSnapshotStore(path))


def test_snapshot_rejects_next_id_that_would_reuse_ids() -> None:
    record = {
        "id": 3,
        "owner": "alice",
        "equipmentType": "Pump",
        "model": "P",
        "serialNumber": "SN",
        "installationDate": 0,
        "warrantyExpiry": 0,
    }
    with pytest.raises(ValueError):
        RegistrySnapshot.from_dict({"version": 1, "nextId": 2, "records": [record]})


def _pump(eid: int, owner: str) -> dict:
    return {
        "id": eid,
        "owner": owner,
        "equipmentType": "Pump",
        "model": "P",
        "serialNumber": f"SN{eid}",
        "installationDate": 0,
        "warrantyExpiry": 0,
        "lastServiceDate": 0,
    }


def test_snapshot_rejects_owner_counts_that_disagree_with_records(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    data = {
        "version": 1,
        "nextId": 3,
        "records": [_pump(1, "alice"), _pump(2, "bob")],
        "ownerCounts": {"alice": 5, "bob": 1},
    }
    path.write_text(json.dumps(data), encoding="utf-8")

    with pytest.raises(ValueError):
        InMemoryRegistry(store=JsonSnapshotStore(path))


def test_snapshot_accepts_zero_count_entries(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    data = {
        "version": 1,
        "nextId": 2,
        "records": [_pump(1, "bob")],
        "ownerCounts": {"alice": 0, "bob": 1},
    }
    path.write_text(json.dumps(data), encoding="utf-8")

    reg = InMemoryRegistry(store=JsonSnapshotStore(path))

    assert reg.get_owner_equipment_count("alice") == 0
    assert reg.get_owner_equipment_count("bob") == 1


def test_owner_index_is_rebuilt_from_loaded_records() -> None:
    class _Store:
        def load(self) -> RegistrySnapshot | None:
            records = {i: EquipmentRecord.from_dict(_pump(i, "alice")) for i in (1, 2)}
            return RegistrySnapshot(records=records, owner_counts={"alice": 7, "carol": 3}, next_id=3, revision=2)

        def save(self, snapshot: RegistrySnapshot) -> None:
            pass

    reg = InMemoryRegistry(store=_Store())

    assert reg.get_owner_equipment_count("alice") == 2
    assert reg.get_owner_equipment_count("carol") == 0
    reg.transfer_ownership("alice", 1, "carol")
    assert reg.get_owner_equipment_count("alice") == 1
    assert reg.get_owner_equipment_count("carol") == 1
