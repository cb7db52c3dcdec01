from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Iterable

from ..errors import NotAuthorized, NotFound
from ..records import EquipmentDetails, EquipmentRecord
from .snapshot import RecordStore, RegistrySnapshot, count_owners

logger = logging.getLogger(__name__)


def _as_text(value: Any, *, field: str) -> str:
    if value is None:
        raise ValueError(f"Missing {field}")
    if not isinstance(value, str):
        raise ValueError(f"Invalid {field}")
    return value


def _as_timestamp(value: Any, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}")
    try:
        return int(value)
    except (TypeError, ValueError) as ex:
        raise ValueError(f"Invalid {field}") from ex


def _as_details(
    equipment_type: Any,
    model: Any,
    serial_number: Any,
    installation_date: Any,
    warranty_expiry: Any,
) -> EquipmentDetails:
    return EquipmentDetails(
        equipment_type=_as_text(equipment_type, field="equipment_type"),
        model=_as_text(model, field="model"),
        serial_number=_as_text(serial_number, field="serial_number"),
        installation_date=_as_timestamp(installation_date, field="installation_date"),
        warranty_expiry=_as_timestamp(warranty_expiry, field="warranty_expiry"),
    )


class InMemoryRegistry:
    """Equipment records, the owner-count index and the id allocator.

    All state lives on the instance. Every mutation runs under one re-entrant
    lock and is committed as a unit: if a configured store fails to persist
    the new state, nothing is applied and the error propagates.
    """

    def __init__(self, store: RecordStore | None = None) -> None:
        self._lock = threading.RLock()
        self._records: dict[int, EquipmentRecord] = {}
        self._owner_counts: dict[str, int] = {}
        self._next_id = 1
        self._revision = 0
        self._store = store

        if store is not None:
            snap = store.load()
            if snap is not None:
                self._records = dict(snap.records)
                # The index is derived data; rebuild it from the records.
                self._owner_counts = count_owners(self._records.values())
                self._next_id = int(snap.next_id)
                self._revision = int(snap.revision)

    def _require_record_locked(self, equipment_id: int) -> EquipmentRecord:
        rec = self._records.get(int(equipment_id))
        if rec is None:
            logger.warning("Rejected call on unknown equipment %s", equipment_id)
            raise NotFound(equipment_id)
        return rec

    def _require_owner_locked(self, equipment_id: int, caller: str) -> EquipmentRecord:
        rec = self._require_record_locked(equipment_id)
        if rec.owner != caller:
            logger.warning("Rejected %s acting on equipment %s owned by %s", caller, rec.id, rec.owner)
            raise NotAuthorized(rec.id, caller)
        return rec

    def _commit_locked(
        self,
        record: EquipmentRecord,
        *,
        owner_deltas: Iterable[tuple[str, int]] = (),
        next_id: int | None = None,
    ) -> None:
        staged_counts: dict[str, int] = {}
        for owner, delta in owner_deltas:
            base = staged_counts.get(owner, self._owner_counts.get(owner, 0))
            staged_counts[owner] = base + delta
        new_next_id = self._next_id if next_id is None else int(next_id)
        new_revision = self._revision + 1

        # Persist first so a failed save leaves memory untouched.
        if self._store is not None:
            self._store.save(
                RegistrySnapshot(
                    records={**self._records, record.id: record},
                    owner_counts={**self._owner_counts, **staged_counts},
                    next_id=new_next_id,
                    revision=new_revision,
                )
            )

        self._records[record.id] = record
        self._owner_counts.update(staged_counts)
        self._next_id = new_next_id
        self._revision = new_revision

    def revision(self) -> int:
        with self._lock:
            return int(self._revision)

    def record_count(self) -> int:
        with self._lock:
            return len(self._records)

    def register(
        self,
        caller: str,
        equipment_type: str,
        model: str,
        serial_number: str,
        installation_date: int,
        warranty_expiry: int,
    ) -> int:
        """Register a new item owned by `caller` and return its id."""

        owner = _as_text(caller, field="caller")
        details = _as_details(equipment_type, model, serial_number, installation_date, warranty_expiry)

        with self._lock:
            equipment_id = self._next_id
            rec = EquipmentRecord(
                id=equipment_id,
                owner=owner,
                equipment_type=details.equipment_type,
                model=details.model,
                serial_number=details.serial_number,
                installation_date=details.installation_date,
                warranty_expiry=details.warranty_expiry,
                last_service_date=0,
            )
            self._commit_locked(rec, owner_deltas=[(owner, +1)], next_id=equipment_id + 1)

        logger.info("Registered equipment %d for %s", equipment_id, owner)
        return equipment_id

    def update_details(
        self,
        caller: str,
        equipment_id: int,
        equipment_type: str,
        model: str,
        serial_number: str,
        installation_date: int,
        warranty_expiry: int,
    ) -> bool:
        """Replace the descriptive fields. Owner and service date are left alone."""

        details = _as_details(equipment_type, model, serial_number, installation_date, warranty_expiry)

        with self._lock:
            rec = self._require_owner_locked(equipment_id, _as_text(caller, field="caller"))
            updated = replace(
                rec,
                equipment_type=details.equipment_type,
                model=details.model,
                serial_number=details.serial_number,
                installation_date=details.installation_date,
                warranty_expiry=details.warranty_expiry,
            )
            self._commit_locked(updated)

        logger.info("Updated details of equipment %d", updated.id)
        return True

    def transfer_ownership(self, caller: str, equipment_id: int, new_owner: str) -> bool:
        """Hand a record over to `new_owner`.

        Transferring to yourself goes through the same decrement/increment path,
        which leaves the owner count unchanged.
        """

        caller = _as_text(caller, field="caller")
        new_owner = _as_text(new_owner, field="new_owner")

        with self._lock:
            rec = self._require_owner_locked(equipment_id, caller)
            self._commit_locked(
                replace(rec, owner=new_owner),
                owner_deltas=[(caller, -1), (new_owner, +1)],
            )

        logger.info("Transferred equipment %d from %s to %s", rec.id, caller, new_owner)
        return True

    def update_last_service_date(self, equipment_id: int, service_date: int) -> bool:
        """Record a service event.

        Not owner-gated: the service scheduler calling this is authorized upstream.
        Earlier dates than the current value are accepted.
        """

        service_date = _as_timestamp(service_date, field="service_date")

        with self._lock:
            rec = self._require_record_locked(equipment_id)
            self._commit_locked(replace(rec, last_service_date=service_date))

        logger.info("Recorded service date %d for equipment %d", service_date, rec.id)
        return True

    def get_details(self, equipment_id: int) -> EquipmentRecord | None:
        with self._lock:
            return self._records.get(int(equipment_id))

    def get_owner_equipment_count(self, owner: str) -> int:
        with self._lock:
            return int(self._owner_counts.get(str(owner), 0))
