from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, kw_only=True)
class EquipmentRecord:
    """One registered piece of equipment.

    Notes:
    - `id` is assigned by the registry and never changes.
    - `owner` only changes through an ownership transfer.
    - Timestamps are plain integers (unix seconds by convention); no ordering is enforced.
    - `last_service_date` is 0 until a service event is recorded.
    """

    id: int
    owner: str
    equipment_type: str
    model: str
    serial_number: str
    installation_date: int
    warranty_expiry: int
    last_service_date: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": int(self.id),
            "owner": self.owner,
            "equipmentType": self.equipment_type,
            "model": self.model,
            "serialNumber": self.serial_number,
            "installationDate": int(self.installation_date),
            "warrantyExpiry": int(self.warranty_expiry),
            "lastServiceDate": int(self.last_service_date),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EquipmentRecord":
        return cls(
            id=int(data["id"]),
            owner=str(data["owner"]),
            equipment_type=str(data["equipmentType"]),
            model=str(data["model"]),
            serial_number=str(data["serialNumber"]),
            installation_date=int(data["installationDate"]),
            warranty_expiry=int(data["warrantyExpiry"]),
            last_service_date=int(data.get("lastServiceDate", 0)),
        )


@dataclass(frozen=True)
class EquipmentDetails:
    """The owner-editable descriptive fields of a record."""

    equipment_type: str
    model: str
    serial_number: str
    installation_date: int
    warranty_expiry: int
