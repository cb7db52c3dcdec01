from __future__ import annotations

from typing import Any

from ...core.errors import RegistryError
from ...core.records import EquipmentRecord


def record_to_item(rec: EquipmentRecord) -> dict[str, Any]:
    return rec.to_dict()


def item_to_record(item: dict[str, Any]) -> EquipmentRecord:
    return EquipmentRecord.from_dict(item)


def error_to_detail(err: RegistryError) -> dict[str, str]:
    return {"error": err.code, "message": err.message}
