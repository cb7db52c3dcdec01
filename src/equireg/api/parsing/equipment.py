from __future__ import annotations

from typing import Any

from ...core.records import EquipmentDetails


def parse_identity(value: Any, *, field: str) -> str:
    if value is None:
        raise ValueError(f"Missing {field}")
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid {field}")
    # Identities are passed on unchanged.
    return value


def parse_timestamp(value: Any, *, field: str) -> int:
    if value is None:
        raise ValueError(f"Missing {field}")
    # JSON booleans and floats are not timestamps.
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"Invalid {field}")
    try:
        return int(value)
    except (TypeError, ValueError) as ex:
        raise ValueError(f"Invalid {field}") from ex


def parse_text(value: Any, *, field: str) -> str:
    if value is None:
        raise ValueError(f"Missing {field}")
    if not isinstance(value, str):
        raise ValueError(f"Invalid {field}")
    return value


def parse_details_body(body: dict[str, Any]) -> EquipmentDetails:
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return EquipmentDetails(
        equipment_type=parse_text(body.get("equipmentType"), field="equipmentType"),
        model=parse_text(body.get("model"), field="model"),
        serial_number=parse_text(body.get("serialNumber"), field="serialNumber"),
        installation_date=parse_timestamp(body.get("installationDate"), field="installationDate"),
        warranty_expiry=parse_timestamp(body.get("warrantyExpiry"), field="warrantyExpiry"),
    )
