from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header, HTTPException

from ...core.errors import NotAuthorized, NotFound
from ...core.registry import InMemoryRegistry
from ..parsing import parse_details_body, parse_identity, parse_timestamp
from ..serializers import error_to_detail, record_to_item

CALLER_HEADER = "X-Caller"


def _caller(value: str | None) -> str:
    try:
        return parse_identity(value, field=CALLER_HEADER)
    except ValueError as ex:
        raise HTTPException(status_code=401, detail=str(ex))


def mount_equipment_api(app: FastAPI, registry: InMemoryRegistry) -> None:
    """Mount the equipment endpoints on `app`, all backed by `registry`.

    Mutating routes read the caller identity from the `X-Caller` header and
    trust it as-is; authentication happens in front of this service.
    """

    def _run(call, *args: Any) -> Any:
        try:
            return call(*args)
        except NotFound as ex:
            raise HTTPException(status_code=404, detail=error_to_detail(ex))
        except NotAuthorized as ex:
            raise HTTPException(status_code=403, detail=error_to_detail(ex))

    @app.post("/api/equipment", status_code=201)
    def register_equipment(body: dict, x_caller: str | None = Header(default=None)) -> dict[str, int]:
        caller = _caller(x_caller)
        try:
            d = parse_details_body(body)
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        equipment_id = registry.register(
            caller,
            d.equipment_type,
            d.model,
            d.serial_number,
            d.installation_date,
            d.warranty_expiry,
        )
        return {"id": int(equipment_id)}

    @app.get("/api/equipment/{equipment_id}")
    def get_equipment(equipment_id: int) -> dict[str, Any] | None:
        rec = registry.get_details(equipment_id)
        if rec is None:
            return None
        return record_to_item(rec)

    @app.put("/api/equipment/{equipment_id}")
    def update_equipment(equipment_id: int, body: dict, x_caller: str | None = Header(default=None)) -> dict[str, bool]:
        caller = _caller(x_caller)
        try:
            d = parse_details_body(body)
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        _run(
            registry.update_details,
            caller,
            equipment_id,
            d.equipment_type,
            d.model,
            d.serial_number,
            d.installation_date,
            d.warranty_expiry,
        )
        return {"ok": True}

    @app.post("/api/equipment/{equipment_id}/transfer")
    def transfer_equipment(equipment_id: int, body: dict, x_caller: str | None = Header(default=None)) -> dict[str, Any]:
        caller = _caller(x_caller)
        try:
            new_owner = parse_identity(body.get("newOwner"), field="newOwner")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        _run(registry.transfer_ownership, caller, equipment_id, new_owner)
        return {"ok": True, "owner": new_owner}

    @app.post("/api/equipment/{equipment_id}/service")
    def record_service(equipment_id: int, body: dict) -> dict[str, Any]:
        # No caller check: the service scheduler is authorized upstream.
        try:
            service_date = parse_timestamp(body.get("serviceDate"), field="serviceDate")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        _run(registry.update_last_service_date, equipment_id, service_date)
        return {"ok": True, "lastServiceDate": service_date}

    @app.get("/api/owners/{owner:path}/count")
    def owner_equipment_count(owner: str) -> dict[str, Any]:
        return {"owner": owner, "count": registry.get_owner_equipment_count(owner)}
