from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import NotAuthorized, NotFound
from ..core.records import EquipmentRecord
from ..api.serializers import item_to_record


def _error_code(res: httpx.Response) -> str | None:
    try:
        detail = res.json().get("detail")
    except ValueError:
        return None
    if isinstance(detail, dict):
        return detail.get("error")
    return None


class RegistryClient:
    """HTTP client for a running equipment registry server.

    The client is bound to one caller identity, sent as the `X-Caller` header on
    owner-gated calls. Use `as_caller()` to act as someone else.

    Registry rejections come back as `NotFound` / `NotAuthorized`; any other
    failure raises `RuntimeError`.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        caller: str | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.caller = caller
        self.timeout_s = float(timeout_s)

    def as_caller(self, caller: str) -> "RegistryClient":
        return RegistryClient(self.base_url, caller=caller, timeout_s=self.timeout_s)

    def _headers(self) -> dict[str, str]:
        if not self.caller:
            raise ValueError("This call needs a caller identity; create the client with caller=...")
        return {"X-Caller": self.caller}

    def _request(self, method: str, path: str, *, what: str, equipment_id: int | None = None, **kwargs: Any) -> Any:
        with httpx.Client(base_url=self.base_url, timeout=self.timeout_s) as client:
            res = client.request(method, path, **kwargs)

        if res.status_code == 404 and _error_code(res) == NotFound.code:
            raise NotFound(int(equipment_id or 0))
        if res.status_code == 403 and _error_code(res) == NotAuthorized.code:
            raise NotAuthorized(int(equipment_id or 0), str(self.caller))
        if res.status_code >= 400:
            raise RuntimeError(f"Failed to {what}: {res.status_code} {res.text}")
        return res.json()

    @staticmethod
    def _details_body(
        equipment_type: str,
        model: str,
        serial_number: str,
        installation_date: int,
        warranty_expiry: int,
    ) -> dict[str, Any]:
        return {
            "equipmentType": equipment_type,
            "model": model,
            "serialNumber": serial_number,
            "installationDate": int(installation_date),
            "warrantyExpiry": int(warranty_expiry),
        }

    def is_alive(self) -> bool:
        """Best-effort liveness check against `/healthz`."""
        try:
            with httpx.Client(base_url=self.base_url, timeout=min(self.timeout_s, 1.0)) as client:
                r = client.get("/healthz")
        except httpx.HTTPError:
            return False
        return r.status_code == 200 and bool(r.json().get("ok"))

    def register(
        self,
        equipment_type: str,
        model: str,
        serial_number: str,
        installation_date: int,
        warranty_expiry: int,
    ) -> int:
        data = self._request(
            "POST",
            "/api/equipment",
            what="register equipment",
            headers=self._headers(),
            json=self._details_body(equipment_type, model, serial_number, installation_date, warranty_expiry),
        )
        return int(data["id"])

    def update_details(
        self,
        equipment_id: int,
        equipment_type: str,
        model: str,
        serial_number: str,
        installation_date: int,
        warranty_expiry: int,
    ) -> bool:
        self._request(
            "PUT",
            f"/api/equipment/{int(equipment_id)}",
            what="update equipment details",
            equipment_id=equipment_id,
            headers=self._headers(),
            json=self._details_body(equipment_type, model, serial_number, installation_date, warranty_expiry),
        )
        return True

    def transfer_ownership(self, equipment_id: int, new_owner: str) -> bool:
        self._request(
            "POST",
            f"/api/equipment/{int(equipment_id)}/transfer",
            what="transfer equipment",
            equipment_id=equipment_id,
            headers=self._headers(),
            json={"newOwner": new_owner},
        )
        return True

    def update_last_service_date(self, equipment_id: int, service_date: int) -> bool:
        self._request(
            "POST",
            f"/api/equipment/{int(equipment_id)}/service",
            what="record service date",
            equipment_id=equipment_id,
            json={"serviceDate": int(service_date)},
        )
        return True

    def get_details(self, equipment_id: int) -> EquipmentRecord | None:
        data = self._request("GET", f"/api/equipment/{int(equipment_id)}", what="get equipment details")
        if data is None:
            return None
        return item_to_record(data)

    def get_owner_equipment_count(self, owner: str) -> int:
        owner_path = quote(str(owner), safe="")
        data = self._request("GET", f"/api/owners/{owner_path}/count", what="get owner count")
        return int(data["count"])

    def revision(self) -> int:
        data = self._request("GET", "/api/events", what="get registry revision")
        return int(data["revision"])
