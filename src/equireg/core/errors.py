from __future__ import annotations


class RegistryError(Exception):
    """Base class for rejected registry calls.

    A rejected call never leaves a partial effect behind.
    """

    code = "ERR-REGISTRY"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(RegistryError):
    code = "ERR-NOT-FOUND"

    def __init__(self, equipment_id: int) -> None:
        super().__init__(f"Unknown equipment: {equipment_id}")
        self.equipment_id = int(equipment_id)


class NotAuthorized(RegistryError):
    code = "ERR-NOT-AUTHORIZED"

    def __init__(self, equipment_id: int, caller: str) -> None:
        super().__init__(f"{caller} is not the owner of equipment {equipment_id}")
        self.equipment_id = int(equipment_id)
        self.caller = caller