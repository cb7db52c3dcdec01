from __future__ import annotations

from .equipment import CALLER_HEADER, mount_equipment_api

__all__ = ["CALLER_HEADER", "mount_equipment_api"]
