from __future__ import annotations

from .records import error_to_detail, item_to_record, record_to_item

__all__ = [
    "record_to_item",
    "item_to_record",
    "error_to_detail",
]
