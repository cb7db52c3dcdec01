from __future__ import annotations

from .equipment import (
    parse_details_body,
    parse_identity,
    parse_text,
    parse_timestamp,
)

__all__ = [
    "parse_identity",
    "parse_text",
    "parse_timestamp",
    "parse_details_body",
]
