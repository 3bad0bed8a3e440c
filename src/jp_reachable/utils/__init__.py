"""Utility modules for jp-reachable-stations."""

from .address import (
    PREFECTURE_CODES,
    AddressParts,
    normalize_address,
    parse_address,
    prefecture_code,
)

__all__ = [
    "PREFECTURE_CODES",
    "AddressParts",
    "normalize_address",
    "parse_address",
    "prefecture_code",
]
