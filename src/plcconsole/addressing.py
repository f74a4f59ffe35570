"""Dotted-quad address parsing — pure functions, no device calls."""

from __future__ import annotations

import ipaddress


def parse_address(text: str) -> int | None:
    """Parse a dotted-quad IPv4 string into its 32-bit value.

    Returns None for anything that is not exactly four non-empty octets
    each in 0..255. None is the "invalid" sentinel; every real address,
    including 255.255.255.255, maps to an int.
    """
    parts = text.split(".")
    if len(parts) != 4:
        return None
    if any(not part for part in parts):
        return None
    try:
        return int(ipaddress.IPv4Address(text))
    except ValueError:
        return None


def format_address(value: int) -> str:
    """Render a 32-bit address value as a dotted quad."""
    return str(ipaddress.IPv4Address(value))
