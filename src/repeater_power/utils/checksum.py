"""Additive 8-bit checksum used by the relay board."""

from __future__ import annotations


def sum8(data: bytes) -> int:
    """Sum all bytes of ``data`` modulo 256."""
    return sum(data) & 0xFF
