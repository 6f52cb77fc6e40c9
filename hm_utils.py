#!/usr/bin/env python3
"""
HelicMax Utilities - hex parsing and formatting helpers.
"""

from typing import Optional


def parse_hex(hex_str: str) -> bytes:
    """Parse hex string to bytes, tolerating spaces, colons and 0x prefix."""
    cleaned = hex_str.strip()
    if cleaned.lower().startswith("0x"):
        cleaned = cleaned[2:]
    return bytes.fromhex(cleaned.replace(' ', '').replace(':', ''))


def parse_hex_safe(hex_str: str) -> Optional[bytes]:
    """Parse hex string, returning None on error."""
    try:
        return parse_hex(hex_str)
    except ValueError:
        return None


def format_hex(data: bytes, separator: str = '') -> str:
    """Format bytes as hex string with optional separator."""
    if separator:
        return separator.join(f'{b:02x}' for b in data)
    return data.hex()
