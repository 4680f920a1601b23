"""Conversion between human-readable size strings and byte counts"""
import re
import sys
from typing import Union

# Reserved value meaning "no limit imposed"
UNLIMITED = -1

KB_IN_BYTES = 1024
MB_IN_BYTES = 1024 * KB_IN_BYTES
GB_IN_BYTES = 1024 * MB_IN_BYTES
TB_IN_BYTES = 1024 * GB_IN_BYTES

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def convert_hr_to_bytes(value: Union[str, int]) -> int:
    """Convert a shorthand size such as '256M', '1G' or '512K' to bytes.

    Plain numbers are taken as bytes. Anything without a leading integer
    converts to 0. '-1' converts to UNLIMITED.
    """
    if isinstance(value, int):
        return value

    value = value.strip().lower()
    match = _LEADING_INT.match(value)
    size = int(match.group(1)) if match else 0

    if 'g' in value:
        size *= GB_IN_BYTES
    elif 'm' in value:
        size *= MB_IN_BYTES
    elif 'k' in value:
        size *= KB_IN_BYTES

    return min(size, sys.maxsize)


def size_format(size: int, decimals: int = 0) -> str:
    """Format a byte count for display, e.g. 1536 -> '2 KB'"""
    units = (
        ('TB', TB_IN_BYTES),
        ('GB', GB_IN_BYTES),
        ('MB', MB_IN_BYTES),
        ('KB', KB_IN_BYTES),
        ('B', 1),
    )

    if size == 0:
        return f"{0:.{decimals}f} B"

    for unit, magnitude in units:
        if size >= magnitude:
            return f"{size / magnitude:,.{decimals}f} {unit}"

    return f"{size} B"
