"""Miscellaneous helper utilities."""

from __future__ import annotations

_SIZE_UNITS = ("KB", "MB", "GB", "TB")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count with decimal units, e.g. ``1.2 MB``."""
    if num_bytes < 1000:
        return f"{num_bytes} bytes"
    value = float(num_bytes)
    for unit in _SIZE_UNITS:
        value /= 1000
        if value < 1000:
            break
    return f"{value:.1f} {unit}"
