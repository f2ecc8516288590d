from __future__ import annotations

from typing import Optional

UNKNOWN_SIZE = "Unknown Size"
SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
KIB = 1024

_LABEL_MULTIPLIERS = {
    "GB": KIB ** 3,
    "MB": KIB ** 2,
}


def format_size(size_bytes: Optional[int]) -> str:
    """Render a byte count as ``"<value> <UNIT>"`` with at most two decimals.

    ``0`` and ``None`` give :data:`UNKNOWN_SIZE`. Values past the last unit stay
    in terabytes.
    """
    if not size_bytes:
        return UNKNOWN_SIZE
    if size_bytes < 0:
        raise ValueError(f"size_bytes must be non-negative, got {size_bytes}")

    index = 0
    while index < len(SIZE_UNITS) - 1 and size_bytes >= KIB ** (index + 1):
        index += 1
    value = round(size_bytes / KIB ** index, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[index]}"


def parse_size_label(label: Optional[str]) -> int:
    """Recover an approximate byte count from a label produced by :func:`format_size`.

    Used when re-parsing stored entries whose original byte count is gone.
    Anything that is not ``"<number> <unit>"`` yields ``0``.
    """
    if not label or label in (UNKNOWN_SIZE, "Unknown"):
        return 0
    parts = label.split(" ")
    if len(parts) != 2:
        return 0
    try:
        value = float(parts[0])
    except ValueError:
        return 0
    multiplier = _LABEL_MULTIPLIERS.get(parts[1].upper(), KIB)
    return max(0, int(value * multiplier))
