"""Memory limit unit conversion ("64M" <-> bytes)"""

from typing import Union

# Suffix -> multiplier, binary multiples
MEMORY_UNITS = {
    'k': 1024,
    'm': 1024 * 1024,
    'g': 1024 * 1024 * 1024,
}


def memory_limit_bytes(value: Union[str, int, float]) -> int:
    """
    Convert a memory limit such as "64M" into bytes.

    Suffixes k, m and g are case-insensitive and 1024-based. A value
    without a suffix is already in bytes. "-1" (unlimited) stays -1.

    Raises:
        ValueError: if the number part is not numeric
    """
    if isinstance(value, (int, float)):
        return round(value)

    text = str(value).strip()
    if not text:
        raise ValueError("empty memory limit")

    multiplier = MEMORY_UNITS.get(text[-1].lower())
    if multiplier is not None:
        return round(float(text[:-1]) * multiplier)
    return round(float(text))


def bytes_to_limit_string(num_bytes: int) -> str:
    """Format bytes as a megabyte limit string, e.g. 134217728 -> "128M"."""
    if num_bytes < 0:
        return '-1'
    megabytes = num_bytes / (1024 * 1024)
    if megabytes.is_integer():
        return f"{int(megabytes)}M"
    return str(num_bytes)
