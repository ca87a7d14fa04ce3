import math
import os
import unicodedata


def lower_lay_string(s: str) -> str:
    """
    Normalize a string and drop accents, so "Élan" sorts next to "elan".
    """
    normalized = unicodedata.normalize('NFKD', s)
    return ''.join(c for c in normalized if not unicodedata.combining(c))


def name_sort_key(name: str) -> tuple[str, str]:
    # case/accent-insensitive first, raw name keeps the order total
    return lower_lay_string(name).casefold(), name


def file_extension(name: str) -> str:
    """Lowercase extension without the dot ("" when there is none)."""
    return os.path.splitext(name)[1][1:].lower()


def fmt_duration(seconds: float | None) -> str:
    if seconds is None:
        return ""
    total = max(0, int(round(seconds)))
    m = total // 60
    s = total % 60
    return f"{m}:{s:02d}"


def format_bytes(size: int | None, decimals: int = 2) -> str:
    """Human readable size: 1536 -> '1.5 KB'."""
    if not size:
        return "0 B"
    k = 1024
    units = ["B", "KB", "MB", "GB", "TB"]
    i = min(int(math.floor(math.log(size, k))), len(units) - 1)
    value = round(size / (k ** i), max(0, decimals))
    return f"{value:g} {units[i]}"
