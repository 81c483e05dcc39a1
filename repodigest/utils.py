"""Small formatting helpers shared by the walker, formatters and CLI."""

from __future__ import annotations


def format_bytes(size: int) -> str:
    """Human readable byte size (``1.5 MB``)."""
    if size <= 0:
        return "0 B"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            break
        value /= 1024
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"


def format_duration(seconds: float) -> str:
    """``250ms`` below one second, ``1.25s`` above."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    return f"{seconds:.2f}s"
