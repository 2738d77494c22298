"""
Generic helpers that are reused across sub‑modules.
"""
from __future__ import annotations

from sqlgate.constants import PREVIEW_CHARS


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Return *text* cut to *limit* characters, marked with ``...`` when cut."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
