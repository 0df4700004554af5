"""Text helpers."""

from __future__ import annotations

from typing import Iterable


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())


def make_snippet(text: str, query: str, *, width: int = 180) -> str:
    """Return a single-line excerpt of ``text`` centred on ``query``.

    Falls back to the start of the text when the query does not occur.
    """
    flat = " ".join(text.split())
    if not flat:
        return ""
    pos = flat.lower().find(query.lower()) if query else -1
    if pos < 0 or len(flat) <= width:
        return flat[:width]
    start = max(pos - width // 3, 0)
    end = min(start + width, len(flat))
    start = max(end - width, 0)
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(flat) else ""
    return f"{prefix}{flat[start:end]}{suffix}"
