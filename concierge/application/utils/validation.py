from __future__ import annotations

import re

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match((value or "").strip()))


def parse_destinations(value: str) -> list[str]:
    """Split a comma separated destination list, trimming entries and dropping empties."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]
