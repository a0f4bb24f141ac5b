from __future__ import annotations

import re
import unicodedata
from typing import Callable

from qrmenu.schemas.restaurants import SLUG_MAX_LENGTH


def normalize_slug(value: str | None) -> str:
    """Turn free text ("Café Olé!") into a URL-safe slug ("cafe-ole")."""
    if not value:
        return ""
    ascii_text = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].strip("-")


def suggest_unique_slug(base: str, is_taken: Callable[[str], bool], *, max_attempts: int = 999) -> str | None:
    candidate = normalize_slug(base)
    if not candidate:
        return None
    if not is_taken(candidate):
        return candidate
    for suffix in range(2, max_attempts + 2):
        tail = f"-{suffix}"
        with_suffix = f"{candidate[:SLUG_MAX_LENGTH - len(tail)].strip('-')}{tail}"
        if not is_taken(with_suffix):
            return with_suffix
    return None
