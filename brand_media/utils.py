"""Utility helpers for string normalization and value coercion."""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Mapping, Optional

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: Optional[str], fallback: str = "brand") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = unicodedata.normalize("NFKD", value or "")
    normalized = normalized.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def first_present(record: Any, *keys: str) -> Any:
    """Return the first truthy value found under ``keys`` or ``None``.

    Dotted keys walk nested mappings, so ``"metadata.title"`` reads
    ``record["metadata"]["title"]``. Anything that is not a mapping along the
    way simply yields ``None``.
    """
    for key in keys:
        value: Any = record
        for part in key.split("."):
            if not isinstance(value, Mapping):
                value = None
                break
            value = value.get(part)
        if value:
            return value
    return None
