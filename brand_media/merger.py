"""Copy archives stored by scraper jobs into the output archive."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, List, Optional, Set

from .archive import MediaArchive
from .models import MergeFailure, MergeResult

logger = logging.getLogger("brand_media")

ARCHIVE_SUFFIX = ".zip"


def blob_to_bytes(value: Any) -> bytes:
    """Decode a stored value that may be raw bytes, a buffer, or base64 text."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return base64.b64decode("".join(value.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid base64 payload: {exc}") from exc
    raise ValueError(f"unsupported value type {type(value).__name__}")


def list_all_keys(store: Any, store_id: str) -> List[str]:
    """List every key of a blob store, following continuation tokens."""
    keys: List[str] = []
    seen_tokens: Set[str] = set()
    start_key: Optional[str] = None
    while True:
        page_keys, next_key = store.list_blob_keys(store_id, start_key)
        keys.extend(page_keys)
        if not next_key:
            return keys
        if next_key in seen_tokens:
            logger.warning(
                "Blob store %s repeated continuation key %s; stopping listing",
                store_id,
                next_key,
            )
            return keys
        seen_tokens.add(next_key)
        start_key = next_key


def merge_archives(
    store: Any,
    store_id: Optional[str],
    folder: str,
    archive: MediaArchive,
    suffix: str = ARCHIVE_SUFFIX,
) -> MergeResult:
    """Add every ``suffix`` blob of ``store_id`` to ``archive`` under ``folder``."""
    result = MergeResult()
    if not store_id:
        return result

    try:
        keys = list_all_keys(store, store_id)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Could not list blob store %s; skipping archive merge", store_id)
        return result

    folder = folder.strip("/")
    for key in keys:
        if not key.lower().endswith(suffix.lower()):
            continue
        try:
            value = store.get_blob(store_id, key)
            if value is None:
                raise ValueError("record not found")
            data = blob_to_bytes(value)
        except Exception as exc:  # pylint: disable=broad-except
            reason = str(exc).strip() or exc.__class__.__name__
            logger.warning("Failed to merge archive %s from %s: %s", key, store_id, reason)
            result.failed.append(MergeFailure(key=key, reason=reason))
            continue
        archive.add(f"{folder}/{key}", data)
        result.count += 1

    if result.count:
        logger.info("Merged %d stored archives into %s", result.count, folder)
    return result
