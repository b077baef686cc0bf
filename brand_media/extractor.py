"""Discovery of media URLs inside arbitrarily nested scraper records."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Set

logger = logging.getLogger("brand_media")

IMAGE_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff",
    ".svg", ".heic", ".heif", ".avif",
)
VIDEO_EXTENSIONS = (
    ".mp4", ".m4v", ".mov", ".webm", ".mkv", ".avi", ".wmv", ".flv",
    ".3gp", ".mpg", ".mpeg", ".m3u8",
)
AUDIO_EXTENSIONS = (
    ".mp3", ".m4a", ".aac", ".wav", ".ogg", ".oga", ".opus", ".flac",
)
# Longest first so ".tiff" wins over ".tif" and ".jpeg" is reported as such.
MEDIA_EXTENSIONS = tuple(
    sorted(
        IMAGE_EXTENSIONS + VIDEO_EXTENSIONS + AUDIO_EXTENSIONS,
        key=len,
        reverse=True,
    )
)
HTTP_PREFIXES = ("http://", "https://")
DEFAULT_MAX_DEPTH = 64


def find_media_extension(value: str) -> Optional[str]:
    """Return the first known media extension contained in ``value``."""
    lowered = value.lower()
    for extension in MEDIA_EXTENSIONS:
        if extension in lowered:
            return extension
    return None


def is_media_url(value: Any) -> bool:
    """True for HTTP(S) strings that mention a known media extension."""
    if not isinstance(value, str):
        return False
    if not value.lower().startswith(HTTP_PREFIXES):
        return False
    return find_media_extension(value) is not None


def iter_media_urls(node: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[str]:
    """Yield media URLs in document order, duplicates included."""
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        if isinstance(current, str):
            if is_media_url(current):
                yield current
            continue
        if isinstance(current, Mapping):
            children: List[Any] = list(current.values())
        elif isinstance(current, (list, tuple)):
            children = list(current)
        else:
            continue
        if depth >= max_depth:
            logger.debug("Not descending past depth %d", depth)
            continue
        stack.extend((child, depth + 1) for child in reversed(children))


def extract_media_urls(node: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Set[str]:
    """Return the set of media URLs found anywhere inside ``node``."""
    return set(iter_media_urls(node, max_depth=max_depth))


def ordered_media_urls(
    records: Iterable[Any],
    limit: Optional[int] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[str]:
    """Collect unique media URLs across records, keeping first-seen order."""
    if limit is not None and limit <= 0:
        return []
    seen: dict = {}
    for record in records:
        for url in iter_media_urls(record, max_depth=max_depth):
            seen.setdefault(url, None)
            if limit is not None and len(seen) >= limit:
                return list(seen)
    return list(seen)
