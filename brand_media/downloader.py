"""Media downloading into archive folders."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence
from urllib.parse import urlparse

import requests
from filetype import guess

from .archive import MediaArchive
from .extractor import find_media_extension
from .models import DownloadFailure, DownloadResult

logger = logging.getLogger("brand_media")

DEFAULT_TIMEOUT = 30.0
FALLBACK_EXTENSION = ".bin"
CONTENT_TYPE_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/svg+xml": ".svg",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/avif": ".avif",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
    "video/x-matroska": ".mkv",
    "video/x-msvideo": ".avi",
    "video/mpeg": ".mpeg",
    "video/3gpp": ".3gp",
    "application/vnd.apple.mpegurl": ".m3u8",
    "application/x-mpegurl": ".m3u8",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/aac": ".aac",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/ogg": ".ogg",
    "audio/opus": ".opus",
    "audio/flac": ".flac",
}


def extension_from_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    mime = content_type.split(";")[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(mime)


def detect_extension(data: bytes) -> Optional[str]:
    """Guess an extension from the file signature using filetype."""
    kind = guess(data) if data else None
    if kind is None:
        return None
    if kind.extension == "jpeg":
        return ".jpg"
    return f".{kind.extension.lower()}"


def url_extension(url: str) -> Optional[str]:
    """Media extension named by the URL path, else anywhere in the URL."""
    return find_media_extension(urlparse(url).path) or find_media_extension(url)


def infer_extension(url: str, content_type: Optional[str], data: bytes) -> str:
    """Pick a file extension from the URL, the Content-Type, or the payload."""
    return (
        url_extension(url)
        or extension_from_content_type(content_type)
        or detect_extension(data)
        or FALLBACK_EXTENSION
    )


def entry_path(folder: str, index: int, extension: str) -> str:
    """Archive path for the ``index``-th (1-based) URL of a batch."""
    return f"{folder.strip('/')}/{index:05d}{extension}"


def _describe_error(exc: Exception) -> str:
    message = str(exc).strip()
    return message or exc.__class__.__name__


def download_media(
    urls: Sequence[str],
    folder: str,
    archive: MediaArchive,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> DownloadResult:
    """Download each URL into ``archive`` under ``folder``.

    URLs are fetched one after another in input order. A failed URL is
    recorded and skipped; its index is not reused, so the archive numbering
    always matches the position in ``urls``.
    """
    result = DownloadResult()
    if not urls:
        return result

    session = session or requests.Session()

    for index, url in enumerate(urls, start=1):
        try:
            resp = session.get(url, timeout=timeout)
        except requests.RequestException as exc:
            logger.warning("Failed to fetch media %s: %s", url, exc)
            result.failed.append(DownloadFailure(url=url, reason=_describe_error(exc)))
            continue

        if not 200 <= resp.status_code < 300:
            logger.warning("Failed to fetch media %s: HTTP %s", url, resp.status_code)
            result.failed.append(DownloadFailure(url=url, reason=f"HTTP {resp.status_code}"))
            continue

        data = resp.content or b""
        content_type = resp.headers.get("Content-Type", "")
        extension = infer_extension(url, content_type, data)
        path = entry_path(folder, index, extension)
        archive.add(path, data)
        result.entries.append(path)
        result.count += 1
        logger.debug("Stored %s as %s (%d bytes)", url, path, len(data))

    logger.info(
        "Downloaded %d/%d media files into %s",
        result.count,
        len(urls),
        folder,
    )
    return result
