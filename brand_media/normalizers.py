"""Per-source adapters mapping raw scraper records to ``MediaItem`` objects.

Every adapter is total: a record with missing or oddly typed fields yields
fewer items (possibly none) instead of raising. Items without a media URL are
never emitted.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .models import MediaItem
from .utils import first_present

Normalizer = Callable[[Any, str], List[MediaItem]]


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _entry_url(entry: Any, *keys: str) -> Optional[str]:
    """Read a URL from a bare string entry or from the first matching key."""
    if isinstance(entry, str):
        return _as_text(entry)
    return _as_text(first_present(entry, *keys))


def make_item(
    source: str,
    media_type: str,
    media_url: Any,
    post_url: Any = None,
    caption: Any = None,
    taken_at: Any = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Optional[MediaItem]:
    """Build a ``MediaItem`` or return ``None`` when there is no media URL."""
    media_url = _as_text(media_url)
    if not media_url:
        return None
    return MediaItem(
        source=source,
        type=media_type,
        media_url=media_url,
        post_url=post_url or None,
        caption=caption or None,
        taken_at=taken_at or None,
        extra=dict(extra or {}),
    )


def _collect(*items: Optional[MediaItem]) -> List[MediaItem]:
    return [item for item in items if item is not None]


def normalize_instagram(record: Any, brand_name: str) -> List[MediaItem]:
    post_url = first_present(record, "url")
    caption = first_present(record, "caption")
    taken_at = first_present(record, "timestamp", "takenAt")
    extra = {"brandName": brand_name, "shortcode": first_present(record, "shortCode", "shortcode")}

    items = [
        make_item("instagram", "image", _entry_url(resource, "src", "url"), post_url, caption, taken_at, extra)
        for resource in _as_list(first_present(record, "displayResources"))
    ]
    items.append(
        make_item("instagram", "video", first_present(record, "videoUrl"), post_url, caption, taken_at, extra)
    )
    return _collect(*items)


def normalize_facebook(record: Any, brand_name: str) -> List[MediaItem]:
    post_url = first_present(record, "postUrl", "url")
    caption = first_present(record, "message", "text")
    taken_at = first_present(record, "createdTime", "time")
    extra = {"brandName": brand_name, "id": first_present(record, "id", "postId")}

    items = [
        make_item("facebook", "image", _entry_url(url, "url", "uri"), post_url, caption, taken_at, extra)
        for url in _as_list(first_present(record, "imageUrls"))
    ]
    items.append(
        make_item("facebook", "video", first_present(record, "videoUrl"), post_url, caption, taken_at, extra)
    )
    return _collect(*items)


def normalize_tiktok(record: Any, brand_name: str) -> List[MediaItem]:
    video_url = first_present(record, "webVideoUrl")
    post_url = first_present(record, "shareUrl") or video_url
    caption = first_present(record, "text")
    taken_at = first_present(record, "createTimeISO", "createTime")
    extra = {"brandName": brand_name, "id": first_present(record, "id")}

    cover = first_present(record, "coverImageUrl", "videoMeta.coverUrl")
    return _collect(
        make_item("tiktok", "image", cover, post_url, caption, taken_at, extra),
        make_item("tiktok", "video", video_url, post_url, caption, taken_at, extra),
    )


def normalize_google_maps(record: Any, brand_name: str) -> List[MediaItem]:
    post_url = first_present(record, "gmapsUrl", "url")
    caption = first_present(record, "title", "name")
    extra = {"brandName": brand_name, "placeId": first_present(record, "placeId")}

    photos = _as_list(first_present(record, "photos")) + _as_list(first_present(record, "imageUrls"))
    # Place photos carry no reliable capture date.
    return _collect(
        *(
            make_item("googleMaps", "image", _entry_url(photo, "url"), post_url, caption, None, extra)
            for photo in photos
        )
    )


def normalize_website(record: Any, brand_name: str) -> List[MediaItem]:
    post_url = first_present(record, "url")
    caption = first_present(record, "title", "metadata.title")
    extra = {"brandName": brand_name}

    items = [
        make_item("website", "image", _entry_url(image, "src", "url"), post_url, caption, None, extra)
        for image in _as_list(first_present(record, "images"))
    ]
    og_image = first_present(record, "ogImage", "metadata.ogImage")
    items.append(
        make_item(
            "website",
            "image",
            og_image,
            post_url,
            caption,
            None,
            {"brandName": brand_name, "kind": "og:image"},
        )
    )
    return _collect(*items)


NORMALIZERS: Mapping[str, Normalizer] = {
    "instagram": normalize_instagram,
    "facebook": normalize_facebook,
    "tiktok": normalize_tiktok,
    "googleMaps": normalize_google_maps,
    "website": normalize_website,
}


def normalize_records(source: str, records: Iterable[Any], brand_name: str) -> List[MediaItem]:
    """Normalize every record of ``source``; unknown sources produce nothing."""
    normalizer = NORMALIZERS.get(source)
    if normalizer is None:
        return []
    items: List[MediaItem] = []
    for record in records:
        items.extend(normalizer(record, brand_name))
    return items
