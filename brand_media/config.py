"""Configuration objects and constants for the media pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

DEFAULT_BRAND_NAME = "Unknown brand"
RESULT_KEY = "RESULT"
INPUT_KEY = "INPUT"
ARCHIVE_KEY_TEMPLATE = "{slug}_full_media.zip"
DEFAULT_RESULTS_LIMIT = 100
DEFAULT_PAGE_SIZE = 1000


@dataclass
class ScraperActors:
    """Actor identifiers used for each scraper run."""

    instagram: str = "apify/instagram-scraper"
    facebook: str = "apify/facebook-posts-scraper"
    tiktok: str = "clockworks/tiktok-scraper"
    google_maps: str = "compass/crawler-google-places"
    website: str = "apify/website-content-crawler"
    keyword_search: str = "apify/google-search-scraper"


@dataclass
class PipelineConfig:
    """Top-level settings that control scraping, downloading and packaging."""

    actors: ScraperActors = field(default_factory=ScraperActors)
    results_limit: int = DEFAULT_RESULTS_LIMIT
    max_media_per_source: Optional[int] = None
    download_timeout: float = 30.0
    page_size: int = DEFAULT_PAGE_SIZE
    result_key: str = RESULT_KEY


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _keywords(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.replace("\n", ",").split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


@dataclass
class PipelineInput:
    """User input naming the brand and the profiles to scrape."""

    brand_name: str = DEFAULT_BRAND_NAME
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None
    google_maps: Optional[str] = None
    google_maps_search_by_brand: bool = False
    website: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    max_media_per_source: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "PipelineInput":
        """Build an input from actor-style camelCase JSON, ignoring junk values."""
        data = data or {}
        max_media = data.get("maxMediaPerSource")
        if isinstance(max_media, bool) or not isinstance(max_media, int) or max_media < 0:
            max_media = None
        return cls(
            brand_name=_text(data.get("brandName")) or DEFAULT_BRAND_NAME,
            instagram=_text(data.get("instagram")),
            facebook=_text(data.get("facebook")),
            tiktok=_text(data.get("tiktok")),
            google_maps=_text(data.get("googleMaps")),
            google_maps_search_by_brand=bool(data.get("googleMapsSearchByBrand")),
            website=_text(data.get("website")),
            keywords=_keywords(data.get("keywords")),
            max_media_per_source=max_media,
        )
