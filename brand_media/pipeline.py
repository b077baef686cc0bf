"""High-level orchestration of scraper runs, downloads and packaging."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from .archive import ARCHIVE_CONTENT_TYPE, MediaArchive
from .config import ARCHIVE_KEY_TEMPLATE, PipelineConfig, PipelineInput
from .downloader import download_media
from .extractor import ordered_media_urls
from .merger import merge_archives
from .models import FinalResult, MediaItem, ScraperRunResult
from .normalizers import normalize_records
from .utils import slugify

logger = logging.getLogger("brand_media")

JobInputBuilder = Callable[[PipelineInput, PipelineConfig], Optional[Dict[str, Any]]]


def _instagram_input(request: PipelineInput, config: PipelineConfig) -> Optional[Dict[str, Any]]:
    if not request.instagram:
        return None
    return {
        "directUrls": [request.instagram],
        "resultsType": "posts",
        "resultsLimit": config.results_limit,
        "addParentData": False,
    }


def _facebook_input(request: PipelineInput, config: PipelineConfig) -> Optional[Dict[str, Any]]:
    if not request.facebook:
        return None
    return {
        "startUrls": [{"url": request.facebook}],
        "resultsLimit": config.results_limit,
    }


def _tiktok_input(request: PipelineInput, config: PipelineConfig) -> Optional[Dict[str, Any]]:
    if not request.tiktok:
        return None
    return {
        "profiles": [request.tiktok],
        "resultsPerPage": config.results_limit,
        "shouldDownloadVideos": False,
        "shouldDownloadCovers": False,
    }


def _google_maps_input(request: PipelineInput, config: PipelineConfig) -> Optional[Dict[str, Any]]:
    query = request.google_maps
    if not query and request.google_maps_search_by_brand:
        query = request.brand_name
    if not query:
        return None
    job_input: Dict[str, Any] = {
        "maxCrawledPlacesPerSearch": 1,
        "maxImages": config.results_limit,
        "maxReviews": 0,
    }
    if query.lower().startswith(("http://", "https://")):
        job_input["startUrls"] = [{"url": query}]
    else:
        job_input["searchStringsArray"] = [query]
    return job_input


def _website_input(request: PipelineInput, config: PipelineConfig) -> Optional[Dict[str, Any]]:
    if not request.website:
        return None
    return {
        "startUrls": [{"url": request.website}],
        "maxCrawlDepth": 2,
        "maxCrawlPages": 50,
        "saveScreenshots": False,
    }


def _keyword_search_input(request: PipelineInput, config: PipelineConfig) -> Optional[Dict[str, Any]]:
    if not request.keywords:
        return None
    return {
        "queries": "\n".join(request.keywords),
        "maxPagesPerQuery": 1,
        "resultsPerPage": min(config.results_limit, 100),
    }


@dataclass
class ScraperSource:
    """One named scraper run: where it writes and how its job input is built."""

    name: str
    folder: str
    actor_attr: str
    build_input: JobInputBuilder


SCRAPER_SOURCES: Tuple[ScraperSource, ...] = (
    ScraperSource("instagram", "instagram", "instagram", _instagram_input),
    ScraperSource("facebook", "facebook", "facebook", _facebook_input),
    ScraperSource("tiktok", "tiktok", "tiktok", _tiktok_input),
    ScraperSource("googleMaps", "google_maps", "google_maps", _google_maps_input),
    ScraperSource("website", "website", "website", _website_input),
    ScraperSource("keywordSearch", "keyword_search", "keyword_search", _keyword_search_input),
)


@dataclass
class PipelineOutcome:
    """Everything a finished pipeline run persisted."""

    result: FinalResult
    archive: MediaArchive
    archive_key: str
    items: List[MediaItem] = field(default_factory=list)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def archive_key_for(brand_name: str) -> str:
    return ARCHIVE_KEY_TEMPLATE.format(slug=slugify(brand_name))


def run_scraper(
    source: ScraperSource,
    job_input: Dict[str, Any],
    request: PipelineInput,
    platform: Any,
    config: PipelineConfig,
    session: Optional[requests.Session] = None,
) -> Tuple[ScraperRunResult, MediaArchive]:
    """Run one scraper job and turn its output into items and archive entries.

    A job that cannot be started or read is logged and reported through the
    ``error`` field of the run; the remaining sources still run.
    """
    actor_id = getattr(config.actors, source.actor_attr)
    run = ScraperRunResult(name=source.name, job_id=actor_id)
    archive = MediaArchive()

    try:
        handles = platform.run_job(actor_id, job_input)
        run.records_handle = handles.dataset_id
        run.blobs_handle = handles.key_value_store_id
        records = platform.fetch_all_records(handles.dataset_id, page_size=config.page_size)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Scraper %s (%s) failed", source.name, actor_id)
        run.error = str(exc).strip() or exc.__class__.__name__
        return run, archive

    run.item_count = len(records)
    run.items = normalize_records(source.name, records, request.brand_name)

    limit = request.max_media_per_source
    if limit is None:
        limit = config.max_media_per_source
    run.urls = ordered_media_urls(records, limit=limit)

    run.download = download_media(
        run.urls,
        source.folder,
        archive,
        session=session,
        timeout=config.download_timeout,
    )
    run.merge = merge_archives(
        platform,
        run.blobs_handle,
        f"{source.folder}/archives",
        archive,
    )
    logger.info(
        "Scraper %s: %d records, %d media items, %d/%d downloads, %d archives merged",
        source.name,
        run.item_count,
        len(run.items),
        run.download.count,
        len(run.urls),
        run.merge.count,
    )
    return run, archive


def collect_brand_media(
    request: PipelineInput,
    platform: Any,
    output: Any,
    config: Optional[PipelineConfig] = None,
    session: Optional[requests.Session] = None,
) -> PipelineOutcome:
    """Run every enabled scraper and persist the result and merged archive.

    ``platform`` runs jobs and reads their storages; ``output`` receives the
    result document, the zip archive and the normalized media items.
    """
    config = config or PipelineConfig()
    session = session or requests.Session()
    result = FinalResult(brand_name=request.brand_name, started_at=_utc_now())
    final_archive = MediaArchive()
    items: List[MediaItem] = []

    for source in SCRAPER_SOURCES:
        job_input = source.build_input(request, config)
        result.sources_used[source.name] = job_input is not None
        if job_input is None:
            logger.debug("Skipping %s: no input", source.name)
            continue
        run, archive = run_scraper(source, job_input, request, platform, config, session)
        result.add_run(run)
        final_archive.extend(archive)
        items.extend(run.items)

    archive_key = archive_key_for(request.brand_name)
    result.archive_key = archive_key
    result.completed_at = _utc_now()

    output.put_value(archive_key, final_archive.to_zip_bytes(), content_type=ARCHIVE_CONTENT_TYPE)
    output.put_value(config.result_key, result.to_dict(), content_type="application/json")
    output.push_items([item.to_dict() for item in items])
    logger.info(
        "Finished %s: %d media files from %d scrapers saved to %s",
        request.brand_name,
        result.total_media_downloaded,
        len(result.scrapers),
        archive_key,
    )
    return PipelineOutcome(
        result=result,
        archive=final_archive,
        archive_key=archive_key,
        items=items,
    )
