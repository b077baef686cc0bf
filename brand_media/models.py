"""Data models used throughout the media pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MediaItem:
    """Source-agnostic description of one discovered media asset."""

    source: str
    type: str
    media_url: str
    post_url: Optional[str] = None
    caption: Optional[str] = None
    taken_at: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "type": self.type,
            "mediaUrl": self.media_url,
            "postUrl": self.post_url,
            "caption": self.caption,
            "takenAt": self.taken_at,
            "extra": dict(self.extra),
        }


@dataclass
class DownloadFailure:
    """A media URL that could not be fetched."""

    url: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "reason": self.reason}


@dataclass
class DownloadResult:
    """Outcome of downloading a batch of URLs into an archive folder."""

    count: int = 0
    failed: List[DownloadFailure] = field(default_factory=list)
    entries: List[str] = field(default_factory=list)


@dataclass
class MergeFailure:
    """A blob store key that could not be merged."""

    key: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "reason": self.reason}


@dataclass
class MergeResult:
    """Outcome of copying stored archives into the output archive."""

    count: int = 0
    failed: List[MergeFailure] = field(default_factory=list)


@dataclass
class JobHandles:
    """Identifiers returned by a finished scraping job."""

    run_id: Optional[str]
    dataset_id: Optional[str]
    key_value_store_id: Optional[str]


@dataclass
class ScraperRunResult:
    """Everything one scraper run produced before it is folded into the result."""

    name: str
    job_id: str
    records_handle: Optional[str] = None
    blobs_handle: Optional[str] = None
    item_count: int = 0
    items: List[MediaItem] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)
    download: DownloadResult = field(default_factory=DownloadResult)
    merge: MergeResult = field(default_factory=MergeResult)
    error: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "jobId": self.job_id,
            "recordsHandle": self.records_handle,
            "blobsHandle": self.blobs_handle,
            "itemCount": self.item_count,
            "mediaItemCount": len(self.items),
            "media": {
                "urls": list(self.urls),
                "count": self.download.count,
                "failed": [failure.to_dict() for failure in self.download.failed],
                "mergedArchives": self.merge.count,
                "archiveFailures": [failure.to_dict() for failure in self.merge.failed],
            },
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class FinalResult:
    """Terminal result document of one pipeline run."""

    brand_name: str
    started_at: str
    completed_at: Optional[str] = None
    scrapers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    sources_used: Dict[str, bool] = field(default_factory=dict)
    total_media_downloaded: int = 0
    total_media_count: int = 0
    archive_key: Optional[str] = None

    def add_run(self, run: ScraperRunResult) -> None:
        self.scrapers[run.name] = run.summary()
        self.total_media_downloaded += run.download.count
        self.total_media_count += len(run.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brandName": self.brand_name,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "scrapers": dict(self.scrapers),
            "sourcesUsed": dict(self.sources_used),
            "totalMediaDownloaded": self.total_media_downloaded,
            "totalMediaCount": self.total_media_count,
            "archiveKey": self.archive_key,
        }
