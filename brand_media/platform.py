"""Job platform and output storage collaborators."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from apify_client import ApifyClient

from .config import DEFAULT_PAGE_SIZE, INPUT_KEY
from .models import JobHandles

logger = logging.getLogger("brand_media")

SUCCEEDED = "SUCCEEDED"
KEY_LIST_LIMIT = 1000


class JobError(RuntimeError):
    """Raised when a scraping job does not finish successfully."""


def _env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


class ApifyPlatform:
    """Runs scraper actors and reads their storages through the Apify API.

    The platform also exposes the current run's default key-value store and
    dataset as the output sink for the result document, archive and items.
    """

    def __init__(
        self,
        client: Any,
        output_store_id: Optional[str] = None,
        output_dataset_id: Optional[str] = None,
    ) -> None:
        self.client = client
        self.output_store_id = output_store_id
        self.output_dataset_id = output_dataset_id

    @classmethod
    def from_env(cls) -> "ApifyPlatform":
        token = _env("APIFY_TOKEN")
        if not token:
            raise RuntimeError("APIFY_TOKEN is not set")
        return cls(
            ApifyClient(token),
            output_store_id=_env("ACTOR_DEFAULT_KEY_VALUE_STORE_ID", "APIFY_DEFAULT_KEY_VALUE_STORE_ID"),
            output_dataset_id=_env("ACTOR_DEFAULT_DATASET_ID", "APIFY_DEFAULT_DATASET_ID"),
        )

    # Jobs and their storages

    def run_job(self, actor_id: str, run_input: Dict[str, Any]) -> JobHandles:
        """Start ``actor_id`` and block until the run finishes."""
        logger.info("Starting job %s", actor_id)
        run = self.client.actor(actor_id).call(run_input=run_input)
        if not run:
            raise JobError(f"Job {actor_id} returned no run information")
        status = run.get("status")
        if status and status != SUCCEEDED:
            raise JobError(f"Job {actor_id} finished with status {status} (run {run.get('id')})")
        return JobHandles(
            run_id=run.get("id"),
            dataset_id=run.get("defaultDatasetId"),
            key_value_store_id=run.get("defaultKeyValueStoreId"),
        )

    def fetch_all_records(
        self, dataset_id: Optional[str], page_size: int = DEFAULT_PAGE_SIZE
    ) -> List[Any]:
        """Read every record of a dataset, page by page."""
        if not dataset_id:
            return []
        dataset = self.client.dataset(dataset_id)
        records: List[Any] = []
        offset = 0
        while True:
            page = dataset.list_items(offset=offset, limit=page_size, clean=True)
            items = list(page.items or [])
            total = getattr(page, "total", None)
            # A cleaned page can be shorter than the window it covers.
            offset += page_size
            records.extend(items)
            if total is None:
                if not items:
                    break
            elif offset >= total:
                break
        logger.debug("Fetched %d records from dataset %s", len(records), dataset_id)
        return records

    def list_blob_keys(
        self, store_id: str, start_key: Optional[str] = None
    ) -> Tuple[List[str], Optional[str]]:
        """Return one page of keys and the key to continue from, if any."""
        page = self.client.key_value_store(store_id).list_keys(
            limit=KEY_LIST_LIMIT,
            exclusive_start_key=start_key,
        )
        keys = [item["key"] for item in page.get("items", []) if item.get("key")]
        next_key = page.get("nextExclusiveStartKey") if page.get("isTruncated") else None
        return keys, next_key

    def get_blob(self, store_id: str, key: str) -> Any:
        record = self.client.key_value_store(store_id).get_record(key)
        if record is None:
            return None
        return record.get("value")

    # Output of the current run

    def get_input(self) -> Dict[str, Any]:
        if not self.output_store_id:
            return {}
        value = self.get_blob(self.output_store_id, INPUT_KEY)
        return value if isinstance(value, dict) else {}

    def put_value(self, key: str, value: Any, content_type: Optional[str] = None) -> None:
        if not self.output_store_id:
            raise RuntimeError("No default key-value store configured for output")
        self.client.key_value_store(self.output_store_id).set_record(
            key, value, content_type=content_type
        )

    def push_items(self, items: List[Dict[str, Any]]) -> None:
        if not items:
            return
        if not self.output_dataset_id:
            raise RuntimeError("No default dataset configured for output")
        self.client.dataset(self.output_dataset_id).push_items(items)


class DirectoryStore:
    """Output sink writing the result, archive and items to a local directory."""

    ITEMS_FILENAME = "items.jsonl"

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path_for(self, key: str, content_type: Optional[str]) -> Path:
        path = self.root / key
        if content_type and "json" in content_type and not path.suffix:
            path = path.with_suffix(".json")
        return path

    def put_value(self, key: str, value: Any, content_type: Optional[str] = None) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key, content_type)
        if isinstance(value, (bytes, bytearray)):
            path.write_bytes(bytes(value))
        else:
            path.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Saved %s to %s", key, path)
        return path

    def push_items(self, items: Iterable[Dict[str, Any]]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with (self.root / self.ITEMS_FILENAME).open("a", encoding="utf-8") as handle:
            for item in items:
                handle.write(json.dumps(item, ensure_ascii=False) + "\n")
