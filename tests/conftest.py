"""Shared fakes for the job platform and HTTP session."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from brand_media.models import JobHandles


class FakeResponse:
    def __init__(self, status=200, content=b"data", content_type=""):
        self.status_code = status
        self.content = content
        self.headers = {"Content-Type": content_type} if content_type else {}


class FakeSession:
    """Maps URLs to responses or exceptions and records every request."""

    def __init__(self, responses=None):
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[str] = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        outcome = self.responses.get(url)
        if outcome is None:
            return FakeResponse(content=b"payload:" + url.encode())
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakePlatform:
    """In-memory stand-in for the job runner, blob stores and output sink."""

    def __init__(self):
        self.jobs: Dict[str, Any] = {}
        self.records: Dict[str, List[Any]] = {}
        self.stores: Dict[str, Dict[str, Any]] = {}
        self.page_size = 2
        self.started: List[Tuple[str, Dict[str, Any]]] = []
        self.values: Dict[str, Tuple[Any, Optional[str]]] = {}
        self.items: List[Dict[str, Any]] = []

    def add_job(self, actor_id, records=None, blobs=None):
        name = actor_id.replace("/", "-")
        self.jobs[actor_id] = JobHandles(
            run_id=f"run-{name}",
            dataset_id=f"ds-{name}",
            key_value_store_id=f"kv-{name}",
        )
        self.records[f"ds-{name}"] = list(records or [])
        self.stores[f"kv-{name}"] = dict(blobs or {})

    def run_job(self, actor_id, run_input):
        self.started.append((actor_id, run_input))
        outcome = self.jobs[actor_id]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def fetch_all_records(self, dataset_id, page_size=1000):
        return list(self.records.get(dataset_id, []))

    def list_blob_keys(self, store_id, start_key=None):
        keys = sorted(self.stores.get(store_id, {}))
        start = keys.index(start_key) + 1 if start_key else 0
        page = keys[start:start + self.page_size]
        next_key = page[-1] if start + self.page_size < len(keys) else None
        return page, next_key

    def get_blob(self, store_id, key):
        value = self.stores[store_id].get(key)
        if isinstance(value, Exception):
            raise value
        return value

    def put_value(self, key, value, content_type=None):
        self.values[key] = (value, content_type)

    def push_items(self, items):
        self.items.extend(items)


@pytest.fixture
def platform():
    return FakePlatform()
