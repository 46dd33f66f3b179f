#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures for the migration tests.

FakeSource / FakeDestination implement the same interface as GCSSource and
R2Destination, backed by in-memory dicts.
"""

import sys
import threading
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import ObjectRecord, Page
from services.config import MigrationConfig
from services.errors import DownloadError, ListError, UploadError


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class InFlight:
    """Counts storage calls running at the same time, across source and destination."""

    def __init__(self):
        self._lock = threading.Lock()
        self.current = 0
        self.peak = 0

    def __enter__(self):
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)
        return self

    def __exit__(self, *exc):
        with self._lock:
            self.current -= 1
        return False


class FakeSource:
    def __init__(self, tracker=None):
        self.objects = {}  # key -> (ObjectRecord, bytes)
        self.download_calls = {}
        self.download_failures = {}  # key -> number of failures before success
        self.list_calls = 0
        self.fail_listing = False
        self.empty_first_page = False  # first page comes back empty but with a token
        self.delay = 0.0
        self.tracker = tracker or InFlight()
        self._lock = threading.Lock()

    def add(self, key, data=b"data", created=None, content_type="application/json", size=None,
            content_encoding=None):
        rec = ObjectRecord(
            key=key,
            created_at=created or utc(2025, 1, 1),
            content_type=content_type,
            size=len(data) if size is None else size,
            content_encoding=content_encoding,
        )
        self.objects[key] = (rec, data)
        return rec

    def list_objects(self, prefix, page_size, token=None):
        self.list_calls += 1
        if self.fail_listing:
            raise ListError("GCS", prefix, RuntimeError("boom"))
        if token is None and self.empty_first_page:
            return Page[ObjectRecord](items=[], next_token="0")
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        start = int(token) if token else 0
        chunk = keys[start:start + page_size]
        end = start + page_size
        next_token = str(end) if end < len(keys) else None
        return Page[ObjectRecord](items=[self.objects[k][0] for k in chunk], next_token=next_token)

    def download_object(self, key):
        with self._lock:
            self.download_calls[key] = self.download_calls.get(key, 0) + 1
        with self.tracker:
            if self.delay:
                time.sleep(self.delay)
            with self._lock:
                remaining = self.download_failures.get(key, 0)
                if remaining:
                    self.download_failures[key] = remaining - 1
            if remaining:
                raise DownloadError(key, "connection reset")
            return self.objects[key][1]


class FakeDestination:
    def __init__(self, page_size=2, tracker=None):
        self.objects = {}  # key -> (bytes, content_type)
        self.put_calls = []
        self.list_calls = []
        self.fail_keys = set()
        self.page_size = page_size
        self.delay = 0.0
        self.tracker = tracker or InFlight()
        self._lock = threading.Lock()

    def list_objects(self, prefix, max_keys=None, token=None):
        self.list_calls.append((prefix, max_keys, token))
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        limit = max_keys or self.page_size
        start = int(token) if token else 0
        end = start + limit
        next_token = str(end) if end < len(keys) and not max_keys else None
        return Page[str](items=keys[start:end], next_token=next_token)

    def put_object(self, key, body, content_type=None):
        with self._lock:
            self.put_calls.append(key)
        with self.tracker:
            if self.delay:
                time.sleep(self.delay)
            if key in self.fail_keys:
                raise UploadError(key, "AccessDenied")
            with self._lock:
                self.objects[key] = (body, content_type)
        return {"ETag": "etag"}


@pytest.fixture
def tracker():
    return InFlight()


@pytest.fixture
def source(tracker):
    return FakeSource(tracker)


@pytest.fixture
def destination(tracker):
    return FakeDestination(tracker=tracker)


@pytest.fixture
def config():
    return MigrationConfig(
        gcs_bucket="src-bucket",
        gcs_root_prefix="root/",
        r2_bucket="dst-bucket",
        r2_access_key_id="key",
        r2_secret_access_key="secret",
        r2_account_id="acct",
        marker_filename="marker.json",
        minimum_date=utc(2025, 3, 10),
        page_size=2,
        concurrency=4,
        retry_delay=0,
    )
