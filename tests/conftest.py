"""
Shared fixtures for the restore tests.
"""

import gzip
import io
import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from cbfsrestore.schemas.records import RestoreOutcome

POST = "cbfsrestore.restore.transport.requests.post"

SAMPLE_RECORDS = [
    {"Path": "a/1.txt", "Meta": {"oid": "1111", "length": 10, "headers": {"Content-Type": ["text/plain"]}}},
    {"Path": "b/2.txt", "Meta": {"oid": "2222", "length": 20}},
    {"Path": "a/3.txt", "Meta": {"oid": "3333", "length": 30}},
]


def make_archive(records: List[Any], raw_tail: str = "", separator: str = "\n") -> bytes:
    """Gzip a sequence of JSON values the way the backup command writes them."""
    text = separator.join(json.dumps(r) for r in records)
    if records:
        text += separator
    text += raw_tail
    buf = io.BytesIO()
    with gzip.GzipFile(fileobj=buf, mode="wb") as gz:
        gz.write(text.encode("utf-8"))
    return buf.getvalue()


def fake_response(status_code=201, reason="Created", text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = reason
    response.text = text
    return response


class FakeTransport:
    """Records submissions instead of talking to a store."""

    def __init__(self, failures: Optional[Dict[str, str]] = None, delay: float = 0.0):
        self.failures = failures or {}
        self.delay = delay
        self.submitted: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def submit(self, path, meta):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                threading.Event().wait(self.delay)
            with self._lock:
                self.submitted.append((path, meta))
            if path in self.failures:
                return RestoreOutcome.failed(self.failures[path])
            return RestoreOutcome.success()
        finally:
            with self._lock:
                self.in_flight -= 1

    @property
    def paths(self):
        return sorted(p for p, _ in self.submitted)


@pytest.fixture
def archive_bytes():
    return make_archive(SAMPLE_RECORDS)


@pytest.fixture
def archive_file(tmp_path, archive_bytes):
    path = tmp_path / "backup.json.gz"
    path.write_bytes(archive_bytes)
    return path


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch, tmp_path):
    """Keep CBFS_RESTORE_* variables and stray .env files out of the tests."""
    for key in list(os.environ):
        if key.startswith("CBFS_RESTORE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="cbfsrestore")
    return caplog

