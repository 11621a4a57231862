"""
HTTP transport submitting one archive record to the restore endpoint.
"""

import json
import logging
from typing import Any, Optional
from urllib.parse import quote, urlsplit, urlunsplit

import requests

from cbfsrestore.core.constants import RESTORE_NAMESPACE, RESTORE_SUCCESS_STATUS
from cbfsrestore.core.errors import InvalidBaseURLError
from cbfsrestore.schemas.records import RestoreOutcome

logger = logging.getLogger(__name__)


class RestoreTransport:
    """Submits file metadata to ``POST <base>/.cbfs/backup/restore/<path>``.

    Holds no mutable state after construction, so a single instance is shared
    by all restore workers.
    """

    def __init__(self, base_url: str, dry_run: bool = False, timeout: Optional[float] = None):
        """Validate the base location.

        Args:
            base_url: Location of the store, e.g. ``http://cbfs:8484/``
            dry_run: Report every submission as restored without sending it
            timeout: Seconds passed to ``requests``; None waits indefinitely

        Raises:
            InvalidBaseURLError: If ``base_url`` is not an http(s) URL with a host
        """
        try:
            parts = urlsplit(base_url)
            host = parts.hostname
            parts.port  # raises ValueError for a non-numeric port
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidBaseURLError(f"Error parsing URL {base_url!r}: {e}") from e
        if parts.scheme not in ("http", "https") or not host:
            raise InvalidBaseURLError(f"Error parsing URL {base_url!r}: expected http(s)://host[:port]/")

        self._base = parts
        self._dry_run = dry_run
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return urlunsplit(self._base)

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def endpoint_for(self, path: str) -> str:
        """Return the restore URL of ``path`` under the base location."""
        base_path = self._base.path.rstrip("/")
        escaped = quote(path, safe="/")
        full_path = f"{base_path}/{RESTORE_NAMESPACE}/{escaped}"
        return urlunsplit((self._base.scheme, self._base.netloc, full_path, "", ""))

    def submit(self, path: str, meta: Any) -> RestoreOutcome:
        """Restore one file; never raises for per-file problems."""
        logger.info(f"Restoring {path}")
        if self._dry_run:
            return RestoreOutcome.success()

        try:
            body = json.dumps(meta, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            return RestoreOutcome.failed(f"Error encoding metadata of {path}: {e}")

        url = self.endpoint_for(path)
        try:
            response = requests.post(
                url,
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            return RestoreOutcome.failed(f"Error executing POST to {url} - {e}")

        try:
            if response.status_code == RESTORE_SUCCESS_STATUS:
                return RestoreOutcome.success()
            return RestoreOutcome.failed(_describe_failure(path, response))
        finally:
            response.close()


def _describe_failure(path: str, response: requests.Response) -> str:
    reason = f"HTTP Error restoring {path}: {response.status_code} {response.reason or ''}".rstrip()
    try:
        text = response.text.strip()
    except (requests.RequestException, ValueError):
        text = ""
    if text:
        reason = f"{reason}: {text}"
    return reason
