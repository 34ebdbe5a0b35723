"""
Data loading module.

This module provides the DataLoader class for reading bundled files, remote
datasets and documents from local paths or http(s) URLs, including
concurrent fetches of many small files.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, List, Optional, Sequence

import requests

from .config import is_remote
from .exceptions import UpstreamError
from .utils.error_handler import (
    RetryConfig, with_retry, create_error_context, log_error_details
)


class DataLoader:
    """
    Reads text and JSON sources from disk or over HTTP.

    Every failure (missing file, HTTP error status, transport error, invalid
    JSON) is raised as UpstreamError so callers can decide whether a source
    is optional.
    """

    def __init__(self, logger: Optional[logging.Logger] = None,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None,
                 retry_config: Optional[RetryConfig] = None,
                 max_workers: int = 14):
        """
        Initialize the DataLoader.

        Args:
            logger: Optional logger instance for logging operations
            session: Optional requests session (shared connection pool)
            timeout: Optional request timeout in seconds (None = no local timeout)
            retry_config: Optional retry configuration for remote fetches
            max_workers: Thread count for concurrent fetches
        """
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.max_workers = max_workers

    def read_text(self, location: str) -> str:
        """
        Read a text source.

        Args:
            location: Local path or http(s) URL

        Returns:
            Source contents

        Raises:
            UpstreamError: If the source cannot be read
        """
        if is_remote(location):
            return self._fetch_remote_text(location)

        return self._read_local_text(location)

    def read_json(self, location: str) -> Any:
        """
        Read and decode a JSON source.

        Args:
            location: Local path or http(s) URL

        Returns:
            Decoded JSON value

        Raises:
            UpstreamError: If the source cannot be read or is not valid JSON
        """
        text = self.read_text(location)
        try:
            return json.loads(text)
        except ValueError as e:
            raise UpstreamError(
                f"Invalid JSON in {location}: {e}",
                source=location,
                original_error=e
            )

    def read_json_many(self, locations: Sequence[str]) -> List[Optional[Any]]:
        """
        Read several JSON sources concurrently.

        Results keep the order of the locations. A source that cannot be read
        yields None in its slot; the failure is logged at debug level only.

        Args:
            locations: Local paths or URLs

        Returns:
            Decoded values (or None) in input order
        """
        if not locations:
            return []

        workers = min(self.max_workers, len(locations))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self._read_json_or_none, locations))

    def _read_json_or_none(self, location: str) -> Optional[Any]:
        try:
            return self.read_json(location)
        except UpstreamError as e:
            self.logger.debug(f"Source unavailable: {location} ({e.message})")
            return None

    def _fetch_remote_text(self, url: str) -> str:
        """Fetch a URL, mapping every failure to UpstreamError."""
        self.logger.debug(f"Fetching {url}")

        # Only transport failures are retried; an HTTP status is an answer
        get = with_retry(self.retry_config, self.logger)(self.session.get)
        try:
            response = get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise UpstreamError(
                f"Request to {url} failed: {e}",
                source=url,
                original_error=e
            )

        if not response.ok:
            raise UpstreamError(
                f"Request to {url} failed with HTTP {response.status_code}",
                source=url,
                status_code=response.status_code
            )

        return response.text

    def _read_local_text(self, location: str) -> str:
        path = Path(location)
        if not path.is_file():
            raise UpstreamError(f"File not found: {location}", source=location)

        try:
            return path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            context = create_error_context(operation="read_local_text", file_path=location)
            log_error_details(self.logger, e, context)
            raise UpstreamError(
                f"Could not read {location}: {e}",
                source=location,
                original_error=e
            )
