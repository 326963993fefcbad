"""Schema fetchers: remote HTTP(S) and local directory sources."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Protocol

import requests
from requests.exceptions import RequestException, Timeout

from chartmigrate.core.exceptions import SchemaFetchError
from chartmigrate.core.versions import SemanticVersion

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_URL = (
    "https://raw.githubusercontent.com/redpanda-data/helm-charts/"
    "redpanda-{bare_version}/charts/redpanda/values.schema.json"
)


class SchemaFetcher(Protocol):
    """Anything that can produce the raw schema for a chart version."""

    def fetch(self, version: str) -> dict[str, Any]:
        """Return the parsed schema JSON for ``version``.

        Raises:
            SchemaFetchError: If the schema cannot be retrieved.
        """
        ...


class HttpSchemaFetcher:
    """Fetches chart schemas over HTTP(S) with retries and exponential backoff.

    The URL is built from a template holding ``{version}`` (``v25.1.1``) and/or
    ``{bare_version}`` (``25.1.1``). Timeouts, connection errors and 5xx
    responses are retried; 4xx responses fail immediately.
    """

    def __init__(
        self,
        url_template: str = DEFAULT_SCHEMA_URL,
        timeout: float = 30.0,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        backoff_rate: float = 2.0,
        session: requests.Session | None = None,
    ):
        if "{version}" not in url_template and "{bare_version}" not in url_template:
            raise ValueError("url_template must contain {version} or {bare_version}")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._url_template = url_template
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._backoff_rate = backoff_rate
        self._session = session or requests.Session()

    def url_for(self, version: str) -> str:
        parsed = SemanticVersion.parse(version)
        return self._url_template.format(version=str(parsed), bare_version=parsed.bare)

    def fetch(self, version: str) -> dict[str, Any]:
        url = self.url_for(version)
        response = self._make_request(url)
        try:
            data = response.json()
        except ValueError as e:
            raise SchemaFetchError(
                f"Schema for {version} is not valid JSON: {e}",
                context={"url": url},
            ) from e
        if not isinstance(data, dict):
            raise SchemaFetchError(
                f"Schema for {version} is not a JSON object",
                context={"url": url, "type": type(data).__name__},
            )
        return data

    def _make_request(self, url: str, attempt: int = 0) -> requests.Response:
        """GET ``url``, retrying transient failures with exponential backoff.

        Raises:
            SchemaFetchError: On a client error or once all attempts fail.
        """
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
            return response
        except Timeout as e:
            if attempt + 1 < self._max_attempts:
                self._backoff(url, attempt, e)
                return self._make_request(url, attempt + 1)
            raise SchemaFetchError(
                f"Schema request timed out after {self._max_attempts} attempts",
                context={"url": url, "timeout": self._timeout},
            ) from e
        except RequestException as e:
            # Client errors are not retried
            if getattr(e, "response", None) is not None:
                status_code = e.response.status_code
                if 400 <= status_code < 500:
                    raise SchemaFetchError(
                        f"Client error {status_code} fetching schema",
                        context={"url": url, "status_code": status_code},
                    ) from e

            if attempt + 1 < self._max_attempts:
                self._backoff(url, attempt, e)
                return self._make_request(url, attempt + 1)

            raise SchemaFetchError(
                f"Schema request failed after {self._max_attempts} attempts: {e}",
                context={"url": url},
            ) from e

    def _backoff(self, url: str, attempt: int, error: Exception) -> None:
        delay = self._retry_delay * (self._backoff_rate**attempt)
        logger.warning(
            f"Schema request failed ({error}), retrying in {delay:.1f}s",
            extra={"context": {"url": url, "attempt": attempt + 1}},
        )
        time.sleep(delay)


class DirectorySchemaFetcher:
    """Reads schemas from ``<directory>/<version>.json`` for offline runs."""

    def __init__(self, directory: str | Path):
        self._directory = Path(directory)

    def fetch(self, version: str) -> dict[str, Any]:
        path = self._directory / f"{SemanticVersion.parse(version)}.json"
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise SchemaFetchError(
                f"No schema file for {version}",
                context={"path": str(path)},
            ) from e
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaFetchError(
                f"Failed to read schema file {path}: {e}",
                context={"path": str(path)},
            ) from e
        if not isinstance(data, dict):
            raise SchemaFetchError(
                f"Schema file {path} is not a JSON object",
                context={"path": str(path)},
            )
        return data
