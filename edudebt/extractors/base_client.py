"""
Base API client with session pooling, bounded timeouts, and telemetry.

Source-specific clients inherit from BaseClient, which provides:
- Session pooling with custom User-Agent
- Single-attempt GET with a (connect, read) timeout
- Thread-safe per-request telemetry

Requests are never retried: a failed call surfaces to the caller
immediately and the whole refresh can be re-triggered instead.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import requests

from .. import config


class BaseClient(ABC):
    """Abstract base class for API clients.

    Subclasses declare ``source_name`` and ``base_url`` and build their
    public fetch methods on top of ``_get``.

    Usage::

        class MyClient(BaseClient):
            source_name = "my_api"
            base_url = "https://api.example.com"

            def fetch(self, item):
                return self._get(f"/items/{item}", params={"format": "json"})
    """

    # --- Abstract interface ---------------------------------------------------

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Short identifier for this data source (e.g. 'world_bank')."""

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Root URL for this API (no trailing slash)."""

    # --- Lifecycle ------------------------------------------------------------

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[Tuple[float, float]] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Override the class-level root URL.
            timeout: ``(connect, read)`` timeout in seconds.
        """
        if base_url is not None:
            self.base_url = base_url.rstrip("/")
        self._timeout = timeout or (config.CONNECT_TIMEOUT, config.READ_TIMEOUT)

        # Session pooling
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": f"edudebt-dashboard/{self.source_name}",
            "Accept": "application/json",
        })

        # Telemetry counters, shared by worker threads
        self._lock = threading.Lock()
        self.api_calls = 0
        self.errors = 0
        self._timings: list = []

        # Logger
        self._log = logging.getLogger(f"extractor.{self.source_name}")

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    # --- HTTP -----------------------------------------------------------------

    def _get(self, path: str, params: Optional[Dict] = None) -> Any:
        """Single GET request returning parsed JSON.

        Args:
            path: URL path appended to ``base_url``.
            params: Query parameters.

        Returns:
            Parsed JSON response.

        Raises:
            requests.HTTPError: On any non-2xx status.
            requests.RequestException: On connection errors and timeouts.
            ValueError: If the body is not valid JSON.
        """
        url = f"{self.base_url}{path}" if path.startswith("/") else path

        start = time.monotonic()
        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError):
            self._record(time.monotonic() - start, failed=True)
            raise

        elapsed = time.monotonic() - start
        self._record(elapsed)
        self._log.debug("GET %s %s (%.2fs)", path, resp.status_code, elapsed)
        return data

    def _record(self, elapsed: float, failed: bool = False) -> None:
        with self._lock:
            self.api_calls += 1
            self._timings.append(elapsed)
            if failed:
                self.errors += 1

    # --- Telemetry ------------------------------------------------------------

    def get_telemetry(self) -> Dict[str, Any]:
        """Return telemetry summary for this client."""
        with self._lock:
            return {
                "source": self.source_name,
                "api_calls": self.api_calls,
                "errors": self.errors,
                "avg_latency": (
                    sum(self._timings) / len(self._timings)
                    if self._timings
                    else 0.0
                ),
            }

    def reset_telemetry(self) -> None:
        """Reset all telemetry counters."""
        with self._lock:
            self.api_calls = 0
            self.errors = 0
            self._timings.clear()
