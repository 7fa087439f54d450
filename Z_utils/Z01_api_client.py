# Z_utils/Z01_api_client.py
"""
Shared API client utilities for upstream service integrations.

Provides reusable components for HTTP clients with:
- Token-bucket rate limiting with a cancellable wait
- A base class owning the requests.Session, timeout and User-Agent

There is no retry and no response cache: every failure is
surfaced to the caller on the first attempt.

Usage:
    from Z_utils.Z01_api_client import BaseAPIClient, RateLimiter

    class MyAPIClient(BaseAPIClient):
        def fetch(self, query: str, cancel_event=None) -> dict:
            return self._get_json(self.base_url, params={"q": query}, cancel_event=cancel_event)
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional

import requests

from A_core.A00_logging import get_logger
from A_core.A12_exceptions import APIError, LookupCanceledError

logger = get_logger(__name__)


class RateLimiter:
    """
    Token-bucket rate limiter shared by every request of a batch.

    Tokens refill at one per ``interval_seconds`` up to ``burst``. The
    bucket starts full, so the first call of a batch never waits and each
    later call is separated from the previous one by at least the interval.

    Attributes:
        interval_seconds: Seconds per token (0 = unlimited).
        burst: Bucket capacity.
    """

    def __init__(
        self,
        interval_seconds: float = 2.0,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if burst < 1:
            raise ValueError("burst must be >= 1")

        self.interval_seconds = interval_seconds
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval_seconds)
        self._last_refill = now

    def _reserve(self) -> float:
        """Take a token (possibly going into debt) and return the required delay."""
        with self._lock:
            self._refill(self._clock())
            self._tokens -= 1.0
            if self._tokens >= 0:
                return 0.0
            return -self._tokens * self.interval_seconds

    def _cancel_reservation(self) -> None:
        with self._lock:
            self._tokens = min(float(self.burst), self._tokens + 1.0)

    def wait(self, cancel_event: Optional[threading.Event] = None) -> float:
        """
        Block until a token is available.

        Args:
            cancel_event: Set by the caller to abort the wait.

        Returns:
            Seconds waited (0 if a token was immediately available).

        Raises:
            LookupCanceledError: If ``cancel_event`` is set before or during the wait.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise LookupCanceledError("Lookup canceled before acquiring a rate-limit token")

        if self.interval_seconds <= 0:
            return 0.0

        delay = self._reserve()
        if delay <= 0:
            return 0.0

        if cancel_event is None:
            time.sleep(delay)
        elif cancel_event.wait(delay):
            self._cancel_reservation()
            raise LookupCanceledError("Lookup canceled while waiting for a rate-limit token")

        return delay


class BaseAPIClient:
    """
    Base class for HTTP API clients.

    Provides:
    - Connection pooling via requests.Session
    - Configurable timeout and User-Agent
    - Pacing through a RateLimiter that may be shared with other clients
    - Uniform translation of transport failures into APIError

    Attributes:
        base_url: Endpoint URL.
        timeout: Request timeout in seconds.
        rate_limiter: RateLimiter gating every request.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        service_name: str = "api",
        default_base_url: str = "",
        default_interval_seconds: float = 1.0,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            config: Configuration dictionary with optional keys:
                - base_url: API endpoint
                - timeout_seconds: Request timeout
                - rate_limit_interval_seconds: Minimum seconds between requests
                - user_agent: User-Agent header value
            service_name: Service identifier for logging.
            default_base_url: Base URL if not in config.
            default_interval_seconds: Pacing interval if not in config.
            rate_limiter: Existing limiter to share; built from config otherwise.
            session: Existing requests.Session; a new one otherwise.
        """
        config = config or {}
        self.service_name = service_name

        self.base_url = config.get("base_url", default_base_url)
        self.timeout = config.get("timeout_seconds", 30)

        interval = config.get("rate_limit_interval_seconds", default_interval_seconds)
        self.rate_limiter = rate_limiter or RateLimiter(interval_seconds=interval)

        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = config.get(
            "user_agent", f"label-recon/1.0 ({service_name})"
        )

        logger.debug(
            f"{service_name} client initialized: "
            f"interval={self.rate_limiter.interval_seconds}s, timeout={self.timeout}s"
        )

    @staticmethod
    def build_url(url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Return the fully encoded request URL."""
        return requests.Request("GET", url, params=params).prepare().url

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
        brand_name: Optional[str] = None,
    ) -> Any:
        """
        Wait for a token, issue one GET and decode the JSON body.

        Raises:
            LookupCanceledError: If canceled while waiting for the limiter.
            APIError: On connection failure, non-200 status or malformed JSON.
        """
        full_url = self.build_url(url, params)

        self.rate_limiter.wait(cancel_event)

        try:
            response = self._session.request("GET", full_url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(f"{self.service_name} request failed: {e}")
            raise APIError(
                f"Error making {self.service_name} request: {e}",
                brand_name=brand_name,
                url=full_url,
            ) from e

        logger.debug(f"{self.service_name} GET {full_url} -> HTTP {response.status_code}")
        try:
            if response.status_code != 200:
                raise APIError(
                    f"{self.service_name} returned non-200 status ({response.status_code}) url: {full_url}",
                    status_code=response.status_code,
                    response_body=response.text,
                    brand_name=brand_name,
                    url=full_url,
                )
            return response.json()
        except ValueError as e:
            logger.warning(f"{self.service_name} invalid JSON response: {e}")
            raise APIError(
                f"Failed to decode {self.service_name} JSON response: {e}",
                status_code=response.status_code,
                brand_name=brand_name,
                url=full_url,
            ) from e
        finally:
            response.close()

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "BaseAPIClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
