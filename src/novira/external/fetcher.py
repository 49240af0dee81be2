"""ZIP archive download with per-URL retries and shared rate limiting."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable, Sequence

import requests

from novira.external.config import DEFAULT_REQUEST_INTERVAL_SECONDS, DEFAULT_REQUEST_TIMEOUT_SECONDS, DEFAULT_RETRY_COUNT
from novira.external.throttle import SHARED_THROTTLE, RequestThrottle

logger = logging.getLogger(__name__)

ZIP_ACCEPT_HEADER = "application/zip, application/octet-stream;q=0.9, */*;q=0.8"
BACKOFF_BASE_SECONDS = 0.4


def is_retriable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


@dataclass(slots=True)
class ArchiveFetchError(RuntimeError):
    """Every candidate URL failed; `failures` lists "url -> outcome" entries."""

    work_id: str
    failures: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        detail = "; ".join(self.failures) or "no candidate URLs"
        return f"Archive download failed for work {self.work_id}: {detail}"


@dataclass(slots=True)
class FetchedArchive:
    url: str
    content: bytes


class ArchiveFetcher:
    """Try candidate URLs in order and return the first successful payload."""

    def __init__(
        self,
        *,
        user_agent: str,
        retries_per_url: int = DEFAULT_RETRY_COUNT,
        min_interval_seconds: float = DEFAULT_REQUEST_INTERVAL_SECONDS,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        backoff_base_seconds: float = BACKOFF_BASE_SECONDS,
        session: Any | None = None,
        throttle: RequestThrottle | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if retries_per_url < 1:
            raise ValueError("retries_per_url must be >= 1")
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds cannot be negative")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self._user_agent = user_agent
        self._retries_per_url = retries_per_url
        self._min_interval_seconds = min_interval_seconds
        self._timeout_seconds = timeout_seconds
        self._backoff_base_seconds = backoff_base_seconds
        self._session = session or requests.Session()
        self._throttle = throttle or SHARED_THROTTLE
        self._sleep = sleep

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent, "Accept": ZIP_ACCEPT_HEADER}

    def fetch_first(self, urls: Sequence[str], *, work_id: str) -> FetchedArchive:
        failures: list[str] = []
        for url in urls:
            archive = self._fetch_url(url, failures)
            if archive is not None:
                return archive
        raise ArchiveFetchError(work_id=work_id, failures=failures)

    def _fetch_url(self, url: str, failures: list[str]) -> FetchedArchive | None:
        for attempt in range(1, self._retries_per_url + 1):
            is_last = attempt == self._retries_per_url
            self._throttle.wait(self._min_interval_seconds)

            try:
                response = self._session.get(url, headers=self.headers, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                if is_last:
                    failures.append(f"{url} -> {exc}")
                    logger.warning("Giving up on %s after %d attempt(s): %s", url, attempt, exc)
                    return None
                logger.info("Retrying %s after network error: %s", url, exc)
                self._sleep(self._backoff_delay(attempt))
                continue

            status_code = int(response.status_code)
            if 200 <= status_code < 300:
                return FetchedArchive(url=url, content=response.content)

            if not is_retriable_status(status_code) or is_last:
                failures.append(f"{url} -> HTTP {status_code}")
                logger.warning("Archive request failed: %s -> HTTP %d", url, status_code)
                return None

            logger.info("Retrying %s after HTTP %d", url, status_code)
            self._sleep(self._backoff_delay(attempt))

        return None

    def _backoff_delay(self, attempt: int) -> float:
        return self._backoff_base_seconds * (2**attempt)
