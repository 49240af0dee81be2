"""Process-wide minimum spacing between outbound archive requests."""

from __future__ import annotations

import threading
import time
from typing import Callable


class RequestThrottle:
    """Lock-guarded "last request" watermark.

    The lock is held while sleeping, so concurrent importers queue up and
    each request starts at least `min_interval_seconds` after the previous one.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_request_at: float | None = None

    def wait(self, min_interval_seconds: float) -> None:
        with self._lock:
            if self._last_request_at is not None:
                elapsed = self._clock() - self._last_request_at
                if elapsed < min_interval_seconds:
                    self._sleep(min_interval_seconds - elapsed)
            self._last_request_at = self._clock()


SHARED_THROTTLE = RequestThrottle()
