"""
Minimum-interval request throttle.

One limiter instance is shared by whoever owns it (the backend keeps one on
``app.state``). The caller passes the current time in, which keeps the
limiter deterministic under test.
"""

import threading
from typing import Optional

from loguru import logger

from .errors import RateLimitError


class RateLimiter:
    """Rejects a request that arrives sooner than ``min_interval_ms`` after the last accepted one."""

    def __init__(self, min_interval_ms: int = 1000):
        self.min_interval_ms = min_interval_ms
        self._last_accepted: Optional[int] = None
        self._lock = threading.Lock()

    def check(self, now_ms: int) -> None:
        """
        Accept or reject a request made at ``now_ms``.

        Raises:
            RateLimitError: if the previous accepted request was too recent
        """
        with self._lock:
            if self._last_accepted is not None:
                elapsed = now_ms - self._last_accepted
                if elapsed < self.min_interval_ms:
                    retry_after = self.min_interval_ms - elapsed
                    logger.info("Rate limited; retry in {} ms", retry_after)
                    raise RateLimitError(retry_after_ms=retry_after)
            self._last_accepted = now_ms

    def reset(self) -> None:
        with self._lock:
            self._last_accepted = None
