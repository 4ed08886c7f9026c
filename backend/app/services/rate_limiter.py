"""
Fixed-window request counter keyed by client address.

Built on ``limits``, the engine behind slowapi. Each client gets a window of
``window_seconds`` that starts on its first request. The counter is
incremented on every call; once it exceeds ``max_requests`` the call is
rejected until the window resets.

Clients without a resolvable address all share the ``"unknown"`` bucket.
With the default ``memory://`` storage the table is per process, so each
worker of a multi-worker deployment enforces its own quota.
"""

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from limits import RateLimitItemPerSecond
from limits.storage import Storage, storage_from_string
from limits.strategies import FixedWindowRateLimiter as FixedWindowStrategy

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int

    @property
    def reset_at_iso(self) -> str:
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat().replace("+00:00", "Z")

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at_iso,
        }


class FixedWindowRateLimiter:
    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 900,
        storage_uri: str = "memory://",
        storage: Optional[Storage] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, max(1, int(window_seconds)))
        self._storage = storage if storage is not None else storage_from_string(storage_uri)
        self._strategy = FixedWindowStrategy(self._storage)

    def check(self, client_id: Optional[str]) -> RateLimitDecision:
        """Count one request for ``client_id`` and decide whether it may proceed."""
        key = client_id or UNKNOWN_CLIENT
        allowed = self._strategy.hit(self._item, key)
        stats = self._strategy.get_window_stats(self._item, key)
        now = time.time()

        if not allowed and self._storage.get(self._item.key_for(key)) == self.max_requests + 1:
            logger.warning(f"Rate limit exceeded for client {key} ({self.max_requests} per {self.window_seconds:g}s)")

        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=stats.remaining,
            reset_at=stats.reset_time,
            retry_after=max(0, math.ceil(stats.reset_time - now)),
        )

    def reset(self) -> None:
        self._storage.reset()
