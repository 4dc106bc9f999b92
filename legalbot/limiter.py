"""Sliding-window rate limiting per user."""

from __future__ import annotations

import threading
import time
from collections import defaultdict, deque
from datetime import timedelta
from typing import Callable, Deque, Dict, Union


class RateLimiter:
    """Allow at most ``limit`` events per user within a sliding ``window``.

    ``window`` is given in seconds (or as a ``timedelta``); ``now`` is a clock
    returning seconds and defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        limit: int,
        window: Union[float, timedelta],
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window = window.total_seconds() if isinstance(window, timedelta) else float(window)
        self._now = now
        self._lock = threading.Lock()
        self._users: Dict[int, Deque[float]] = defaultdict(deque)

    def allow(self, user: int) -> bool:
        """Record an event for ``user`` and report whether it is permitted."""
        moment = self._now()
        cutoff = moment - self.window
        with self._lock:
            bucket = self._users[user]
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()
            if len(bucket) >= self.limit:
                return False
            bucket.append(moment)
            return True