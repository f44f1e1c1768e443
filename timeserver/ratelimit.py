"""Fixed-window rate limiting keyed by client identifier.

Windows are aligned to the wall clock: a client may be admitted up to
``limit`` times in each ``window_ms`` slice. Bursts straddling a window
boundary are allowed. Entries are never evicted, so memory grows with the
number of distinct client identifiers seen.
"""

import math
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

UNKNOWN_CLIENT = "unknown"
DEFAULT_CLIENT_IP_HEADERS = ("CF-Connecting-IP", "X-Forwarded-For", "X-Real-IP")


@dataclass
class RateWindow:
    """Admission count for one client in one window."""

    count: int
    window_end: int


class FixedWindowRateLimiter:
    """Admits at most ``limit`` requests per client per clock-aligned window."""

    def __init__(
        self,
        limit: int = 60,
        window_ms: int = 60_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit <= 0 or window_ms <= 0:
            raise ValueError("limit and window_ms must be positive")
        self.limit = limit
        self.window_ms = window_ms
        self._clock = clock
        self._windows: dict[str, RateWindow] = {}
        self._lock = threading.Lock()

    @property
    def retry_after_seconds(self) -> int:
        return math.ceil(self.window_ms / 1000)

    def admit(self, client_id: str, now_ms: int | None = None) -> bool:
        """Record a request and decide whether it may proceed.

        Args:
            client_id: Identifier of the calling client.
            now_ms: Current time in epoch milliseconds. Defaults to the limiter clock.

        Returns:
            True if admitted, False if the client exhausted its window.
        """
        if now_ms is None:
            now_ms = int(self._clock() * 1000)
        window_start = now_ms // self.window_ms * self.window_ms

        with self._lock:
            window = self._windows.get(client_id)
            if window is None or window.window_end < window_start + self.window_ms:
                self._windows[client_id] = RateWindow(count=1, window_end=window_start + self.window_ms)
                return True

            if window.count >= self.limit:
                return False

            window.count += 1
            return True

    def window_for(self, client_id: str) -> RateWindow | None:
        with self._lock:
            return self._windows.get(client_id)

    def __len__(self) -> int:
        return len(self._windows)


def client_identifier(
    headers: Mapping[str, str],
    trusted_headers: Iterable[str] = DEFAULT_CLIENT_IP_HEADERS,
) -> str:
    """Identify the client from the first present proxy header.

    Clients without any of the headers share the ``"unknown"`` bucket.
    """
    for name in trusted_headers:
        value = headers.get(name)
        if value and value.strip():
            return value.strip()
    return UNKNOWN_CLIENT
