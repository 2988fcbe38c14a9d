"""Bounded-recency cache for scan-style pollers.

A scan sees every customer on every pass. The window suppresses
reclassifying a customer seen less than ``window_seconds`` ago. Losing the
window only costs redundant work; classification is idempotent.
"""

import time
from collections.abc import Callable


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


class DedupWindow:
    """Remembers when each key was last admitted.

    Owned by exactly one consumer instance; not shared between consumers.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        clock: Callable[[], int] = _now_millis,
    ) -> None:
        """Initialize the window.

        Args:
            window_seconds: How long an admitted key is suppressed
            clock: Source of epoch milliseconds when a call omits ``now_millis``
        """
        self._window_millis = int(window_seconds * 1000)
        self._clock = clock
        self._last_seen: dict[str, int] = {}

    def should_process(self, key: str, now_millis: int | None = None) -> bool:
        """Admit ``key`` unless it was admitted within the window.

        An admitted key is recorded with ``now_millis`` as its last-seen
        time; a suppressed key keeps its earlier timestamp.
        """
        now = self._clock() if now_millis is None else now_millis
        last_seen = self._last_seen.get(key)
        if last_seen is not None and now - last_seen < self._window_millis:
            return False
        self._last_seen[key] = now
        return True

    def evict_expired(self, now_millis: int | None = None) -> int:
        """Forget keys whose window has passed. Returns the number evicted."""
        now = self._clock() if now_millis is None else now_millis
        expired = [
            key for key, seen in self._last_seen.items() if now - seen >= self._window_millis
        ]
        for key in expired:
            del self._last_seen[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._last_seen)

    def clear(self) -> None:
        self._last_seen.clear()
