"""Rate limiting backend implementations."""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Dict, Tuple

from .exceptions import RateLimitBackendError

logger = logging.getLogger(__name__)


class LimiterBackend(ABC):
    """Abstract base class for rate limiting backends."""

    @abstractmethod
    def incr_and_get(self, key: str, window_seconds: int) -> Tuple[int, int]:
        """
        Atomically increment the counter for `key` in the current fixed window.
        Return (count, ttl_remaining_seconds).
        window_id = floor(epoch / window_seconds)
        ttl_remaining_seconds = ((window_id+1)*window_seconds) - now
        """


class MemoryBackend(LimiterBackend):
    """Thread-safe in-memory fixed window counters, one slot per key."""

    def __init__(self):
        # key -> (window_id, count); a stale window_id means the slot has expired
        self._slots: Dict[str, Tuple[int, int]] = {}
        self._lock = threading.Lock()

    def incr_and_get(self, key: str, window_seconds: int) -> Tuple[int, int]:
        try:
            with self._lock:
                now = time.time()
                window_id = int(now // window_seconds)
                ttl_remaining = max(int((window_id + 1) * window_seconds - now), 1)

                slot_window, count = self._slots.get(key, (window_id, 0))
                if slot_window != window_id:
                    count = 0
                count += 1
                self._slots[key] = (window_id, count)

                if len(self._slots) > 10000:
                    self._evict_expired(window_id)

                return count, ttl_remaining
        except Exception as e:
            logger.error(
                "Memory backend error during incr_and_get",
                extra={"key": key, "window_seconds": window_seconds, "error": str(e)},
                exc_info=True
            )
            raise RateLimitBackendError(f"Memory backend failed: {str(e)}", str(e))

    def _evict_expired(self, current_window_id: int) -> None:
        expired = [k for k, (window_id, _) in self._slots.items() if window_id < current_window_id]
        for k in expired:
            del self._slots[k]

