"""
In-memory single-use cache for replay protection.

The Verifier only enforces timestamp freshness on its own; plugging a
NonceCache in also rejects a second use of the same signed request inside
the replay window. Use a shared store (e.g. Redis) when running several
processes.
"""

import threading
import time
from typing import Callable, Dict

import structlog

from .constants import DEFAULT_REPLAY_WINDOW

logger = structlog.get_logger(__name__)


class NonceCache:
    """Remembers keys for ttl_seconds. Safe to share between threads."""

    def __init__(self, ttl_seconds: int = DEFAULT_REPLAY_WINDOW * 2,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, float] = {}
        self._lock = threading.Lock()

    def check_and_store(self, key: str) -> bool:
        """
        Check if key is fresh and store it.

        Args:
            key: Value identifying one request, such as its signature

        Returns:
            True if the key has not been seen within the TTL
        """
        with self._lock:
            self._cleanup()

            if key in self._cache:
                logger.warning("Replay detected", key_prefix=key[:8])
                return False

            self._cache[key] = self._clock()
            return True

    def _cleanup(self) -> None:
        """Remove expired keys."""
        current_time = self._clock()
        expired = [
            key for key, ts in self._cache.items()
            if current_time - ts > self.ttl_seconds
        ]
        for key in expired:
            del self._cache[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
