"""In-memory TTL cache for GitHub API responses."""
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar


logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the time it was fetched."""
    key: str
    payload: Any
    fetched_at: float


class ResponseCache:
    """Key/value store of API responses with a fixed time-to-live.

    Entries are never evicted; an entry older than the TTL is simply treated
    as absent and overwritten by the next fetch. Concurrent misses on the
    same key are not deduplicated, so both callers fetch and the last write
    wins.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Age after which an entry is stale
            clock: Monotonic time source, injectable for tests
        """
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def _is_live(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self._ttl

    def get(self, key: str) -> Optional[Any]:
        """Return the live payload for ``key`` or None."""
        entry = self._entries.get(key)
        if entry is None or not self._is_live(entry):
            return None
        return entry.payload

    async def get_or_fetch(self, key: str, fetch_fn: Callable[[], Awaitable[T]]) -> T:
        """Return the cached payload for ``key`` or fetch and store it.

        Args:
            key: Logical identity of the request, e.g. ``repos:octocat``
            fetch_fn: Coroutine function performing the network call

        Returns:
            The live cached payload, or the freshly fetched one

        Raises:
            Whatever ``fetch_fn`` raises; nothing is stored in that case
        """
        entry = self._entries.get(key)
        if entry is not None and self._is_live(entry):
            logger.debug(f"Using cached data for {key}")
            return entry.payload

        payload = await fetch_fn()
        self._entries[key] = CacheEntry(key=key, payload=payload, fetched_at=self._clock())
        return payload

    def clear(self) -> None:
        """Drop every stored entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
