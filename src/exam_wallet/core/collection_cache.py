"""
collection_cache.py - time-boxed in-memory cache of one remote collection.

Holds the last fetched rows together with the fetch timestamp, a loading flag and
the last error. A fetch is skipped while the data is fresh or while another fetch
is outstanding. A successful fetch replaces the rows wholesale; a failed fetch keeps
what is held (or installs the seed fallback when nothing is held) and re-raises.

Example:
    cache = CollectionCache("exams", loader=load_exams, fallback=seed_exams)
    exams = await cache.fetch()
"""

import time
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from ..utils.log_utils import get_logger
from .errors import RemoteError

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_FRESHNESS_SECONDS = 60 * 60


class CacheState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CollectionCache(Generic[T]):
    """Cache entry for a single remote collection, shared by all of its consumers."""

    def __init__(
        self,
        name: str,
        loader: Callable[[], Awaitable[List[T]]],
        fallback: Optional[Callable[[], List[T]]] = None,
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self._loader = loader
        self._fallback = fallback
        self.freshness_seconds = freshness_seconds
        self._clock = clock

        self.items: List[T] = []
        self.last_fetched: Optional[float] = None
        self.loading: bool = False
        self.error: Optional[BaseException] = None

    @property
    def state(self) -> CacheState:
        if self.loading:
            return CacheState.LOADING
        if self.error is not None:
            return CacheState.ERROR
        if self.last_fetched is None:
            return CacheState.EMPTY
        return CacheState.READY

    def is_fresh(self) -> bool:
        """True if the held rows were stamped within the freshness window."""
        if self.last_fetched is None:
            return False
        return self._clock() - self.last_fetched < self.freshness_seconds

    async def fetch(self, force: bool = False) -> List[T]:
        """Return the held rows, fetching them first unless fresh or already loading.

        Args:
            force: Ignore the freshness window.

        Raises:
            RemoteError: if the loader failed. The held rows (or the fallback) stay in place.
        """
        if self.loading:
            logger.debug("Fetch of %s already in progress, skipping", self.name)
            return self.items
        if not force and self.is_fresh():
            logger.debug("Serving %d cached %s", len(self.items), self.name)
            return self.items

        self.loading = True
        self.error = None
        try:
            rows = await self._loader()
        except Exception as err:
            self.error = err
            logger.error("Error fetching %s: %s", self.name, err)
            if not self.items and self._fallback is not None:
                logger.warning("Using fallback data for %s", self.name)
                self.items = list(self._fallback())
                self.last_fetched = self._clock()
            if isinstance(err, RemoteError):
                raise
            raise RemoteError(f"Failed to fetch {self.name}: {err}") from err
        finally:
            self.loading = False

        self.items = list(rows)
        self.last_fetched = self._clock()
        logger.info("Fetched %d %s", len(self.items), self.name)
        return self.items

    def patch(self, predicate: Callable[[T], bool], update: Callable[[T], T]) -> int:
        """Replace matching items in place. Does not touch the fetch timestamp.

        Returns:
            Number of items updated.
        """
        count = 0
        for i, item in enumerate(self.items):
            if predicate(item):
                self.items[i] = update(item)
                count += 1
        return count

    def append(self, item: T) -> None:
        self.items.append(item)

    def remove(self, predicate: Callable[[T], bool]) -> int:
        before = len(self.items)
        self.items[:] = [item for item in self.items if not predicate(item)]
        return before - len(self.items)

    def invalidate(self) -> None:
        """Forget the fetch timestamp so the next fetch goes to the remote."""
        self.last_fetched = None

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "total_items": len(self.items),
            "last_fetched": datetime.fromtimestamp(self.last_fetched).isoformat() if self.last_fetched else None,
            "fresh": self.is_fresh(),
            "error": str(self.error) if self.error else None,
        }
