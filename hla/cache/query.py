"""In-memory query cache for paginated list results.

The cache is the only shared mutable state of the query layer. Entries are
keyed by the exact page request, so different searches, filters and pages
never evict one another. Callers outside the query layer only get the narrow
operations below; they never mutate an entry directly.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from hla.core.constants import CacheConstants, EntityType
from hla.models.paging import FilterValue, PageRequest, PaginatedResult

logger = logging.getLogger(__name__)

Listener = Callable[[EntityType], None]
Updater = Callable[[PaginatedResult[Any]], PaginatedResult[Any]]


class QueryKey(NamedTuple):
    """Identity of one cached page."""

    entity: EntityType
    search_term: str
    page_index: int
    page_size: int
    filters: tuple[tuple[str, FilterValue], ...] = ()

    @classmethod
    def for_request(cls, entity: EntityType | str, request: PageRequest) -> "QueryKey":
        return cls(
            entity=EntityType(entity),
            search_term=request.normalized_term,
            page_index=request.page_index,
            page_size=request.page_size,
            filters=tuple(sorted(request.active_filters().items())),
        )


@dataclass
class CacheEntry:
    """Last known result for a key plus its fetch bookkeeping.

    ``generation`` increases whenever a newer fetch starts or the entry is
    invalidated or cancelled; a fetch may only write if the generation it
    started with is still current.
    """

    data: PaginatedResult[Any] | None = None
    updated_at: float = 0.0
    last_accessed: float = 0.0
    invalidated: bool = False
    generation: int = 0
    in_flight: "asyncio.Task[Any] | None" = field(default=None, repr=False)


class QueryCache:
    """Keyed store of list pages with staleness, invalidation and patching."""

    def __init__(
        self,
        stale_time: float = CacheConstants.STALE_TIME,
        gc_time: float = CacheConstants.GC_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._listeners: list[Listener] = []
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(key)

    def keys_for(self, entity: EntityType | str) -> list[QueryKey]:
        entity = EntityType(entity)
        return [key for key in self._entries if key.entity == entity]

    # Reads

    def is_fresh(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.data is None or entry.invalidated:
            return False
        return self._clock() - entry.updated_at < self.stale_time

    def get_fresh(self, key: QueryKey) -> PaginatedResult[Any] | None:
        """Return cached data only if it can be served without a refetch."""
        if self.is_fresh(key):
            entry = self._entries[key]
            entry.last_accessed = self._clock()
            self.hits += 1
            logger.debug(f"Cache hit for {key}")
            return entry.data
        self.misses += 1
        return None

    def get_data(self, key: QueryKey) -> PaginatedResult[Any] | None:
        """Return whatever data the entry holds, stale or not."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.last_accessed = self._clock()
        return entry.data

    def in_flight(self, key: QueryKey) -> "asyncio.Task[Any] | None":
        entry = self._entries.get(key)
        if entry is None or entry.in_flight is None or entry.in_flight.done():
            return None
        return entry.in_flight

    # Fetch bookkeeping

    def start_request(self, key: QueryKey) -> int:
        """Register a new fetch for ``key`` and return its generation."""
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = CacheEntry(last_accessed=self._clock())
        entry.generation += 1
        return entry.generation

    def attach_task(self, key: QueryKey, generation: int, task: "asyncio.Task[Any]") -> None:
        entry = self._entries.get(key)
        if entry is not None and entry.generation == generation:
            entry.in_flight = task

    def resolve(self, key: QueryKey, generation: int, data: PaginatedResult[Any]) -> bool:
        """Store a fetch result if its generation is still current.

        Returns:
            False when a newer fetch, invalidation or cancel superseded it
        """
        entry = self._entries.get(key)
        if entry is None or entry.generation != generation:
            logger.debug(f"Dropping superseded result for {key} (generation {generation})")
            return False
        now = self._clock()
        entry.data = data
        entry.updated_at = now
        entry.last_accessed = now
        entry.invalidated = False
        entry.in_flight = None
        self._notify(key.entity)
        return True

    def finish(self, key: QueryKey, generation: int) -> None:
        """Clear the in-flight handle of a fetch that ended without resolving."""
        entry = self._entries.get(key)
        if entry is not None and entry.generation == generation:
            entry.in_flight = None

    # Mutation support

    def invalidate(self, entity: EntityType | str) -> int:
        """Mark every entry of ``entity`` stale so the next read refetches.

        Fetches already running keep running for their callers but can no
        longer write into the cache.
        """
        keys = self.keys_for(entity)
        for key in keys:
            entry = self._entries[key]
            entry.invalidated = True
            entry.generation += 1
            entry.in_flight = None
        logger.debug(f"Invalidated {len(keys)} cached page(s) for {entity}")
        if keys:
            self._notify(EntityType(entity))
        return len(keys)

    def cancel(self, entity: EntityType | str) -> int:
        """Cancel running fetches of ``entity`` so none can overwrite a patch.

        Returns:
            Number of tasks cancelled
        """
        cancelled = 0
        for key in self.keys_for(entity):
            entry = self._entries[key]
            entry.generation += 1
            task = entry.in_flight
            entry.in_flight = None
            if task is not None and not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug(f"Cancelled {cancelled} in-flight fetch(es) for {entity}")
        return cancelled

    def snapshot(self, entity: EntityType | str) -> dict[QueryKey, PaginatedResult[Any]]:
        """Deep copies of every populated entry of ``entity``."""
        return {
            key: entry.data.model_copy(deep=True)
            for key, entry in self._entries.items()
            if key.entity == EntityType(entity) and entry.data is not None
        }

    def restore(self, snapshot: dict[QueryKey, PaginatedResult[Any]]) -> None:
        """Put snapshotted data back exactly as it was taken."""
        entities: set[EntityType] = set()
        for key, data in snapshot.items():
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = CacheEntry(updated_at=self._clock(), last_accessed=self._clock())
            entry.data = data
            entities.add(key.entity)
        for entity in entities:
            self._notify(entity)

    def patch(self, entity: EntityType | str, updater: Updater) -> list[QueryKey]:
        """Replace the data of every populated entry of ``entity``.

        ``updater`` must return a new result (or the same object when the
        page is unaffected); it must not modify its argument.

        Returns:
            Keys whose data changed
        """
        changed = []
        for key in self.keys_for(entity):
            entry = self._entries[key]
            if entry.data is None:
                continue
            updated = updater(entry.data)
            if updated is not entry.data:
                entry.data = updated
                changed.append(key)
        if changed:
            self._notify(EntityType(entity))
        return changed

    # Housekeeping

    def evict_expired(self) -> int:
        """Drop idle entries not read for longer than ``gc_time``."""
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if self.in_flight(key) is None and now - entry.last_accessed >= self.gc_time
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} idle cache entries")
        return len(expired)

    def clear(self) -> None:
        for entry in self._entries.values():
            if entry.in_flight is not None and not entry.in_flight.done():
                entry.in_flight.cancel()
        self._entries.clear()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(entity)`` whenever an entity's cached data changes.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}

    def _notify(self, entity: EntityType) -> None:
        for listener in list(self._listeners):
            listener(entity)
