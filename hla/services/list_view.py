"""View model tying search, paging and the list query together."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from hla.cache.query import QueryKey
from hla.core.constants import EntityType
from hla.core.debounce import Debouncer
from hla.exceptions import APIError
from hla.models.paging import FilterValue, PageRequest, PaginatedResult
from hla.services.list_query import ListQuery
from hla.services.pager import Pager

logger = logging.getLogger(__name__)


class ListViewModel:
    """State behind one entity table.

    Typed search text goes through a debouncer; only the committed term is
    fetched, and committing a different term resets the pager to the first
    page before the fetch. When several fetches overlap, the result of the
    most recently started one wins regardless of arrival order.
    """

    def __init__(
        self,
        query: ListQuery,
        page_size: int,
        debounce_seconds: float,
        auth_token: str | None = None,
        filters: dict[str, FilterValue] | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.query = query
        self.page_size = page_size
        self.auth_token = auth_token
        self.filters: dict[str, FilterValue] = dict(filters or {})
        self.on_change = on_change

        self.search_term = ""
        self.result: PaginatedResult[Any] | None = None
        self.error: APIError | None = None
        self.loading = False

        self.pager = Pager(page_size, on_page_change=self._on_page_change)
        self.debouncer: Debouncer[str] = Debouncer(debounce_seconds, self.set_search_term)
        self._sequence = 0
        self._refresh_task: asyncio.Task[Any] | None = None
        self._unsubscribe = query.cache.subscribe(self._on_cache_change)

    @property
    def entity(self) -> EntityType:
        return self.query.resource.entity

    @property
    def rows(self) -> list[Any]:
        return list(self.result.items) if self.result else []

    def current_request(self) -> PageRequest:
        return PageRequest(
            search_term=self.search_term,
            page_index=self.pager.page_index,
            page_size=self.page_size,
            auth_token=self.auth_token,
            filters=self.filters,
        )

    def current_key(self) -> QueryKey:
        return self.query.key_for(self.current_request())

    def type_search(self, text: str) -> None:
        """Record a keystroke; the term is committed once typing pauses."""
        self.debouncer.submit(text)

    async def set_search_term(self, term: str) -> PaginatedResult[Any] | None:
        """Commit a search term, resetting to the first page if it changed."""
        term = term.strip()
        if term == self.search_term and self.result is not None:
            return self.result
        if term != self.search_term:
            logger.debug(f"Search term changed to {term!r}; resetting to first page")
            self.search_term = term
            self.pager.reset()
        return await self.refresh()

    async def refresh(self, force: bool = False) -> PaginatedResult[Any] | None:
        """Fetch the current page.

        Errors are kept on ``error`` for the caller to render a retry
        affordance; the previous rows stay visible.
        """
        self._sequence += 1
        sequence = self._sequence
        self.loading = True
        self._changed()
        try:
            result = await self.query.fetch(self.current_request(), force=force)
        except APIError as e:
            if sequence == self._sequence:
                logger.warning(f"Loading {self.entity} failed: {e.message}")
                self.error = e
                self.loading = False
                self._changed()
            return None

        if sequence != self._sequence:
            logger.debug(f"Ignoring superseded {self.entity} response (request {sequence})")
            return None
        entry = self.query.cache.entry(self.current_key())
        if entry is not None and entry.invalidated:
            # Invalidated while this fetch was running; its rows predate the change
            logger.debug(f"{self.entity} invalidated during load; fetching again")
            return await self.refresh()
        self.result = result
        self.error = None
        self.loading = False
        self.pager.update(result)
        self._changed()
        return result

    async def retry(self) -> PaginatedResult[Any] | None:
        return await self.refresh(force=True)

    async def next_page(self) -> bool:
        return await self._move(self.pager.next)

    async def previous_page(self) -> bool:
        return await self._move(self.pager.previous)

    async def jump_to(self, page: int) -> bool:
        """Jump to a 1-based page."""
        return await self._move(lambda: self.pager.jump(page))

    async def _move(self, move: Callable[[], bool]) -> bool:
        if not move():
            return False
        if self._refresh_task is not None:
            await self._refresh_task
        return True

    def _on_page_change(self, page_index: int) -> None:
        self._refresh_task = asyncio.ensure_future(self.refresh())

    def _on_cache_change(self, entity: EntityType) -> None:
        if entity != self.entity:
            return
        key = self.current_key()
        entry = self.query.cache.entry(key)
        if entry is None:
            return
        if entry.data is not None and entry.data is not self.result:
            self.result = entry.data
            self._changed()
        if entry.invalidated and not self.loading:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                return
            self._refresh_task = asyncio.ensure_future(self.refresh())

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def close(self) -> None:
        self.debouncer.cancel()
        self._unsubscribe()
