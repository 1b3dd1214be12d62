"""Paginated list fetching through the query cache."""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from hla.api.client import LeagueAPIClient
from hla.api.resources import ResourceSpec
from hla.cache.query import QueryCache, QueryKey
from hla.models.paging import PageRequest, PaginatedResult

logger = logging.getLogger(__name__)


class ListQuery:
    """Fetches pages of one entity, serving fresh pages from the cache.

    Concurrent fetches of the same key share a single request. A fetch only
    writes into the cache if no newer fetch, invalidation or cancel for the
    key happened while it was running.
    """

    def __init__(self, client: LeagueAPIClient, cache: QueryCache, resource: ResourceSpec) -> None:
        self.client = client
        self.cache = cache
        self.resource = resource

    def key_for(self, request: PageRequest) -> QueryKey:
        return QueryKey.for_request(self.resource.entity, request)

    async def fetch(self, request: PageRequest, force: bool = False) -> PaginatedResult[Any]:
        """Return one page for ``request``.

        Args:
            request: Page request (0-based page index)
            force: Skip the freshness check and always hit the backend

        Raises:
            NetworkError: No response from the backend
            HTTPStatusError: Non-2xx response
            DecodeError: Response body is not a paginated result
        """
        self.cache.evict_expired()
        key = self.key_for(request)
        if not force:
            cached = self.cache.get_fresh(key)
            if cached is not None:
                return cached
            running = self.cache.in_flight(key)
            if running is not None:
                logger.debug(f"Joining in-flight fetch for {key}")
                return await self._wait(key, request, running)

        generation = self.cache.start_request(key)
        task = asyncio.create_task(self._load(key, request, generation))
        self.cache.attach_task(key, generation, task)
        return await self._wait(key, request, task)

    async def _load(self, key: QueryKey, request: PageRequest, generation: int) -> PaginatedResult[Any]:
        params = request.query_params(self.resource.search_param)
        logger.debug(f"Fetching {self.resource.path} page {request.page} (generation {generation})")
        try:
            payload = await asyncio.to_thread(self.client.list_page, self.resource.path, params, request.auth_token)
            result = PaginatedResult.from_payload(payload, self.resource.item_model)
            self.cache.resolve(key, generation, result)
            return result
        finally:
            self.cache.finish(key, generation)

    async def _wait(
        self, key: QueryKey, request: PageRequest, task: "asyncio.Task[PaginatedResult[Any]]"
    ) -> PaginatedResult[Any]:
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            # The shared load was cancelled by the cache ahead of an optimistic patch.
            data = self.cache.get_data(key)
            if data is not None:
                return data
            return await self.fetch(request)

    async def iter_pages(self, request: PageRequest) -> AsyncIterator[PaginatedResult[Any]]:
        """Yield every page from ``request.page_index`` to the last one."""
        page_request = request
        while True:
            result = await self.fetch(page_request)
            yield result
            if not result.has_next:
                return
            page_request = page_request.with_page(page_request.page_index + 1)

    async def fetch_all(self, request: PageRequest) -> list[Any]:
        """Collect the items of every page."""
        items: list[Any] = []
        async for page in self.iter_pages(request):
            items.extend(page.items)
        return items
