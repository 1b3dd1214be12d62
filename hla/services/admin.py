"""Wiring of client, cache and services for one session."""

import logging
from typing import Any

from hla.api.client import LeagueAPIClient
from hla.api.resources import get_resource
from hla.cache.query import QueryCache
from hla.config import Config
from hla.core.constants import EntityType
from hla.models.paging import FilterValue
from hla.services.list_query import ListQuery
from hla.services.list_view import ListViewModel
from hla.services.lookup import EntityLookup
from hla.services.match_detail import MatchDetailService
from hla.services.mutations import MutationDispatcher
from hla.services.notifications import ConsoleNotifier, Notifier

logger = logging.getLogger(__name__)


class LeagueAdmin:
    """Owns the API client and the query cache shared by every entity."""

    def __init__(
        self,
        config: Config,
        auth_token: str | None = None,
        notifier: Notifier | None = None,
        client: LeagueAPIClient | None = None,
    ) -> None:
        self.config = config
        self.auth_token = auth_token
        self.client = client or LeagueAPIClient(config.api_url, timeout=config.request_timeout)
        self.cache = QueryCache(stale_time=config.stale_time, gc_time=config.gc_time)
        self.notifier: Notifier = notifier or ConsoleNotifier()
        self.mutations = MutationDispatcher(self.client, self.cache, self.notifier)
        self.match_details = MatchDetailService(self.client, self.cache, self.notifier)
        self._queries: dict[EntityType, ListQuery] = {}

    def __enter__(self) -> "LeagueAdmin":
        self.client.open()
        return self

    def __exit__(self, *args: Any) -> None:
        logger.debug(f"Query cache stats: {self.cache.stats()}")
        self.cache.clear()
        self.client.close()

    def query(self, entity: EntityType | str) -> ListQuery:
        entity = EntityType(entity)
        if entity not in self._queries:
            self._queries[entity] = ListQuery(self.client, self.cache, get_resource(entity))
        return self._queries[entity]

    def list_view(
        self,
        entity: EntityType | str,
        page_size: int | None = None,
        filters: dict[str, FilterValue] | None = None,
        on_change: Any = None,
    ) -> ListViewModel:
        return ListViewModel(
            self.query(entity),
            page_size=page_size or self.config.page_size,
            debounce_seconds=self.config.search_debounce_seconds,
            auth_token=self.auth_token,
            filters=filters,
            on_change=on_change,
        )

    def lookup(
        self, entity: EntityType | str, field: str, filters: dict[str, FilterValue] | None = None
    ) -> EntityLookup:
        return EntityLookup(self.query(entity), field, auth_token=self.auth_token, filters=filters)
