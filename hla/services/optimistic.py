"""Optimistic cache patching with snapshot and rollback."""

import logging
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from hla.cache.query import QueryCache, QueryKey, Updater
from hla.core.constants import EntityType
from hla.models.paging import PaginatedResult

logger = logging.getLogger(__name__)


class PatchState(StrEnum):
    IDLE = "idle"
    PATCHED = "patched"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


def row_updater(row_id: int, changes: dict[str, Any]) -> Updater:
    """Build a cache updater that sets ``changes`` on the row with ``row_id``.

    Pages without the row are returned unchanged (same object).
    """

    def update(page: PaginatedResult[Any]) -> PaginatedResult[Any]:
        if not any(getattr(item, "id", None) == row_id for item in page.items):
            return page
        items = [
            item.model_copy(update=changes) if isinstance(item, BaseModel) and item.id == row_id else item
            for item in page.items
        ]
        return page.with_items(items)

    return update


class OptimisticPatch:
    """One optimistic change to the cached pages of an entity.

    ``apply`` cancels running fetches of the entity, snapshots every cached
    page, then patches. ``confirm`` keeps the patched pages. ``rollback``
    restores the snapshot verbatim and invalidates the entity so the next
    read goes to the backend.
    """

    def __init__(self, cache: QueryCache, entity: EntityType | str, updater: Updater) -> None:
        self.cache = cache
        self.entity = EntityType(entity)
        self.updater = updater
        self.state = PatchState.IDLE
        self._snapshot: dict[QueryKey, PaginatedResult[Any]] = {}
        self.patched_keys: list[QueryKey] = []

    @property
    def snapshot(self) -> dict[QueryKey, PaginatedResult[Any]]:
        return dict(self._snapshot)

    def _require(self, expected: PatchState, action: str) -> None:
        if self.state is not expected:
            raise RuntimeError(f"Cannot {action} an optimistic patch in state {self.state}")

    def apply(self) -> list[QueryKey]:
        """Idle -> Patched."""
        self._require(PatchState.IDLE, "apply")
        self.cache.cancel(self.entity)
        self._snapshot = self.cache.snapshot(self.entity)
        self.patched_keys = self.cache.patch(self.entity, self.updater)
        self.state = PatchState.PATCHED
        logger.debug(f"Optimistically patched {len(self.patched_keys)} page(s) of {self.entity}")
        return self.patched_keys

    def confirm(self) -> None:
        """Patched -> Confirmed."""
        self._require(PatchState.PATCHED, "confirm")
        self.state = PatchState.CONFIRMED
        self._snapshot = {}

    def rollback(self) -> None:
        """Patched -> RolledBack."""
        self._require(PatchState.PATCHED, "roll back")
        self.cache.restore(self._snapshot)
        self.cache.invalidate(self.entity)
        self.state = PatchState.ROLLED_BACK
        logger.debug(f"Rolled back {len(self._snapshot)} page(s) of {self.entity}")

