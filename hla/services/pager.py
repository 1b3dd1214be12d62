"""Page navigation state for a list view."""

import logging
from collections.abc import Callable
from typing import Any

from hla.core import paging
from hla.models.paging import PaginatedResult

logger = logging.getLogger(__name__)


class Pager:
    """Tracks the current page and exposes next/previous/jump moves.

    Pages are shown 1-based; ``on_page_change`` always receives the 0-based
    index. A move that is not allowed (``previous`` on the first page,
    ``next`` when the backend reports no next page, a jump out of range)
    does nothing and returns False rather than clamping.
    """

    def __init__(self, page_size: int, on_page_change: Callable[[int], Any] | None = None) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {page_size}")
        self.page_size = page_size
        self.on_page_change = on_page_change
        self.page_index = 0
        self.total = 0
        self.total_pages = 0
        self._has_next = False
        self._has_previous = False

    @property
    def current_page(self) -> int:
        """1-based page for display."""
        return paging.to_request_page(self.page_index)

    @property
    def has_next(self) -> bool:
        return self._has_next

    @property
    def has_previous(self) -> bool:
        return self._has_previous

    @property
    def visible(self) -> bool:
        """Whether a pager is worth rendering at all."""
        return self.total_pages > 1

    def update(self, result: PaginatedResult[Any]) -> None:
        """Sync with the page the backend returned."""
        self.page_index = result.page_index
        self.page_size = result.page_size
        self.total = result.total
        self.total_pages = result.total_pages
        self._has_next = result.has_next
        self._has_previous = result.has_previous

    def reset(self) -> None:
        """Return to the first page without firing ``on_page_change``."""
        self.page_index = 0
        self._has_previous = False
        self._has_next = self.total_pages > 1

    def next(self) -> bool:
        if not self._has_next:
            return False
        return self._go(self.page_index + 1)

    def previous(self) -> bool:
        if not self._has_previous:
            return False
        return self._go(self.page_index - 1)

    def jump(self, page: int) -> bool:
        """Go to a 1-based page."""
        if page < 1 or page > self.total_pages:
            return False
        index = paging.to_page_index(page)
        if index == self.page_index:
            return False
        return self._go(index)

    def visible_pages(self) -> list[int | None]:
        """1-based page numbers to render, ``None`` marking an ellipsis."""
        return [
            None if index is None else paging.to_request_page(index)
            for index in paging.visible_pages(self.page_index, self.total_pages)
        ]

    def summary(self) -> str:
        first, last = paging.item_range(self.page_index, self.page_size, self.total)
        return f"Showing {first} to {last} of {self.total} results"

    def _go(self, index: int) -> bool:
        logger.debug(f"Page change {self.page_index} -> {index}")
        self.page_index = index
        self._has_previous = index > 0
        self._has_next = index + 1 < self.total_pages
        if self.on_page_change is not None:
            self.on_page_change(index)
        return True
