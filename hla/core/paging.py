"""Page index translation and pagination arithmetic.

The UI and the query layer count pages from 0 (``page_index``); the backend
counts from 1 (``page``). Every conversion between the two goes through this
module.
"""

from typing import NamedTuple

from hla.core.constants import PagerConstants


class PageMeta(NamedTuple):
    """Derived pagination flags for a result page."""

    total_pages: int
    has_next: bool
    has_previous: bool


def to_request_page(page_index: int) -> int:
    """Convert a 0-based page index to the 1-based page sent to the backend."""
    if page_index < 0:
        raise ValueError(f"page_index must be >= 0, got {page_index}")
    return page_index + 1


def to_page_index(page: int) -> int:
    """Convert a 1-based backend page back to the 0-based page index."""
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    return page - 1


def total_pages_for(total: int, page_size: int) -> int:
    """Return ``ceil(total / page_size)``."""
    if page_size <= 0:
        raise ValueError(f"page_size must be > 0, got {page_size}")
    if total < 0:
        raise ValueError(f"total must be >= 0, got {total}")
    return (total + page_size - 1) // page_size


def page_meta(total: int, page: int, page_size: int) -> PageMeta:
    """Compute total pages and navigation flags for a 1-based page."""
    total_pages = total_pages_for(total, page_size)
    return PageMeta(
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


def item_range(page_index: int, page_size: int, total: int) -> tuple[int, int]:
    """Return the 1-based (first, last) item numbers shown on a page.

    Returns ``(0, 0)`` for an empty result set.
    """
    if total <= 0:
        return 0, 0
    first = page_index * page_size + 1
    last = min((page_index + 1) * page_size, total)
    return first, last


def visible_pages(
    page_index: int,
    total_pages: int,
    max_visible: int = PagerConstants.MAX_VISIBLE_PAGES,
    neighbours: int = PagerConstants.NEIGHBOUR_PAGES,
) -> list[int | None]:
    """Return the 0-based page indices a pager should render.

    ``None`` marks an ellipsis. The first and last pages are always shown,
    together with ``neighbours`` pages either side of the current one.
    """
    if total_pages <= max_visible:
        return list(range(total_pages))

    pages: list[int | None] = [0]
    if page_index > neighbours + 1:
        pages.append(None)

    start = max(1, page_index - neighbours)
    end = min(total_pages - 1, page_index + neighbours)
    pages.extend(index for index in range(start, end + 1) if index != total_pages - 1)

    if page_index < total_pages - neighbours - 2:
        pages.append(None)

    pages.append(total_pages - 1)
    return pages
