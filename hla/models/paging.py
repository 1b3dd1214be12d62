"""Page request and paginated result models."""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from hla.core.paging import page_meta, to_page_index, to_request_page
from hla.exceptions import DecodeError

T = TypeVar("T")

FilterValue = str | int | bool | None

RESULT_FIELDS = ("items", "total", "page", "page_size", "total_pages", "has_next", "has_previous")


class PageRequest(BaseModel):
    """One page of a list query, as the UI describes it (0-based)."""

    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    page_index: int = Field(default=0, ge=0)
    page_size: int = Field(gt=0)
    auth_token: str | None = Field(default=None, repr=False)
    filters: dict[str, FilterValue] = Field(default_factory=dict)

    @property
    def page(self) -> int:
        """1-based page sent to the backend."""
        return to_request_page(self.page_index)

    @property
    def normalized_term(self) -> str:
        return self.search_term.strip()

    def active_filters(self) -> dict[str, FilterValue]:
        """Filters with empty values dropped."""
        return {key: value for key, value in self.filters.items() if value is not None and value != ""}

    def with_page(self, page_index: int) -> "PageRequest":
        return self.model_copy(update={"page_index": page_index})

    def query_params(self, search_param: str | None) -> dict[str, Any]:
        """Build the outgoing query string.

        An empty search term is left out entirely rather than sent as an
        empty filter. Booleans are lowered to ``true``/``false``.

        Args:
            search_param: Backend field receiving the search term, or None
                when the entity has no free-text filter
        """
        params: dict[str, Any] = {"page": self.page, "page_size": self.page_size}
        if search_param and self.normalized_term:
            params[search_param] = self.normalized_term
        for key, value in sorted(self.active_filters().items()):
            params[key] = str(value).lower() if isinstance(value, bool) else value
        return params


class PaginatedResult(BaseModel, Generic[T]):
    """One page of entities as returned by the backend (1-based ``page``)."""

    items: list[T]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    page_size: int = Field(gt=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, items: Sequence[T], total: int, page: int, page_size: int) -> "PaginatedResult[T]":
        """Construct a result with derived page counts and navigation flags."""
        meta = page_meta(total, page, page_size)
        return cls(
            items=list(items),
            total=total,
            page=page,
            page_size=page_size,
            total_pages=meta.total_pages,
            has_next=meta.has_next,
            has_previous=meta.has_previous,
        )

    @classmethod
    def from_payload(cls, payload: Any, item_model: type[T]) -> "PaginatedResult[T]":
        """Decode a backend payload into a typed result.

        Raises:
            DecodeError: If the payload is not an object with every result
                field, ``items`` is not a list, or an item fails validation
        """
        if not isinstance(payload, dict):
            raise DecodeError(f"Expected a paginated object, got {type(payload).__name__}")
        missing = [name for name in RESULT_FIELDS if name not in payload]
        if missing:
            raise DecodeError(f"Paginated response missing fields: {', '.join(missing)}")
        if not isinstance(payload["items"], list):
            raise DecodeError(f"Paginated 'items' must be a list, got {type(payload['items']).__name__}")
        try:
            return PaginatedResult[item_model].model_validate(payload)  # type: ignore[valid-type]
        except PydanticValidationError as e:
            raise DecodeError(f"Malformed paginated response: {e.error_count()} invalid field(s)") from e

    @property
    def page_index(self) -> int:
        """0-based index of this page."""
        return to_page_index(self.page)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def with_items(self, items: Sequence[T]) -> "PaginatedResult[T]":
        """Copy with the rows replaced; counts and flags unchanged."""
        return self.model_copy(update={"items": list(items)})
