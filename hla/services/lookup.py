"""Resolve user-typed names to entity ids."""

import logging
from typing import Any

from rapidfuzz import fuzz, process

from hla.core.constants import APIConstants, LookupConstants
from hla.exceptions import ValidationError
from hla.models.paging import FilterValue, PageRequest
from hla.services.list_query import ListQuery

logger = logging.getLogger(__name__)


class EntityLookup:
    """Fuzzy name-to-id resolution over every row of an entity.

    Rows are loaded once through the list query (and so through the query
    cache) and matched with rapidfuzz. Numeric input is taken as an id.
    """

    def __init__(
        self,
        query: ListQuery,
        field: str,
        auth_token: str | None = None,
        filters: dict[str, FilterValue] | None = None,
        score_cutoff: int = LookupConstants.MATCH_SCORE_CUTOFF,
    ) -> None:
        self.query = query
        self.field = field
        self.auth_token = auth_token
        self.filters = filters or {}
        self.score_cutoff = score_cutoff
        self._choices: dict[int, str] | None = None

    async def choices(self) -> dict[int, str]:
        """Map of id to display name for every row."""
        if self._choices is None:
            request = PageRequest(
                page_size=APIConstants.MAX_PAGE_SIZE, auth_token=self.auth_token, filters=self.filters
            )
            rows: list[Any] = await self.query.fetch_all(request)
            self._choices = {row.id: row.display_name for row in rows}
            logger.debug(f"Loaded {len(self._choices)} {self.query.resource.entity} choices")
        return self._choices

    async def resolve(self, value: str | int) -> int:
        """Return the id for an id or a (possibly misspelled) name.

        Raises:
            ValidationError: When nothing scores above the cutoff
        """
        if isinstance(value, int):
            return value
        text = value.strip()
        if text.isdigit():
            return int(text)
        if not text:
            raise ValidationError(self.field, value, f"{self.field.replace('_', ' ').capitalize()} is required")

        choices = await self.choices()
        match = process.extractOne(
            text.lower(),
            {row_id: name.lower() for row_id, name in choices.items()},
            scorer=fuzz.WRatio,
            score_cutoff=self.score_cutoff,
        )
        if match is None:
            raise ValidationError(self.field, value, f"No {self.query.resource.label.lower()} matches '{text}'")

        # process.extractOne with dict returns (value, score, key)
        _, score, row_id = match
        logger.debug(f"Resolved '{text}' to {self.query.resource.label} {row_id} ({choices[row_id]}, score {score:.0f})")
        return int(row_id)
