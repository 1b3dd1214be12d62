"""Shared table layout and row formatting for list, export and TUI modes."""

import logging
from datetime import datetime
from typing import Any

import dateparser
from pydantic import BaseModel, Field

from hla.core.constants import EntityType
from hla.models.league import LeagueEntity

logger = logging.getLogger(__name__)


class ColumnDefinition(BaseModel):
    """Configuration for a table column."""

    key: str = Field(description="Row attribute shown in the column")
    label: str = Field(description="Display label for the column header")
    width: int | None = Field(default=None, description="Column width (None for dynamic)")
    # Rich table styling options
    style: str | None = Field(default=None, description="Rich text style for the column")
    no_wrap: bool = Field(default=False, description="Prevent text wrapping")
    overflow: str | None = Field(default=None, description="Text overflow handling: fold, crop, ellipsis")
    searchable: bool = Field(default=False, description="Highlight the active search term in this column")

    def get_table_kwargs(self) -> dict[str, Any]:
        """Get kwargs for Rich table.add_column(), excluding None values and defaults."""
        kwargs: dict[str, Any] = {"no_wrap": self.no_wrap}
        if self.style:
            kwargs["style"] = self.style
        if self.width:
            kwargs["width"] = self.width
        if self.overflow:
            kwargs["overflow"] = self.overflow
        return kwargs


ID_COLUMN = ColumnDefinition(key="id", label="ID", width=6, style="cyan", no_wrap=True)

# Centralized column configuration used by table, export and TUI modes
COLUMN_CONFIG: dict[EntityType, list[ColumnDefinition]] = {
    EntityType.COUNTRIES: [
        ID_COLUMN,
        ColumnDefinition(key="name", label="Name", width=28, style="magenta", overflow="fold", searchable=True),
        ColumnDefinition(key="iso2_code", label="ISO2", width=5, no_wrap=True),
        ColumnDefinition(key="ioc_code", label="IOC", width=5, no_wrap=True),
        ColumnDefinition(key="iihf", label="IIHF", width=5, style="blue", no_wrap=True),
        ColumnDefinition(key="is_historical", label="Historical", width=10, style="dim", no_wrap=True),
        ColumnDefinition(key="enabled", label="Enabled", width=8, style="green", no_wrap=True),
    ],
    EntityType.TEAMS: [
        ID_COLUMN,
        ColumnDefinition(key="display_name", label="Name", width=30, style="magenta", overflow="fold", searchable=True),
        ColumnDefinition(key="country_name", label="Country", width=20, style="green", overflow="fold"),
        ColumnDefinition(key="created_at", label="Created", width=12, style="dim"),
    ],
    EntityType.PLAYERS: [
        ID_COLUMN,
        ColumnDefinition(key="name", label="Name", width=30, style="magenta", overflow="fold", searchable=True),
        ColumnDefinition(key="country_name", label="Country", width=20, style="green", overflow="fold"),
        ColumnDefinition(key="created_at", label="Created", width=12, style="dim"),
    ],
    EntityType.EVENTS: [
        ID_COLUMN,
        ColumnDefinition(key="name", label="Name", width=30, style="magenta", overflow="fold", searchable=True),
        ColumnDefinition(key="country_name", label="Country", width=20, style="green", overflow="fold"),
    ],
    EntityType.SEASONS: [
        ID_COLUMN,
        ColumnDefinition(key="year", label="Year", width=6, style="yellow", searchable=True),
        ColumnDefinition(key="display_name", label="Name", width=30, style="magenta", overflow="fold"),
        ColumnDefinition(key="event_name", label="Event", width=25, style="green", overflow="fold"),
    ],
    EntityType.MATCHES: [
        ID_COLUMN,
        ColumnDefinition(key="match_date", label="Date", width=17, style="dim", no_wrap=True),
        ColumnDefinition(key="home_team_name", label="Home", width=22, style="magenta", overflow="fold"),
        ColumnDefinition(key="score", label="Score", width=7, style="bold", no_wrap=True),
        ColumnDefinition(key="away_team_name", label="Away", width=22, style="magenta", overflow="fold"),
        ColumnDefinition(key="status", label="Status", width=12, style="yellow", no_wrap=True),
        ColumnDefinition(key="season_name", label="Season", width=20, style="green", overflow="fold"),
        ColumnDefinition(key="venue", label="Venue", width=20, overflow="fold"),
    ],
}


class RowTransformer:
    """Formats entity rows as display cells and flat export records."""

    def __init__(self, entity: EntityType) -> None:
        self.entity = entity
        self.columns = COLUMN_CONFIG[entity]

    def format_date(self, value: Any, with_time: bool = False) -> str:
        """Format a datetime (or a date string) for display."""
        if not value:
            return ""
        try:
            dt = value if isinstance(value, datetime) else dateparser.parse(str(value))
            if dt is None:
                return str(value)
            return dt.strftime("%Y-%m-%d %H:%M" if with_time else "%Y-%m-%d")
        except (ValueError, TypeError) as e:
            logger.debug(f"Failed to format date '{value}': {e}")
            return str(value)

    def format_value(self, key: str, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "✓" if value else "✗"
        if isinstance(value, datetime):
            return self.format_date(value, with_time=key == "match_date")
        return str(value)

    def cells(self, row: LeagueEntity) -> list[str]:
        """Display strings for each configured column."""
        return [self.format_value(column.key, getattr(row, column.key, None)) for column in self.columns]

    def cell(self, row: LeagueEntity, column_index: int) -> str:
        if not 0 <= column_index < len(self.columns):
            return ""
        column = self.columns[column_index]
        return self.format_value(column.key, getattr(row, column.key, None))

    def record(self, row: LeagueEntity) -> dict[str, Any]:
        """Flat JSON-safe record of every backend field."""
        return row.model_dump(mode="json", by_alias=True)
