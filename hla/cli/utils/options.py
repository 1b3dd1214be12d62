"""Shared CLI options and enums for commands."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer

from hla.core.constants import EntityType, MatchStatus


class OutputFormat(StrEnum):
    """Supported output formats across commands."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"
    TUI = "tui"  # Only for list command


class ExportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"


# Common typer arguments and options
ENTITY_ARGUMENT = Annotated[
    EntityType,
    typer.Argument(help="Entity type", case_sensitive=False),
]

TOKEN_OPTION = Annotated[
    str | None,
    typer.Option(
        "--token",
        "-t",
        help="Bearer token (defaults to HLA_ACCESS_TOKEN, then the stored login session)",
        hide_input=True,
    ),
]

OUTPUT_PATH_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output file path (stdout when omitted)",
    ),
]

SEARCH_OPTION = Annotated[
    str | None,
    typer.Option(
        "--search",
        "-s",
        help="Search term (name; year for seasons)",
    ),
]

PAGE_OPTION = Annotated[
    int,
    typer.Option("--page", "-p", min=1, help="Page number, starting at 1"),
]

PAGE_SIZE_OPTION = Annotated[
    int | None,
    typer.Option("--page-size", min=1, max=100, help="Rows per page (defaults to HLA_PAGE_SIZE)"),
]

COUNTRY_FILTER_OPTION = Annotated[
    str | None,
    typer.Option("--country", help="Only rows of this country (name, code or id; teams and players)"),
]

EVENT_FILTER_OPTION = Annotated[
    str | None,
    typer.Option("--event", help="Only seasons of this event (name or id)"),
]

SEASON_FILTER_OPTION = Annotated[
    str | None,
    typer.Option("--season", help="Only matches of this season (name or id)"),
]

TEAM_FILTER_OPTION = Annotated[
    str | None,
    typer.Option("--team", help="Only matches of this team (name or id)"),
]

STATUS_FILTER_OPTION = Annotated[
    MatchStatus | None,
    typer.Option("--status", help="Only matches with this status", case_sensitive=False),
]

DATE_FROM_OPTION = Annotated[
    str | None,
    typer.Option("--date-from", help="Matches on or after this date (e.g., '2025-01-01', '1 week ago')"),
]

DATE_TO_OPTION = Annotated[
    str | None,
    typer.Option("--date-to", help="Matches on or before this date (e.g., '2025-12-31', 'today')"),
]

ENABLED_FILTER_OPTION = Annotated[
    bool | None,
    typer.Option("--enabled/--disabled", help="Only enabled or only disabled countries"),
]

YES_OPTION = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Do not ask for confirmation"),
]
