"""List command implementation."""

import asyncio
import logging
import time
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from hla.api.resources import get_resource
from hla.cli.commands.list_tui import launch_list_tui
from hla.cli.utils.auth import open_admin
from hla.cli.utils.errors import error_boundary
from hla.cli.utils.forms import parse_date
from hla.cli.utils.list_shared import RowTransformer
from hla.cli.utils.options import (
    COUNTRY_FILTER_OPTION,
    DATE_FROM_OPTION,
    DATE_TO_OPTION,
    ENABLED_FILTER_OPTION,
    ENTITY_ARGUMENT,
    EVENT_FILTER_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_OPTION,
    PAGE_SIZE_OPTION,
    SEARCH_OPTION,
    SEASON_FILTER_OPTION,
    STATUS_FILTER_OPTION,
    TEAM_FILTER_OPTION,
    TOKEN_OPTION,
    OutputFormat,
)
from hla.cli.utils.output import handle_csv_output, handle_json_output
from hla.core.constants import EntityType, MatchStatus
from hla.core.highlighting import highlight_text
from hla.core.paging import to_page_index
from hla.exceptions import ValidationError
from hla.models.paging import FilterValue, PageRequest, PaginatedResult
from hla.models.stats import ListCommandStats
from hla.services.admin import LeagueAdmin
from hla.services.pager import Pager

console = Console()
logger = logging.getLogger(__name__)

# CLI option -> (query parameter, entity referenced by name)
REFERENCE_FILTERS: dict[str, tuple[str, EntityType]] = {
    "country": ("country_id", EntityType.COUNTRIES),
    "event": ("event_id", EntityType.EVENTS),
    "season": ("season_id", EntityType.SEASONS),
    "team": ("team_id", EntityType.TEAMS),
}


async def build_filters(
    admin: LeagueAdmin,
    entity: EntityType,
    *,
    country: str | None = None,
    event: str | None = None,
    season: str | None = None,
    team: str | None = None,
    status: MatchStatus | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    enabled: bool | None = None,
) -> dict[str, FilterValue]:
    """Resolve filter options into query parameters for ``entity``.

    Raises:
        ValidationError: A filter does not apply to the entity, or a name or
            date cannot be resolved
    """
    resource = get_resource(entity)
    references = {"country": country, "event": event, "season": season, "team": team}
    plain: dict[str, FilterValue] = {
        "status": status.value if status else None,
        "date_from": parse_date(date_from, "date_from", date_only=True) if date_from else None,
        "date_to": parse_date(date_to, "date_to", date_only=True) if date_to else None,
        "enabled": enabled,
    }

    filters: dict[str, FilterValue] = {}
    for option, value in references.items():
        if value is None:
            continue
        param, referenced = REFERENCE_FILTERS[option]
        _check_applies(resource.filter_params, param, option, value, entity)
        filters[param] = await admin.lookup(referenced, param).resolve(value)
    for param, value in plain.items():
        if value is None:
            continue
        _check_applies(resource.filter_params, param, param.replace("_", "-"), value, entity)
        filters[param] = value
    return filters


def _check_applies(allowed: tuple[str, ...], param: str, option: str, value: Any, entity: EntityType) -> None:
    if param not in allowed:
        raise ValidationError(option, value, f"--{option} does not apply to {entity.value}")


def handle_table_output(entity: EntityType, result: PaginatedResult[Any], search: str | None) -> None:
    """Handle table format output."""
    transformer = RowTransformer(entity)
    table = Table(title=f"{entity.value.capitalize()}", show_lines=False, expand=True)
    for column in transformer.columns:
        table.add_column(column.label, **column.get_table_kwargs())

    for row in result.items:
        cells = transformer.cells(row)
        table.add_row(
            *(
                highlight_text(cell, search) if column.searchable else cell
                for column, cell in zip(transformer.columns, cells, strict=True)
            )
        )

    console.print(table)
    pager = Pager(result.page_size)
    pager.update(result)
    console.print(f"\n{pager.summary()} | Page {pager.current_page} of {max(pager.total_pages, 1)}")
    if result.has_next:
        console.print(f"[dim]Next page: --page {pager.current_page + 1}[/dim]")


def list_entities(
    entity: ENTITY_ARGUMENT,
    search: SEARCH_OPTION = None,
    page: PAGE_OPTION = 1,
    page_size: PAGE_SIZE_OPTION = None,
    country: COUNTRY_FILTER_OPTION = None,
    event: EVENT_FILTER_OPTION = None,
    season: SEASON_FILTER_OPTION = None,
    team: TEAM_FILTER_OPTION = None,
    status: STATUS_FILTER_OPTION = None,
    date_from: DATE_FROM_OPTION = None,
    date_to: DATE_TO_OPTION = None,
    enabled: ENABLED_FILTER_OPTION = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format (table, json, csv, tui)", case_sensitive=False),
    ] = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """List one page of teams, players, countries, events, seasons or matches.

    Use --format tui for an interactive table with live search and paging.
    """
    stats = ListCommandStats(start_time=time.time(), search_term=search)

    with error_boundary():
        admin = open_admin(token)
        size = page_size or admin.config.page_size
        with admin:
            filters = asyncio.run(
                build_filters(
                    admin,
                    entity,
                    country=country,
                    event=event,
                    season=season,
                    team=team,
                    status=status,
                    date_from=date_from,
                    date_to=date_to,
                    enabled=enabled,
                )
            )
            if output_format != OutputFormat.TUI:
                request = PageRequest(
                    search_term=search or "",
                    page_index=to_page_index(page),
                    page_size=size,
                    auth_token=admin.auth_token,
                    filters=filters,
                )
                result = asyncio.run(admin.query(entity).fetch(request))

        if output_format == OutputFormat.TUI:
            launch_list_tui(admin, entity, search or "", filters, size)
            return

    stats.rows = len(result.items)
    stats.total = result.total
    elapsed = time.time() - stats.start_time
    logger.debug(f"Listed {stats.rows}/{stats.total} {entity} (search {stats.search_term!r}) in {elapsed:.2f}s")

    if output_format == OutputFormat.TABLE:
        if result.is_empty:
            console.print(f"[yellow]No {entity.value} found[/yellow]")
            if result.total and page > result.total_pages:
                console.print(f"[dim]Only {result.total_pages} page(s) available[/dim]")
            return
        handle_table_output(entity, result, search)
        console.print(f"[dim]Completed in {elapsed:.1f}s[/dim]")
    elif output_format == OutputFormat.JSON:
        transformer = RowTransformer(entity)
        handle_json_output(
            result,
            output,
            transformer=lambda r: {
                **r.model_dump(mode="json", exclude={"items"}),
                "items": [transformer.record(item) for item in r.items],
            },
        )
    elif output_format == OutputFormat.CSV:
        transformer = RowTransformer(entity)
        handle_csv_output([transformer.record(item) for item in result.items], output)
