"""Export command implementation."""

import asyncio
import logging
import time
from typing import Annotated, Any

import typer
from rich.console import Console
from tqdm import tqdm

from hla.cli.commands.list import build_filters
from hla.cli.utils.auth import open_admin
from hla.cli.utils.errors import error_boundary
from hla.cli.utils.list_shared import RowTransformer
from hla.cli.utils.options import (
    COUNTRY_FILTER_OPTION,
    DATE_FROM_OPTION,
    DATE_TO_OPTION,
    ENABLED_FILTER_OPTION,
    ENTITY_ARGUMENT,
    EVENT_FILTER_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_SIZE_OPTION,
    SEARCH_OPTION,
    SEASON_FILTER_OPTION,
    STATUS_FILTER_OPTION,
    TEAM_FILTER_OPTION,
    TOKEN_OPTION,
    ExportFormat,
)
from hla.cli.utils.output import handle_csv_output, handle_json_output
from hla.core.constants import APIConstants, EntityType, ProgressBarConstants
from hla.models.paging import FilterValue, PageRequest
from hla.models.stats import ExportResult
from hla.services.admin import LeagueAdmin

console = Console(stderr=True)
logger = logging.getLogger(__name__)


async def collect_rows(
    admin: LeagueAdmin, entity: EntityType, request: PageRequest, show_progress: bool = True
) -> tuple[list[Any], ExportResult]:
    """Walk every page of ``request`` and gather the rows."""
    rows: list[Any] = []
    stats = ExportResult()
    pbar = tqdm(
        desc=f"Fetching {entity.value}",
        unit=" rows",
        mininterval=ProgressBarConstants.MIN_UPDATE_INTERVAL / 1000,
        maxinterval=ProgressBarConstants.MAX_UPDATE_INTERVAL / 1000,
        disable=not show_progress,
    )
    try:
        async for page in admin.query(entity).iter_pages(request):
            if pbar.total is None:
                pbar.total = page.total
            rows.extend(page.items)
            stats.pages += 1
            stats.total = page.total
            pbar.update(len(page.items))
            pbar.set_postfix({"page": f"{page.page}/{page.total_pages}"})
    finally:
        pbar.close()
    stats.rows = len(rows)
    return rows, stats


def export_entities(
    entity: ENTITY_ARGUMENT,
    search: SEARCH_OPTION = None,
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
        ExportFormat,
        typer.Option("--format", "-f", help="Export format (json, csv)", case_sensitive=False),
    ] = ExportFormat.JSON,
    output: OUTPUT_PATH_OPTION = None,
    token: TOKEN_OPTION = None,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Hide the progress bar")] = False,
) -> None:
    """Export every row of an entity, walking all pages.

    Filters and search work as in 'hla list'. Progress goes to stderr so the
    export itself can be piped.
    """
    start_time = time.time()

    async def _export(admin: LeagueAdmin) -> tuple[list[Any], ExportResult]:
        filters: dict[str, FilterValue] = await build_filters(
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
        request = PageRequest(
            search_term=search or "",
            page_size=page_size or APIConstants.MAX_PAGE_SIZE,
            auth_token=admin.auth_token,
            filters=filters,
        )
        return await collect_rows(admin, entity, request, show_progress=not quiet)

    with error_boundary():
        with open_admin(token) as admin:
            rows, stats = asyncio.run(_export(admin))

    logger.debug(f"Exported {stats.rows} {entity} rows over {stats.pages} pages")
    transformer = RowTransformer(entity)
    records = [transformer.record(row) for row in rows]
    if output_format == ExportFormat.JSON:
        handle_json_output(records, output)
    else:
        handle_csv_output(records, output)

    if stats.rows != stats.total:
        console.print(f"[yellow]⚠ Got {stats.rows} rows but the backend reported {stats.total}[/yellow]")
    console.print(f"[dim]Exported {stats.rows} {entity.value} in {time.time() - start_time:.1f}s[/dim]")
