"""Match detail commands: score totals, goals and goal identification."""

import asyncio
import logging
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from hla.cli.utils.auth import open_admin
from hla.cli.utils.errors import error_boundary
from hla.cli.utils.options import OUTPUT_PATH_OPTION, TOKEN_OPTION, YES_OPTION, ExportFormat
from hla.cli.utils.output import handle_json_output
from hla.core.constants import EntityType
from hla.exceptions import ValidationError
from hla.models.payloads import ScoreEventCreate, build_payload
from hla.models.scoring import PERIOD_LABELS, MatchDetail
from hla.services.admin import LeagueAdmin

console = Console()
logger = logging.getLogger(__name__)

match_app = typer.Typer(
    help="Show a match's goals, add goals and identify unidentified ones",
    no_args_is_help=True,
)

MATCH_ARGUMENT = Annotated[int, typer.Argument(help="Match id")]
TEAM_OPTION = Annotated[str, typer.Option("--team", help="Scoring team: 'home', 'away', a name or an id")]
SCORER_OPTION = Annotated[str | None, typer.Option("--scorer", help="Scorer name or id")]
ASSIST1_OPTION = Annotated[str | None, typer.Option("--assist1", help="First assist name or id")]
ASSIST2_OPTION = Annotated[str | None, typer.Option("--assist2", help="Second assist name or id")]
PERIOD_OPTION = Annotated[str | None, typer.Option("--period", help="Period: 1-3, OT or SO (4 and 5 also work)")]
TIME_OPTION = Annotated[str | None, typer.Option("--time", help="Time in the period as MM:SS (or whole minutes)")]
GOAL_TYPE_OPTION = Annotated[
    str | None,
    typer.Option(
        "--goal-type",
        help="even_strength, power_play, short_handed, penalty_shot or empty_net",
    ),
]

PERIOD_BY_LABEL = {label.lower(): int(period) for period, label in PERIOD_LABELS.items()}


def parse_period(value: str | None) -> str | int | None:
    """Accept ``OT``/``SO`` labels besides period numbers."""
    if value is None:
        return None
    return PERIOD_BY_LABEL.get(value.strip().lower(), value)


def parse_goal_time(value: str | None) -> tuple[str | None, str | None]:
    """Split ``MM:SS`` into minutes and seconds.

    Raises:
        ValidationError: The value is not ``MM`` or ``MM:SS``
    """
    if value is None or not value.strip():
        return None, None
    minutes, _, seconds = value.strip().partition(":")
    if not minutes.isdigit() or (seconds and not seconds.isdigit()):
        raise ValidationError("time", value, "Time must look like MM:SS, e.g. 07:45")
    return minutes, seconds or None


async def resolve_team(admin: LeagueAdmin, detail: MatchDetail, value: str) -> int:
    match = detail.match
    side = value.strip().lower()
    if side == "home":
        return match.home_team_id
    if side == "away":
        return match.away_team_id
    return await admin.lookup(EntityType.TEAMS, "team_id").resolve(value)


async def build_goal(
    admin: LeagueAdmin,
    detail: MatchDetail,
    team: str,
    scorer: str | None,
    assist1: str | None,
    assist2: str | None,
    period: str | None,
    time: str | None,
    goal_type: str | None,
) -> ScoreEventCreate:
    """Resolve names and validate the goal options into a request body."""
    minutes, seconds = parse_goal_time(time)
    data: dict[str, Any] = {
        "team_id": await resolve_team(admin, detail, team),
        "period": parse_period(period),
        "time_minutes": minutes,
        "time_seconds": seconds,
        "goal_type": goal_type.strip().lower() if goal_type else None,
    }
    players = admin.lookup(EntityType.PLAYERS, "scorer_id")
    for key, value in (("scorer_id", scorer), ("assist1_id", assist1), ("assist2_id", assist2)):
        data[key] = await players.resolve(value) if value and value.strip() else None
    logger.debug(f"Goal options for {detail.match.display_name} resolved to {data}")
    return build_payload(ScoreEventCreate, data)


def render_detail(detail: MatchDetail) -> None:
    match = detail.match
    stats = detail.stats
    home = match.home_team_name or f"#{match.home_team_id}"
    away = match.away_team_name or f"#{match.away_team_id}"

    console.print(f"[bold]{match.display_name}[/bold]  {stats.home_total_score}:{stats.away_total_score}")
    meta = [value for value in (match.season_name, match.status.value, match.venue) if value]
    if match.match_date:
        meta.append(match.match_date.strftime("%Y-%m-%d %H:%M"))
    if meta:
        console.print(f"[dim]{' | '.join(meta)}[/dim]")

    summary = Table(show_header=True, expand=False)
    summary.add_column("Team", style="cyan")
    summary.add_column("Total", justify="right")
    summary.add_column("Identified", justify="right")
    summary.add_column("Unidentified", justify="right")
    summary.add_row(home, str(stats.home_total_score), str(stats.home_detailed_goals), str(stats.home_unidentified))
    summary.add_row(away, str(stats.away_total_score), str(stats.away_detailed_goals), str(stats.away_unidentified))
    console.print(summary)

    if not detail.events:
        console.print("[yellow]No identified goals yet[/yellow]")
        return

    goals = Table(title="Goals", expand=True)
    goals.add_column("ID", justify="right", style="dim")
    goals.add_column("Time", no_wrap=True)
    goals.add_column("Team", style="cyan")
    goals.add_column("Scorer")
    goals.add_column("Assists")
    goals.add_column("Type")
    for event in detail.events:
        goals.add_row(
            str(event.id),
            event.time_label,
            home if event.team_id == match.home_team_id else away,
            event.scorer_name or "[dim]unknown[/dim]",
            ", ".join(event.assists),
            event.goal_type_label,
        )
    console.print(goals)


@match_app.command("show")
def show_match(
    match_id: MATCH_ARGUMENT,
    output_format: Annotated[
        ExportFormat | None,
        typer.Option("--format", "-f", help="Print JSON instead of tables", case_sensitive=False),
    ] = None,
    output: OUTPUT_PATH_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Show score totals and identified goals of a match."""
    if output_format == ExportFormat.CSV:
        raise typer.BadParameter("Match detail is available as a table or JSON", param_hint="--format")

    with error_boundary():
        with open_admin(token) as admin:
            detail = asyncio.run(admin.match_details.load(match_id, admin.auth_token))

    if output_format == ExportFormat.JSON:
        handle_json_output(detail, output, lambda d: d.model_dump(mode="json"))
    else:
        render_detail(detail)


@match_app.command("add-goal")
def add_goal(
    match_id: MATCH_ARGUMENT,
    team: TEAM_OPTION,
    scorer: SCORER_OPTION = None,
    assist1: ASSIST1_OPTION = None,
    assist2: ASSIST2_OPTION = None,
    period: PERIOD_OPTION = None,
    time: TIME_OPTION = None,
    goal_type: GOAL_TYPE_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Record a new goal with its scorer, assists and time."""

    async def _add(admin: LeagueAdmin) -> int | None:
        detail = await admin.match_details.load(match_id, admin.auth_token)
        goal = await build_goal(admin, detail, team, scorer, assist1, assist2, period, time, goal_type)
        return await admin.match_details.add_goal(match_id, goal, admin.auth_token)

    with error_boundary():
        with open_admin(token) as admin:
            new_id = asyncio.run(_add(admin))

    if new_id is not None:
        console.print(f"[dim]id: {new_id}[/dim]")


@match_app.command("identify-goal")
def identify_goal(
    match_id: MATCH_ARGUMENT,
    team: TEAM_OPTION,
    scorer: SCORER_OPTION = None,
    assist1: ASSIST1_OPTION = None,
    assist2: ASSIST2_OPTION = None,
    period: PERIOD_OPTION = None,
    time: TIME_OPTION = None,
    goal_type: GOAL_TYPE_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Attach scorer and time to one of the team's unidentified goals.

    The match total stays the same; one unidentified goal becomes a detailed one.
    """

    async def _identify(admin: LeagueAdmin) -> int | None:
        detail = await admin.match_details.load(match_id, admin.auth_token)
        goal = await build_goal(admin, detail, team, scorer, assist1, assist2, period, time, goal_type)
        return await admin.match_details.identify_goal(match_id, goal, admin.auth_token)

    with error_boundary():
        with open_admin(token) as admin:
            asyncio.run(_identify(admin))


@match_app.command("delete-goal")
def delete_goal(
    match_id: MATCH_ARGUMENT,
    event_id: Annotated[int, typer.Argument(help="Score event id (see 'hla match show')")],
    yes: YES_OPTION = False,
    token: TOKEN_OPTION = None,
) -> None:
    """Delete one identified goal."""
    with error_boundary():
        with open_admin(token) as admin:
            if not yes and not typer.confirm(f"Delete goal {event_id} of match {match_id}?", default=False):
                console.print("[yellow]Cancelled[/yellow]")
                return
            asyncio.run(admin.match_details.delete_goal(match_id, event_id, admin.auth_token))
