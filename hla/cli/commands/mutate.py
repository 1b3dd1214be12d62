"""Create, update, delete and toggle commands."""

import asyncio
import logging
from typing import Annotated, Any

import typer
from rich.console import Console

from hla.api.resources import ResourceSpec, get_resource
from hla.cli.utils.auth import open_admin
from hla.cli.utils.errors import error_boundary
from hla.cli.utils.forms import form_fields, resolve_form_values
from hla.cli.utils.options import ENTITY_ARGUMENT, TOKEN_OPTION, YES_OPTION
from hla.core.constants import EntityType
from hla.exceptions import ValidationError
from hla.models.payloads import MatchUpdate, WritePayload, build_payload
from hla.services.admin import LeagueAdmin

console = Console()
logger = logging.getLogger(__name__)

TARGET_ARGUMENT = Annotated[str, typer.Argument(help="Row id, or a name to look up")]

# Field options shared by create and update
NAME_OPTION = Annotated[str | None, typer.Option("--name", help="Name (teams: empty for a national team)")]
COUNTRY_OPTION = Annotated[str | None, typer.Option("--country", help="Country name, code or id")]
YEAR_OPTION = Annotated[str | None, typer.Option("--year", help="Season year")]
DISPLAY_NAME_OPTION = Annotated[str | None, typer.Option("--display-name", help="Season display name")]
EVENT_OPTION = Annotated[str | None, typer.Option("--event", help="Event name or id")]
SEASON_OPTION = Annotated[str | None, typer.Option("--season", help="Season name or id")]
HOME_TEAM_OPTION = Annotated[str | None, typer.Option("--home-team", help="Home team name or id")]
AWAY_TEAM_OPTION = Annotated[str | None, typer.Option("--away-team", help="Away team name or id")]
HOME_SCORE_OPTION = Annotated[str | None, typer.Option("--home-score", help="Home score")]
AWAY_SCORE_OPTION = Annotated[str | None, typer.Option("--away-score", help="Away score")]
MATCH_DATE_OPTION = Annotated[
    str | None, typer.Option("--match-date", help="Match date and time (e.g., '2025-03-01 19:00', 'tomorrow 18:00')")
]
STATUS_OPTION = Annotated[str | None, typer.Option("--status", help="Match status")]
VENUE_OPTION = Annotated[str | None, typer.Option("--venue", help="Venue")]


def collect_raw(entity: EntityType, given: dict[str, str | None], partial: bool = False) -> dict[str, str | None]:
    """Map CLI options onto the entity's form fields.

    With ``partial`` only the options that were given are kept; otherwise
    every field is present so missing required ones are reported by name.

    Raises:
        ValidationError: An option was given that the entity has no field for
    """
    fields = form_fields(entity)
    known = {form_field.option for form_field in fields}
    for option, value in given.items():
        if value is not None and option not in known:
            raise ValidationError(option, value, f"--{option} does not apply to {entity.value}")

    raw: dict[str, str | None] = {}
    for form_field in fields:
        value = given.get(form_field.option)
        if partial and value is None:
            continue
        raw[form_field.key] = value
    return raw


async def build_write_payload(
    admin: LeagueAdmin, entity: EntityType, model: type[WritePayload], raw: dict[str, str | None]
) -> WritePayload:
    data = await resolve_form_values(admin, entity, model, raw)
    return build_payload(model, data)


async def resolve_target(admin: LeagueAdmin, entity: EntityType, target: str) -> tuple[int, str | None]:
    """Turn an id or name argument into ``(id, display name)``.

    The display name is only known when the row was looked up by name.
    """
    lookup = admin.lookup(entity, "id")
    row_id = await lookup.resolve(target)
    if target.strip().isdigit():
        return row_id, None
    return row_id, (await lookup.choices()).get(row_id)


def _require(resource: ResourceSpec, model: type[WritePayload] | None, verb: str) -> type[WritePayload]:
    if model is None:
        raise ValidationError("entity", resource.entity.value, f"{resource.label} rows cannot be {verb} here")
    return model


def create_entity(
    entity: ENTITY_ARGUMENT,
    name: NAME_OPTION = None,
    country: COUNTRY_OPTION = None,
    year: YEAR_OPTION = None,
    display_name: DISPLAY_NAME_OPTION = None,
    event: EVENT_OPTION = None,
    season: SEASON_OPTION = None,
    home_team: HOME_TEAM_OPTION = None,
    away_team: AWAY_TEAM_OPTION = None,
    home_score: HOME_SCORE_OPTION = None,
    away_score: AWAY_SCORE_OPTION = None,
    match_date: MATCH_DATE_OPTION = None,
    status: STATUS_OPTION = None,
    venue: VENUE_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Create a team, player, event, season or match.

    Reference options (--country, --event, --season, --home-team, --away-team)
    accept a name as well as an id.
    """
    given = {
        "name": name,
        "country": country,
        "year": year,
        "display-name": display_name,
        "event": event,
        "season": season,
        "home-team": home_team,
        "away-team": away_team,
        "home-score": home_score,
        "away-score": away_score,
        "match-date": match_date,
        "status": status,
        "venue": venue,
    }
    resource = get_resource(entity)

    async def _create(admin: LeagueAdmin) -> Any:
        model = _require(resource, resource.create_model, "created")
        payload = await build_write_payload(admin, entity, model, collect_raw(entity, given))
        return await admin.mutations.create(entity, payload, admin.auth_token)

    with error_boundary():
        with open_admin(token) as admin:
            new_id = asyncio.run(_create(admin))

    if new_id is not None:
        console.print(f"[dim]id: {new_id}[/dim]")


def update_entity(
    entity: ENTITY_ARGUMENT,
    target: TARGET_ARGUMENT,
    name: NAME_OPTION = None,
    country: COUNTRY_OPTION = None,
    year: YEAR_OPTION = None,
    display_name: DISPLAY_NAME_OPTION = None,
    event: EVENT_OPTION = None,
    season: SEASON_OPTION = None,
    home_team: HOME_TEAM_OPTION = None,
    away_team: AWAY_TEAM_OPTION = None,
    home_score: HOME_SCORE_OPTION = None,
    away_score: AWAY_SCORE_OPTION = None,
    match_date: MATCH_DATE_OPTION = None,
    status: STATUS_OPTION = None,
    venue: VENUE_OPTION = None,
    token: TOKEN_OPTION = None,
) -> None:
    """Update a row.

    Matches take only the options you pass. Other entities are replaced as a
    whole, so pass every field (as for create).
    """
    given = {
        "name": name,
        "country": country,
        "year": year,
        "display-name": display_name,
        "event": event,
        "season": season,
        "home-team": home_team,
        "away-team": away_team,
        "home-score": home_score,
        "away-score": away_score,
        "match-date": match_date,
        "status": status,
        "venue": venue,
    }
    resource = get_resource(entity)

    async def _update(admin: LeagueAdmin) -> None:
        model = _require(resource, resource.update_model, "updated")
        partial = model is MatchUpdate
        raw = collect_raw(entity, given, partial=partial)
        if partial and not raw:
            raise ValidationError("entity", entity.value, "Nothing to update; pass at least one field option")
        row_id, row_name = await resolve_target(admin, entity, target)
        payload = await build_write_payload(admin, entity, model, raw)
        await admin.mutations.update(entity, row_id, payload, admin.auth_token, display_name=row_name)

    with error_boundary():
        with open_admin(token) as admin:
            asyncio.run(_update(admin))


def delete_entity(
    entity: ENTITY_ARGUMENT,
    target: TARGET_ARGUMENT,
    yes: YES_OPTION = False,
    token: TOKEN_OPTION = None,
) -> None:
    """Delete a row after confirmation."""
    resource = get_resource(entity)

    with error_boundary():
        with open_admin(token) as admin:
            if not resource.deletable:
                raise ValidationError("entity", entity.value, f"{resource.label} rows cannot be deleted")
            row_id, row_name = asyncio.run(resolve_target(admin, entity, target))
            subject = f'{resource.label.lower()} "{row_name}"' if row_name else f"{resource.label.lower()} {row_id}"
            if not yes and not typer.confirm(f"Delete {subject}?", default=False):
                console.print("[yellow]Cancelled[/yellow]")
                return
            asyncio.run(admin.mutations.delete(entity, row_id, admin.auth_token, display_name=row_name))


def toggle_entity(
    entity: ENTITY_ARGUMENT,
    target: TARGET_ARGUMENT,
    enable: Annotated[
        bool,
        typer.Option("--enable/--disable", help="Enable or disable the row"),
    ],
    token: TOKEN_OPTION = None,
) -> None:
    """Enable or disable a row (countries)."""
    resource = get_resource(entity)

    async def _toggle(admin: LeagueAdmin) -> None:
        if resource.toggle_field is None:
            raise ValidationError("entity", entity.value, f"{resource.label} has no status to toggle")
        row_id, row_name = await resolve_target(admin, entity, target)
        await admin.mutations.toggle_status(entity, row_id, enable, admin.auth_token, display_name=row_name)

    with error_boundary():
        with open_admin(token) as admin:
            asyncio.run(_toggle(admin))
