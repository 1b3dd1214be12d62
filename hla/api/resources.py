"""Per-entity REST resource descriptions."""

from dataclasses import dataclass, field

from hla.core.constants import EntityType
from hla.models.league import Country, Event, LeagueEntity, Match, Player, Season, Team
from hla.models.payloads import (
    EventCreate,
    EventUpdate,
    MatchCreate,
    MatchUpdate,
    PlayerCreate,
    PlayerUpdate,
    SeasonCreate,
    SeasonUpdate,
    TeamCreate,
    TeamUpdate,
    WritePayload,
)


@dataclass(frozen=True)
class ResourceSpec:
    """How one entity maps onto the backend.

    Attributes:
        entity: Entity type
        path: Collection path (singular, as the backend names it)
        label: Singular label used in notifications
        item_model: Row model decoded from list pages
        search_param: Query field receiving the free-text search term
        filter_params: Additional query filters the endpoint accepts
        create_model: Payload for POST, None when rows cannot be created
        update_model: Payload for PUT, None when rows cannot be edited
        deletable: Whether DELETE is offered
        toggle_field: Boolean row field flipped by PATCH, if any
    """

    entity: EntityType
    path: str
    label: str
    item_model: type[LeagueEntity]
    search_param: str | None = "name"
    filter_params: tuple[str, ...] = field(default_factory=tuple)
    create_model: type[WritePayload] | None = None
    update_model: type[WritePayload] | None = None
    deletable: bool = True
    toggle_field: str | None = None


RESOURCES: dict[EntityType, ResourceSpec] = {
    EntityType.COUNTRIES: ResourceSpec(
        entity=EntityType.COUNTRIES,
        path="/country",
        label="Country",
        item_model=Country,
        filter_params=("enabled", "iihf", "is_historical", "iso2_code", "ioc_code"),
        deletable=False,
        toggle_field="enabled",
    ),
    EntityType.TEAMS: ResourceSpec(
        entity=EntityType.TEAMS,
        path="/team",
        label="Team",
        item_model=Team,
        filter_params=("country_id",),
        create_model=TeamCreate,
        update_model=TeamUpdate,
    ),
    EntityType.PLAYERS: ResourceSpec(
        entity=EntityType.PLAYERS,
        path="/player",
        label="Player",
        item_model=Player,
        filter_params=("country_id",),
        create_model=PlayerCreate,
        update_model=PlayerUpdate,
    ),
    EntityType.EVENTS: ResourceSpec(
        entity=EntityType.EVENTS,
        path="/event",
        label="Event",
        item_model=Event,
        filter_params=("country_id",),
        create_model=EventCreate,
        update_model=EventUpdate,
    ),
    EntityType.SEASONS: ResourceSpec(
        entity=EntityType.SEASONS,
        path="/season",
        label="Season",
        item_model=Season,
        search_param="year",
        filter_params=("event_id",),
        create_model=SeasonCreate,
        update_model=SeasonUpdate,
    ),
    EntityType.MATCHES: ResourceSpec(
        entity=EntityType.MATCHES,
        path="/match",
        label="Match",
        item_model=Match,
        search_param=None,
        filter_params=("season_id", "team_id", "status", "date_from", "date_to"),
        create_model=MatchCreate,
        update_model=MatchUpdate,
    ),
}


def get_resource(entity: EntityType | str) -> ResourceSpec:
    """Look up the resource description for an entity.

    Raises:
        ValueError: For an unknown entity name
    """
    return RESOURCES[EntityType(entity)]
