"""Form field definitions shared by the CLI and the TUI edit dialogs."""

import logging
from typing import Any

import dateparser
from pydantic import BaseModel, Field

from hla.core.constants import EntityType
from hla.exceptions import ValidationError
from hla.models.paging import FilterValue
from hla.models.payloads import WritePayload
from hla.services.admin import LeagueAdmin

logger = logging.getLogger(__name__)


class FormField(BaseModel):
    """One editable field of an entity form."""

    key: str = Field(description="Payload key")
    label: str = Field(description="Label shown next to the input")
    option: str = Field(description="CLI option name without dashes")
    reference: EntityType | None = Field(default=None, description="Entity whose name may be typed instead of an id")
    reference_filters: dict[str, FilterValue] = Field(default_factory=dict)
    is_date: bool = False
    placeholder: str = ""


COUNTRY_FIELD = FormField(
    key="country_id",
    label="Country",
    option="country",
    reference=EntityType.COUNTRIES,
    reference_filters={"enabled": True},
    placeholder="Name, code or id",
)

FORM_FIELDS: dict[EntityType, list[FormField]] = {
    EntityType.TEAMS: [
        FormField(key="name", label="Name", option="name", placeholder="Leave empty for a national team"),
        COUNTRY_FIELD,
    ],
    EntityType.PLAYERS: [
        FormField(key="name", label="Name", option="name"),
        COUNTRY_FIELD,
    ],
    EntityType.EVENTS: [
        FormField(key="name", label="Name", option="name"),
        COUNTRY_FIELD.model_copy(update={"placeholder": "Optional"}),
    ],
    EntityType.SEASONS: [
        FormField(key="year", label="Year", option="year"),
        FormField(key="display_name", label="Display name", option="display-name", placeholder="Optional"),
        FormField(key="event_id", label="Event", option="event", reference=EntityType.EVENTS),
    ],
    EntityType.MATCHES: [
        FormField(key="season_id", label="Season", option="season", reference=EntityType.SEASONS),
        FormField(key="home_team_id", label="Home team", option="home-team", reference=EntityType.TEAMS),
        FormField(key="away_team_id", label="Away team", option="away-team", reference=EntityType.TEAMS),
        FormField(key="home_score_unidentified", label="Home score", option="home-score", placeholder="0"),
        FormField(key="away_score_unidentified", label="Away score", option="away-score", placeholder="0"),
        FormField(key="match_date", label="Date", option="match-date", is_date=True, placeholder="e.g. 2025-03-01 19:00"),
        FormField(key="status", label="Status", option="status", placeholder="scheduled"),
        FormField(key="venue", label="Venue", option="venue", placeholder="Optional"),
    ],
}


def form_fields(entity: EntityType) -> list[FormField]:
    return FORM_FIELDS.get(entity, [])


def parse_date(value: str, field: str, date_only: bool = False) -> str:
    """Parse an absolute or relative date into ISO 8601 (``YYYY-MM-DD`` with ``date_only``).

    Raises:
        ValidationError: If dateparser cannot read the value
    """
    parsed = dateparser.parse(value)
    if parsed is None:
        raise ValidationError(field, value, f"Invalid date: {value}")
    return parsed.date().isoformat() if date_only else parsed.isoformat()


async def resolve_form_values(
    admin: LeagueAdmin, entity: EntityType, model: type[WritePayload], raw: dict[str, str | None]
) -> dict[str, Any]:
    """Turn typed form input into payload data.

    Reference fields accept a name and are resolved to ids; dates accept
    relative expressions. Fields missing from ``raw`` are left out, and so
    are blank ones unless ``model`` requires them, which lets the model
    apply its defaults and report missing required fields by name.

    Raises:
        ValidationError: A reference or date could not be resolved
    """
    data: dict[str, Any] = {}
    for form_field in form_fields(entity):
        if form_field.key not in raw:
            continue
        value = raw[form_field.key]
        blank = value is None or not str(value).strip()
        if blank:
            required = form_field.key in model.model_fields and model.model_fields[form_field.key].is_required()
            if required:
                data[form_field.key] = ""
            continue
        text = str(value).strip()
        if form_field.reference is not None:
            lookup = admin.lookup(form_field.reference, form_field.key, filters=form_field.reference_filters)
            data[form_field.key] = await lookup.resolve(text)
        elif form_field.is_date:
            data[form_field.key] = parse_date(text, form_field.key)
        else:
            data[form_field.key] = text
    logger.debug(f"Resolved {entity} form values: {sorted(data)}")
    return data
