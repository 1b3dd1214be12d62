"""Write payloads with client-side validation.

Payloads are validated before any request is made. A failure is raised as
``hla.exceptions.ValidationError`` naming the offending field so the caller
can show it next to that field.
"""

from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from hla.core.constants import GoalType, MatchStatus, ScoringConstants
from hla.exceptions import ValidationError

P = TypeVar("P", bound="WritePayload")


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


class WritePayload(BaseModel):
    """Base for create/update bodies."""

    model_config = ConfigDict(str_strip_whitespace=False, extra="forbid")

    def to_request_body(self) -> dict[str, Any]:
        """JSON body sent to the backend."""
        return self.model_dump(mode="json")


class TeamCreate(WritePayload):
    """Team body. An empty name creates a national team (``name`` null)."""

    name: str | None = None
    country_id: int

    @field_validator("name", mode="before")
    @classmethod
    def empty_name_is_national_team(cls, v: Any) -> Any:
        return _blank_to_none(_strip(v))

    @field_validator("country_id", mode="before")
    @classmethod
    def country_required(cls, v: Any) -> Any:
        if _blank_to_none(v) is None:
            raise ValueError("Country is required")
        return _strip(v)


class TeamUpdate(TeamCreate):
    pass


class PlayerCreate(WritePayload):
    name: str
    country_id: int

    @field_validator("name", mode="before")
    @classmethod
    def name_required(cls, v: Any) -> Any:
        if _blank_to_none(v) is None:
            raise ValueError("Name is required")
        return _strip(v)

    @field_validator("country_id", mode="before")
    @classmethod
    def country_required(cls, v: Any) -> Any:
        if _blank_to_none(v) is None:
            raise ValueError("Country is required")
        return _strip(v)


class PlayerUpdate(PlayerCreate):
    pass


class EventCreate(WritePayload):
    name: str
    country_id: int | None = None

    @field_validator("name", mode="before")
    @classmethod
    def name_required(cls, v: Any) -> Any:
        if _blank_to_none(v) is None:
            raise ValueError("Name is required")
        return _strip(v)

    @field_validator("country_id", mode="before")
    @classmethod
    def empty_country_is_none(cls, v: Any) -> Any:
        return _blank_to_none(_strip(v))


class EventUpdate(EventCreate):
    pass


class SeasonCreate(WritePayload):
    year: int = Field(ge=1900, le=2100)
    display_name: str | None = None
    event_id: int

    @field_validator("display_name", mode="before")
    @classmethod
    def empty_display_name_is_none(cls, v: Any) -> Any:
        return _blank_to_none(_strip(v))

    @field_validator("year", "event_id", mode="before")
    @classmethod
    def required(cls, v: Any, info: ValidationInfo) -> Any:
        if _blank_to_none(v) is None:
            label = "Year" if info.field_name == "year" else "Event"
            raise ValueError(f"{label} is required")
        return _strip(v)


class SeasonUpdate(SeasonCreate):
    pass


class MatchCreate(WritePayload):
    """Match body. Home and away team must differ."""

    season_id: int
    home_team_id: int
    away_team_id: int
    home_score_unidentified: int = Field(default=0, ge=0)
    away_score_unidentified: int = Field(default=0, ge=0)
    match_date: datetime | None = None
    status: MatchStatus = MatchStatus.SCHEDULED
    venue: str | None = None

    @field_validator("season_id", "home_team_id", "away_team_id", mode="before")
    @classmethod
    def ids_required(cls, v: Any, info: ValidationInfo) -> Any:
        if _blank_to_none(v) is None:
            label = {"season_id": "Season", "home_team_id": "Home team", "away_team_id": "Away team"}
            raise ValueError(f"{label[info.field_name]} is required")
        return _strip(v)

    @field_validator("away_team_id")
    @classmethod
    def teams_differ(cls, v: int | None, info: ValidationInfo) -> int | None:
        if v is not None and v == info.data.get("home_team_id"):
            raise ValueError("Away team must be different from home team")
        return v

    @field_validator("venue", "match_date", mode="before")
    @classmethod
    def empty_optional_is_none(cls, v: Any) -> Any:
        return _blank_to_none(_strip(v))


class MatchUpdate(WritePayload):
    """Partial match body. Only fields that were given are sent."""

    season_id: int | None = None
    home_team_id: int | None = None
    away_team_id: int | None = None
    home_score_unidentified: int | None = Field(default=None, ge=0)
    away_score_unidentified: int | None = Field(default=None, ge=0)
    match_date: datetime | None = None
    status: MatchStatus | None = None
    venue: str | None = None

    @field_validator("away_team_id")
    @classmethod
    def teams_differ(cls, v: int | None, info: ValidationInfo) -> int | None:
        home = info.data.get("home_team_id")
        if v is not None and home is not None and v == home:
            raise ValueError("Away team must be different from home team")
        return v

    def to_request_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class ScoreEventCreate(WritePayload):
    """Goal body used both to add a score event and to identify a goal.

    Only the scoring team is required. An unknown scorer or assist is sent
    as null; the same player cannot appear twice.
    """

    team_id: int
    scorer_id: int | None = None
    assist1_id: int | None = None
    assist2_id: int | None = None
    period: int | None = None
    time_minutes: int | None = None
    time_seconds: int | None = None
    goal_type: GoalType | None = None

    @field_validator("team_id", mode="before")
    @classmethod
    def team_required(cls, v: Any) -> Any:
        if _blank_to_none(v) is None:
            raise ValueError("Team is required")
        return _strip(v)

    @field_validator(
        "scorer_id", "assist1_id", "assist2_id", "period", "time_minutes", "time_seconds", "goal_type", mode="before"
    )
    @classmethod
    def empty_optional_is_none(cls, v: Any) -> Any:
        return _blank_to_none(_strip(v))

    @field_validator("assist1_id")
    @classmethod
    def first_assist_is_not_scorer(cls, v: int | None, info: ValidationInfo) -> int | None:
        if v is not None and v == info.data.get("scorer_id"):
            raise ValueError("Scorer and first assist cannot be the same player")
        return v

    @field_validator("assist2_id")
    @classmethod
    def second_assist_is_distinct(cls, v: int | None, info: ValidationInfo) -> int | None:
        if v is None:
            return v
        if v == info.data.get("scorer_id"):
            raise ValueError("Scorer and second assist cannot be the same player")
        if v == info.data.get("assist1_id"):
            raise ValueError("First and second assist cannot be the same player")
        return v

    @field_validator("period")
    @classmethod
    def period_in_range(cls, v: int | None) -> int | None:
        if v is not None and not ScoringConstants.MIN_PERIOD <= v <= ScoringConstants.MAX_PERIOD:
            raise ValueError("Period must be between 1 and 5 (1-3 regular, 4=OT, 5=SO)")
        return v

    @field_validator("time_minutes")
    @classmethod
    def minutes_in_range(cls, v: int | None) -> int | None:
        if v is not None and not 0 <= v <= ScoringConstants.MAX_MINUTES:
            raise ValueError("Minutes must be between 0 and 60")
        return v

    @field_validator("time_seconds")
    @classmethod
    def seconds_in_range(cls, v: int | None) -> int | None:
        if v is not None and not 0 <= v <= ScoringConstants.MAX_SECONDS:
            raise ValueError("Seconds must be between 0 and 59")
        return v


def build_payload(model: type[P], data: dict[str, Any]) -> P:
    """Validate raw form/CLI input into a payload.

    Raises:
        ValidationError: For the first field that fails validation
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        if error["type"] == "value_error":
            message = str(error["ctx"]["error"])
        else:
            message = error["msg"]
        value = data.get(field) if field in data else error.get("input")
        raise ValidationError(field, value, message) from e
