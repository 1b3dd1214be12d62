"""League entity models as returned by the backend list endpoints."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from hla.core.constants import NATIONAL_TEAM_LABEL, MatchStatus


class LeagueEntity(BaseModel):
    """Common base for table rows."""

    id: int

    @property
    def display_name(self) -> str:
        return str(self.id)


class Country(LeagueEntity):
    """Country with its IIHF membership and enable flag."""

    name: str
    enabled: bool = True
    iihf: bool = False
    is_historical: bool = False
    iso2_code: str | None = None
    ioc_code: str | None = None

    @property
    def display_name(self) -> str:
        return self.name


class Team(LeagueEntity):
    """Club or national team. National teams carry no name."""

    name: str | None = None
    country_id: int
    country_name: str | None = None
    country_iso2_code: str | None = None
    logo_path: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("name", mode="before")
    @classmethod
    def blank_name_to_none(cls, v: Any) -> Any:
        """Treat empty names as national teams."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def display_name(self) -> str:
        return self.name or NATIONAL_TEAM_LABEL


class Player(LeagueEntity):
    name: str
    country_id: int
    country_name: str | None = None
    country_iso2_code: str | None = None
    photo_path: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name


class Event(LeagueEntity):
    name: str
    country_id: int | None = None
    country_name: str | None = None
    country_iso2_code: str | None = None

    @property
    def display_name(self) -> str:
        return self.name


class Season(LeagueEntity):
    """One year of an event, optionally with its own display name."""

    year: int
    label: str | None = Field(
        default=None,
        validation_alias=AliasChoices("display_name", "label"),
        serialization_alias="display_name",
    )
    event_id: int
    event_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        if self.label:
            return self.label
        if self.event_name:
            return f"{self.event_name} {self.year}"
        return str(self.year)


class Match(LeagueEntity):
    """Scheduled or played match between two teams of a season."""

    season_id: int
    home_team_id: int
    away_team_id: int
    home_score_unidentified: int = 0
    away_score_unidentified: int = 0
    home_score_total: int | None = None
    away_score_total: int | None = None
    match_date: datetime | None = None
    status: MatchStatus = MatchStatus.SCHEDULED
    venue: str | None = None
    season_name: str | None = None
    home_team_name: str | None = None
    away_team_name: str | None = None

    @property
    def score(self) -> str:
        """Total score when the backend reports it, else unidentified goals only."""
        home = self.home_score_unidentified if self.home_score_total is None else self.home_score_total
        away = self.away_score_unidentified if self.away_score_total is None else self.away_score_total
        return f"{home}:{away}"

    @property
    def unidentified_goals(self) -> int:
        return self.home_score_unidentified + self.away_score_unidentified

    @property
    def display_name(self) -> str:
        home = self.home_team_name or f"#{self.home_team_id}"
        away = self.away_team_name or f"#{self.away_team_id}"
        return f"{home} vs {away}"
