"""Score events and per-match statistics."""

from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from hla.core.constants import GoalType, ScoringConstants
from hla.exceptions import DecodeError
from hla.models.league import Match

PERIOD_LABELS = {
    ScoringConstants.OVERTIME_PERIOD: "OT",
    ScoringConstants.SHOOTOUT_PERIOD: "SO",
}


def format_goal_time(period: int | None, minutes: int | None, seconds: int | None) -> str:
    """Render when a goal was scored, e.g. ``P2 07:05`` or ``OT 3:00``.

    Returns an empty string when the period is unknown.
    """
    if not period:
        return ""
    label = PERIOD_LABELS.get(period, f"P{period}")
    if minutes is None:
        return label
    if seconds is None:
        return f"{label} {minutes}:00"
    return f"{label} {minutes:02d}:{seconds:02d}"


class ScoreEvent(BaseModel):
    """One identified goal of a match, with player names resolved."""

    id: int
    match_id: int
    team_id: int
    scorer_id: int | None = None
    assist1_id: int | None = None
    assist2_id: int | None = None
    period: int | None = None
    time_minutes: int | None = None
    time_seconds: int | None = None
    goal_type: GoalType | None = None
    scorer_name: str | None = None
    assist1_name: str | None = None
    assist2_name: str | None = None

    @property
    def time_label(self) -> str:
        return format_goal_time(self.period, self.time_minutes, self.time_seconds)

    @property
    def assists(self) -> list[str]:
        return [name for name in (self.assist1_name, self.assist2_name) if name]

    @property
    def goal_type_label(self) -> str:
        return self.goal_type.value.replace("_", " ") if self.goal_type else ""


class MatchStats(BaseModel):
    """Body of ``GET /match/{id}/stats``.

    Totals count identified and unidentified goals together; the detailed
    counts are the identified ones only.
    """

    match_info: Match
    home_total_score: int
    away_total_score: int
    home_detailed_goals: int = Field(ge=0)
    away_detailed_goals: int = Field(ge=0)

    @property
    def home_unidentified(self) -> int:
        return self.match_info.home_score_unidentified

    @property
    def away_unidentified(self) -> int:
        return self.match_info.away_score_unidentified


class MatchDetail(BaseModel):
    """Stats plus the score events of one match, as shown on its detail view."""

    stats: MatchStats
    events: list[ScoreEvent]

    @classmethod
    def from_payload(cls, stats: Any, events: Any) -> "MatchDetail":
        """Decode the stats and score-event bodies of one match.

        Raises:
            DecodeError: If either body does not have the expected shape
        """
        try:
            return cls.model_validate({"stats": stats, "events": events})
        except PydanticValidationError as e:
            raise DecodeError(f"Malformed match detail response: {e.error_count()} invalid field(s)") from e

    @property
    def match(self) -> Match:
        return self.stats.match_info

    def events_for(self, team_id: int) -> list[ScoreEvent]:
        return [event for event in self.events if event.team_id == team_id]

    def unidentified_for(self, team_id: int) -> int:
        if team_id == self.match.home_team_id:
            return self.match.home_score_unidentified
        if team_id == self.match.away_team_id:
            return self.match.away_score_unidentified
        return 0
