"""
Constants and configuration values for Hockey League Admin.
"""

from enum import IntEnum, StrEnum

# API Base URL
DEFAULT_API_URL = "http://localhost:8080"

# Version
PACKAGE_VERSION = "0.1.0"

# Label used for teams without a name (national teams)
NATIONAL_TEAM_LABEL = "National Team"


class EntityType(StrEnum):
    """League entities managed through paginated tables."""

    COUNTRIES = "countries"
    TEAMS = "teams"
    PLAYERS = "players"
    EVENTS = "events"
    SEASONS = "seasons"
    MATCHES = "matches"


class MatchStatus(StrEnum):
    """Match status values accepted by the backend."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class GoalType(StrEnum):
    """Goal types accepted for score events."""

    EVEN_STRENGTH = "even_strength"
    POWER_PLAY = "power_play"
    SHORT_HANDED = "short_handed"
    PENALTY_SHOT = "penalty_shot"
    EMPTY_NET = "empty_net"


class APIConstants(IntEnum):
    """API-related limits and constants."""

    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100
    REQUEST_TIMEOUT = 30
    BACKOFF_MAX_TRIES = 3
    BACKOFF_FACTOR = 2
    BACKOFF_MAX_VALUE = 30


class CacheConstants(IntEnum):
    """Query cache staleness and eviction windows (seconds)."""

    STALE_TIME = 5 * 60
    GC_TIME = 10 * 60
    SESSION_EXPIRY_MARGIN = 30


class PagerConstants(IntEnum):
    """Pager navigation limits."""

    MAX_VISIBLE_PAGES = 7
    NEIGHBOUR_PAGES = 2


class TUIConstants(IntEnum):
    """TUI-specific constants."""

    SEARCH_DEBOUNCE_MS = 300
    NOTIFY_TIMEOUT = 4
    STATUS_BAR_HEIGHT = 1


class FormattingConstants(IntEnum):
    """Formatting constants."""

    JSON_INDENT = 2


class ScoringConstants(IntEnum):
    """Score event limits (periods 4 and 5 are overtime and shootout)."""

    MIN_PERIOD = 1
    MAX_PERIOD = 5
    OVERTIME_PERIOD = 4
    SHOOTOUT_PERIOD = 5
    MAX_MINUTES = 60
    MAX_SECONDS = 59
    STATS_STALE_TIME = 60


class LookupConstants(IntEnum):
    """Fuzzy lookup thresholds for name-to-id resolution."""

    MATCH_SCORE_CUTOFF = 80


class ProgressBarConstants(IntEnum):
    """Progress bar update intervals."""

    MIN_UPDATE_INTERVAL = 100  # milliseconds
    MAX_UPDATE_INTERVAL = 300  # milliseconds
