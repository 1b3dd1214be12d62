"""Match detail: score totals and goals, plus adding and removing goals."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from hla.api.client import LeagueAPIClient
from hla.cache.query import QueryCache
from hla.core.constants import EntityType, ScoringConstants
from hla.exceptions import APIError, ValidationError
from hla.models.payloads import ScoreEventCreate
from hla.models.scoring import MatchDetail
from hla.services.notifications import Notification, NotificationLevel, Notifier

logger = logging.getLogger(__name__)


class MatchDetailService:
    """Loads one match's stats and score events and edits its goals.

    Details are kept per match for ``stale_time`` seconds. Any goal change
    drops the match's detail and invalidates every cached match list page,
    since list rows carry the score totals.
    """

    def __init__(
        self,
        client: LeagueAPIClient,
        cache: QueryCache,
        notifier: Notifier,
        stale_time: float = ScoringConstants.STATS_STALE_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.cache = cache
        self.notifier = notifier
        self.stale_time = stale_time
        self._clock = clock
        self._details: dict[int, tuple[float, MatchDetail]] = {}

    async def load(self, match_id: int, token: str | None = None, force: bool = False) -> MatchDetail:
        """Return stats and score events of a match.

        Raises:
            NotFoundError: The match does not exist
            APIError: Any other transport, status or decode failure
        """
        cached = self._details.get(match_id)
        if not force and cached is not None and self._clock() - cached[0] < self.stale_time:
            logger.debug(f"Match {match_id} detail served from cache")
            return cached[1]

        logger.debug(f"Fetching detail of match {match_id}")
        stats, events = await asyncio.gather(
            asyncio.to_thread(self.client.match_stats, match_id, token),
            asyncio.to_thread(self.client.score_events, match_id, token),
        )
        detail = MatchDetail.from_payload(stats, events)
        self._details[match_id] = (self._clock(), detail)
        return detail

    async def add_goal(self, match_id: int, goal: ScoreEventCreate, token: str | None = None) -> int | None:
        """Record an identified goal.

        Raises:
            ValidationError: The team does not play in the match
            APIError: The backend rejected the goal (after an error notification)
        """
        detail = await self.load(match_id, token)
        self._check_team(detail, goal.team_id)
        return await self._change(
            match_id,
            lambda: asyncio.to_thread(self.client.create_score_event, match_id, goal.to_request_body(), token),
            success="Score event created successfully",
            failure="Failed to create score event. Please try again.",
        )

    async def identify_goal(self, match_id: int, goal: ScoreEventCreate, token: str | None = None) -> int | None:
        """Turn one of the team's unidentified goals into a detailed one.

        Raises:
            ValidationError: The team does not play in the match or has no
                unidentified goals left
            APIError: The backend rejected the goal (after an error notification)
        """
        detail = await self.load(match_id, token, force=True)
        self._check_team(detail, goal.team_id)
        if detail.unidentified_for(goal.team_id) == 0:
            raise ValidationError("team_id", goal.team_id, "No unidentified goals available for this team")
        return await self._change(
            match_id,
            lambda: asyncio.to_thread(self.client.identify_goal, match_id, goal.to_request_body(), token),
            success="Goal identified successfully",
            failure="Failed to identify goal. Please try again.",
        )

    async def delete_goal(self, match_id: int, event_id: int, token: str | None = None) -> None:
        await self._change(
            match_id,
            lambda: asyncio.to_thread(self.client.delete_score_event, match_id, event_id, token),
            success="Score event deleted successfully",
            failure="Failed to delete score event. Please try again.",
        )

    async def _change(
        self, match_id: int, call: Callable[[], Awaitable[Any]], success: str, failure: str
    ) -> Any:
        try:
            result = await call()
        except APIError as e:
            logger.warning(f"Goal change on match {match_id} failed: {e.message}")
            self.notifier.notify(Notification(NotificationLevel.ERROR, failure))
            raise

        self._details.pop(match_id, None)
        self.cache.invalidate(EntityType.MATCHES)
        logger.info(success)
        self.notifier.notify(Notification(NotificationLevel.SUCCESS, success))
        return result

    @staticmethod
    def _check_team(detail: MatchDetail, team_id: int) -> None:
        match = detail.match
        if team_id not in (match.home_team_id, match.away_team_id):
            raise ValidationError(
                "team_id", team_id, f"Team {team_id} does not play in {match.display_name}"
            )
