"""Shared fixtures: an in-memory league backend and wired services."""

import copy
import threading
from typing import Any

import pytest

from hla.cache.query import QueryCache
from hla.config import Config
from hla.exceptions import HTTPStatusError, NotFoundError
from hla.models.paging import PaginatedResult
from hla.services.admin import LeagueAdmin
from hla.services.notifications import NotificationLog

SEARCH_FIELDS = {"/season": "year"}


def country_rows() -> list[dict[str, Any]]:
    return [
        {"id": 1, "name": "Canada", "enabled": False, "iihf": True, "iso2_code": "CA", "ioc_code": "CAN"},
        {"id": 2, "name": "Finland", "enabled": True, "iihf": True, "iso2_code": "FI", "ioc_code": "FIN"},
        {"id": 3, "name": "Czechoslovakia", "enabled": False, "is_historical": True, "iso2_code": "CS"},
    ]


def team_rows(count: int = 3) -> list[dict[str, Any]]:
    rows = [{"id": 1, "name": None, "country_id": 1, "country_name": "Canada"}]
    rows += [
        {"id": i, "name": f"Team {i:02d}", "country_id": 2, "country_name": "Finland"} for i in range(2, count + 1)
    ]
    return rows


def match_detail_rows() -> dict[str, list[dict[str, Any]]]:
    """One finished match (Canada 2 unidentified goals vs Team 02) with one identified goal."""
    return {
        "/match": [
            {
                "id": 7,
                "season_id": 1,
                "home_team_id": 1,
                "away_team_id": 2,
                "home_score_unidentified": 2,
                "away_score_unidentified": 0,
                "status": "finished",
                "home_team_name": "Canada",
                "away_team_name": "Team 02",
            }
        ],
        "/player": [
            {"id": 10, "name": "Wayne Gretzky", "country_id": 1},
            {"id": 11, "name": "Mario Lemieux", "country_id": 1},
            {"id": 12, "name": "Teemu Selanne", "country_id": 2},
        ],
        "/score-events": [
            {
                "id": 1,
                "match_id": 7,
                "team_id": 2,
                "scorer_id": 12,
                "period": 2,
                "time_minutes": 7,
                "time_seconds": 5,
                "goal_type": "power_play",
                "scorer_name": "Teemu Selanne",
            }
        ],
    }


class FakeLeagueClient:
    """Stands in for LeagueAPIClient, serving rows from memory.

    ``gates`` blocks list requests for a search term until the event is set;
    ``held_responses`` holds one response for a term after the page has been
    read, so it reflects the rows as they were when the request arrived;
    ``patch_gate`` does the same for status patches. ``fail_with`` maps a
    method name to the exception it raises.
    """

    def __init__(self, rows: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.rows = rows if rows is not None else {"/country": country_rows(), "/team": team_rows()}
        self.calls: list[tuple[str, str, Any]] = []
        self.fail_with: dict[str, Exception] = {}
        self.gates: dict[str, threading.Event] = {}
        self.held_responses: dict[str, threading.Event] = {}
        self.patch_gate: threading.Event | None = None
        self.opened = False
        self._lock = threading.Lock()

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.opened = False

    def _record(self, method: str, path: str, data: Any) -> None:
        with self._lock:
            self.calls.append((method, path, data))

    def calls_for(self, method: str) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] == method]

    def list_page(self, path: str, params: dict[str, Any], token: str | None = None) -> Any:
        self._record("GET", path, dict(params))
        search_field = SEARCH_FIELDS.get(path, "name")
        term = str(params.get(search_field, ""))
        gate = self.gates.get(term)
        if gate is not None:
            gate.wait(timeout=5)
        if "list_page" in self.fail_with:
            raise self.fail_with["list_page"]

        rows = copy.deepcopy(self.rows.get(path, []))
        if term:
            rows = [row for row in rows if term.lower() in str(row.get(search_field) or "").lower()]
        if "enabled" in params:
            rows = [row for row in rows if str(row.get("enabled")).lower() == params["enabled"]]
        page, page_size = params["page"], params["page_size"]
        items = rows[(page - 1) * page_size : page * page_size]
        response = PaginatedResult.build(items, len(rows), page, page_size).model_dump()
        # One response per event; a refetch of the same term goes through
        hold = self.held_responses.get(term)
        if hold is not None and not hold.is_set():
            hold.wait(timeout=5)
            hold.set()
        return response

    def create(self, path: str, body: dict[str, Any], token: str | None = None) -> int | None:
        self._record("POST", path, body)
        if "create" in self.fail_with:
            raise self.fail_with["create"]
        rows = self.rows.setdefault(path, [])
        new_id = max((row["id"] for row in rows), default=0) + 1
        rows.append({"id": new_id, **body})
        return new_id

    def update(self, path: str, entity_id: int, body: dict[str, Any], token: str | None = None) -> Any:
        self._record("PUT", f"{path}/{entity_id}", body)
        if "update" in self.fail_with:
            raise self.fail_with["update"]
        row = self._find(path, entity_id)
        row.update(body)
        return None

    def delete(self, path: str, entity_id: int, token: str | None = None) -> Any:
        self._record("DELETE", f"{path}/{entity_id}", None)
        if "delete" in self.fail_with:
            raise self.fail_with["delete"]
        self.rows[path].remove(self._find(path, entity_id))
        return None

    def patch_status(self, path: str, entity_id: int, value: bool, token: str | None = None) -> Any:
        self._record("PATCH", f"{path}/{entity_id}", value)
        if self.patch_gate is not None:
            self.patch_gate.wait(timeout=5)
        if "patch_status" in self.fail_with:
            raise self.fail_with["patch_status"]
        self._find(path, entity_id)["enabled"] = value
        return None

    # Match detail

    def match_stats(self, match_id: int, token: str | None = None) -> Any:
        self._record("GET", f"/match/{match_id}/stats", None)
        if "match_stats" in self.fail_with:
            raise self.fail_with["match_stats"]
        match = copy.deepcopy(self._find("/match", match_id))
        events = self._events_of(match_id)
        detailed = {
            side: sum(1 for event in events if event["team_id"] == match[f"{side}_team_id"]) for side in ("home", "away")
        }
        for side in ("home", "away"):
            match[f"{side}_score_total"] = detailed[side] + match.get(f"{side}_score_unidentified", 0)
        return {
            "match_info": match,
            "home_total_score": match["home_score_total"],
            "away_total_score": match["away_score_total"],
            "home_detailed_goals": detailed["home"],
            "away_detailed_goals": detailed["away"],
        }

    def score_events(self, match_id: int, token: str | None = None) -> list[Any]:
        self._record("GET", f"/match/{match_id}/score-events", None)
        self._find("/match", match_id)
        return copy.deepcopy(self._events_of(match_id))

    def create_score_event(self, match_id: int, body: dict[str, Any], token: str | None = None) -> int | None:
        self._record("POST", f"/match/{match_id}/score-events", body)
        if "create_score_event" in self.fail_with:
            raise self.fail_with["create_score_event"]
        return self._add_event(match_id, body)

    def identify_goal(self, match_id: int, body: dict[str, Any], token: str | None = None) -> int | None:
        self._record("POST", f"/match/{match_id}/identify-goal", body)
        match = self._find("/match", match_id)
        side = "home" if body["team_id"] == match["home_team_id"] else "away"
        if not match.get(f"{side}_score_unidentified"):
            raise HTTPStatusError(400, "No unidentified goals available for this team")
        match[f"{side}_score_unidentified"] -= 1
        return self._add_event(match_id, body)

    def delete_score_event(self, match_id: int, event_id: int, token: str | None = None) -> Any:
        self._record("DELETE", f"/match/{match_id}/score-events/{event_id}", None)
        self.rows["/score-events"].remove(self._find("/score-events", event_id))
        return None

    def _events_of(self, match_id: int) -> list[dict[str, Any]]:
        return [event for event in self.rows.get("/score-events", []) if event["match_id"] == match_id]

    def _add_event(self, match_id: int, body: dict[str, Any]) -> int:
        events = self.rows.setdefault("/score-events", [])
        new_id = max((event["id"] for event in events), default=0) + 1
        names = {row["id"]: row["name"] for row in self.rows.get("/player", [])}
        events.append(
            {
                "id": new_id,
                "match_id": match_id,
                **body,
                "scorer_name": names.get(body.get("scorer_id")),
                "assist1_name": names.get(body.get("assist1_id")),
                "assist2_name": names.get(body.get("assist2_id")),
            }
        )
        return new_id

    def _find(self, path: str, entity_id: int) -> dict[str, Any]:
        for row in self.rows.get(path, []):
            if row["id"] == entity_id:
                return row
        raise NotFoundError(f"Resource not found in {path}/{entity_id}")


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def config(tmp_path):
    return Config(
        api_url="http://league.test",
        access_token=None,
        page_size=20,
        search_debounce_ms=0,
        session_dir=tmp_path / "session",
    )


@pytest.fixture
def fake_client():
    client = FakeLeagueClient()
    yield client
    # Never leave a worker thread waiting on a gate
    for gate in [*client.gates.values(), *client.held_responses.values()]:
        gate.set()
    if client.patch_gate is not None:
        client.patch_gate.set()


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def admin(config, fake_client, notifications):
    return LeagueAdmin(config, auth_token="test-token", notifier=notifications, client=fake_client)  # type: ignore[arg-type]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(stale_time=60, gc_time=120, clock=clock)
