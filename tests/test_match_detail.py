import pytest

from hla.core.constants import EntityType, GoalType
from hla.exceptions import DecodeError, HTTPStatusError, ValidationError
from hla.models.paging import PageRequest
from hla.models.payloads import ScoreEventCreate, build_payload
from hla.models.scoring import MatchDetail, format_goal_time
from hla.services.match_detail import MatchDetailService
from hla.services.notifications import NotificationLevel
from tests.conftest import match_detail_rows


@pytest.fixture
def match_client(fake_client):
    fake_client.rows.update(match_detail_rows())
    return fake_client


@pytest.fixture
def details(admin, match_client, clock):
    return MatchDetailService(admin.client, admin.cache, admin.notifier, clock=clock)


def detail_gets(fake_client):
    return [path for _, path, _ in fake_client.calls_for("GET") if path.startswith("/match/")]


class TestGoalTime:
    @pytest.mark.parametrize(
        "period, minutes, seconds, expected",
        [
            (1, 7, 5, "P1 07:05"),
            (3, 19, 59, "P3 19:59"),
            (4, 3, None, "OT 3:00"),
            (5, None, None, "SO"),
            (None, 12, 0, ""),
        ],
    )
    def test_format(self, period, minutes, seconds, expected):
        assert format_goal_time(period, minutes, seconds) == expected


class TestScoreEventPayload:
    def test_blank_options_are_null(self):
        payload = build_payload(
            ScoreEventCreate, {"team_id": "2", "scorer_id": "", "period": " 2 ", "time_minutes": "7", "goal_type": ""}
        )
        assert payload.to_request_body() == {
            "team_id": 2,
            "scorer_id": None,
            "assist1_id": None,
            "assist2_id": None,
            "period": 2,
            "time_minutes": 7,
            "time_seconds": None,
            "goal_type": None,
        }

    def test_team_required(self):
        with pytest.raises(ValidationError) as info:
            build_payload(ScoreEventCreate, {"team_id": ""})
        assert info.value.field == "team_id"
        assert info.value.message == "Team is required"

    @pytest.mark.parametrize(
        "data, field, message",
        [
            ({"scorer_id": 10, "assist1_id": 10}, "assist1_id", "Scorer and first assist cannot be the same player"),
            ({"scorer_id": 10, "assist2_id": 10}, "assist2_id", "Scorer and second assist cannot be the same player"),
            (
                {"scorer_id": 10, "assist1_id": 11, "assist2_id": 11},
                "assist2_id",
                "First and second assist cannot be the same player",
            ),
            ({"period": 6}, "period", "Period must be between 1 and 5 (1-3 regular, 4=OT, 5=SO)"),
            ({"time_minutes": 61}, "time_minutes", "Minutes must be between 0 and 60"),
            ({"time_seconds": 60}, "time_seconds", "Seconds must be between 0 and 59"),
        ],
    )
    def test_rejected_goals(self, data, field, message):
        with pytest.raises(ValidationError) as info:
            build_payload(ScoreEventCreate, {"team_id": 1, **data})
        assert info.value.field == field
        assert info.value.message == message

    def test_unknown_goal_type(self):
        with pytest.raises(ValidationError) as info:
            build_payload(ScoreEventCreate, {"team_id": 1, "goal_type": "own_goal"})
        assert info.value.field == "goal_type"


class TestMatchDetailModel:
    def test_malformed_stats(self):
        with pytest.raises(DecodeError):
            MatchDetail.from_payload({"match_info": {"id": 7}}, [])


class TestMatchDetailService:
    @pytest.mark.asyncio
    async def test_load_combines_stats_and_goals(self, details, match_client):
        detail = await details.load(7)

        assert detail.match.display_name == "Canada vs Team 02"
        assert (detail.stats.home_total_score, detail.stats.away_total_score) == (2, 1)
        assert detail.match.score == "2:1"
        assert (detail.stats.home_unidentified, detail.stats.away_detailed_goals) == (2, 1)
        [goal] = detail.events_for(2)
        assert goal.time_label == "P2 07:05"
        assert goal.goal_type is GoalType.POWER_PLAY
        assert goal.goal_type_label == "power play"
        assert detail.unidentified_for(1) == 2
        assert detail.unidentified_for(99) == 0

    @pytest.mark.asyncio
    async def test_detail_cached_for_a_minute(self, details, match_client, clock):
        await details.load(7)
        await details.load(7)
        assert len(detail_gets(match_client)) == 2

        clock.advance(61)
        await details.load(7)
        assert len(detail_gets(match_client)) == 4

    @pytest.mark.asyncio
    async def test_add_goal(self, admin, details, match_client, notifications):
        matches = admin.query(EntityType.MATCHES)
        await matches.fetch(PageRequest(page_size=20))
        goal = ScoreEventCreate(team_id=1, scorer_id=10, assist1_id=11, period=3, time_minutes=19, time_seconds=2)

        new_id = await details.add_goal(7, goal)

        assert new_id == 2
        assert notifications.last.level is NotificationLevel.SUCCESS
        assert notifications.last.message == "Score event created successfully"
        assert all(admin.cache.entry(key).invalidated for key in admin.cache.keys_for(EntityType.MATCHES))

        detail = await details.load(7)
        assert detail.stats.home_total_score == 3
        assert [event.scorer_name for event in detail.events_for(1)] == ["Wayne Gretzky"]
        assert detail.events_for(1)[0].assists == ["Mario Lemieux"]

    @pytest.mark.asyncio
    async def test_goal_for_team_not_in_match(self, details, match_client):
        with pytest.raises(ValidationError) as info:
            await details.add_goal(7, ScoreEventCreate(team_id=3))
        assert info.value.field == "team_id"
        assert not any(path.endswith("/score-events") for _, path, _ in match_client.calls_for("POST"))

    @pytest.mark.asyncio
    async def test_identify_goal_keeps_total(self, details, match_client, notifications):
        before = await details.load(7)

        await details.identify_goal(7, ScoreEventCreate(team_id=1, scorer_id=10, period=1, time_minutes=4))

        after = await details.load(7)
        assert after.stats.home_total_score == before.stats.home_total_score == 2
        assert after.stats.home_unidentified == 1
        assert after.stats.home_detailed_goals == 1
        assert notifications.last.message == "Goal identified successfully"

    @pytest.mark.asyncio
    async def test_no_unidentified_goals_left(self, details, match_client):
        with pytest.raises(ValidationError) as info:
            await details.identify_goal(7, ScoreEventCreate(team_id=2, scorer_id=12))
        assert info.value.message == "No unidentified goals available for this team"
        assert match_client.calls_for("POST") == []

    @pytest.mark.asyncio
    async def test_identify_rechecks_backend_counts(self, details, match_client):
        await details.load(7)
        match_client.rows["/match"][0]["home_score_unidentified"] = 0

        with pytest.raises(ValidationError):
            await details.identify_goal(7, ScoreEventCreate(team_id=1))

    @pytest.mark.asyncio
    async def test_delete_goal(self, details, match_client, notifications):
        await details.load(7)
        await details.delete_goal(7, 1)

        assert ("DELETE", "/match/7/score-events/1", None) in match_client.calls
        assert notifications.last.message == "Score event deleted successfully"
        assert (await details.load(7)).events == []

    @pytest.mark.asyncio
    async def test_failed_create_notifies_and_keeps_detail(self, details, match_client, notifications):
        await details.load(7)
        match_client.fail_with["create_score_event"] = HTTPStatusError(500, "Server error in POST /match/7/score-events")

        with pytest.raises(HTTPStatusError):
            await details.add_goal(7, ScoreEventCreate(team_id=1))

        assert notifications.last.level is NotificationLevel.ERROR
        assert notifications.last.message == "Failed to create score event. Please try again."
        await details.load(7)
        assert len(detail_gets(match_client)) == 2

    @pytest.mark.asyncio
    async def test_admin_wires_service(self, admin, match_client):
        detail = await admin.match_details.load(7, admin.auth_token)
        assert detail.match.id == 7
