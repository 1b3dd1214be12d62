import json

import pytest
from typer.testing import CliRunner

from hla.cli.main import app
from hla.exceptions import NetworkError
from hla.services.admin import LeagueAdmin
from hla.services.notifications import ConsoleNotifier
from tests.conftest import match_detail_rows

runner = CliRunner()


@pytest.fixture
def cli_admin(config, fake_client, monkeypatch):
    admin = LeagueAdmin(config, auth_token="test-token", notifier=ConsoleNotifier(), client=fake_client)  # type: ignore[arg-type]
    for module in ("list", "export", "mutate", "match"):
        monkeypatch.setattr(f"hla.cli.commands.{module}.open_admin", lambda token=None, notifier=None: admin)
    return admin


class TestList:
    def test_json_output(self, cli_admin):
        result = runner.invoke(app, ["list", "countries", "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["total"] == 3
        assert data["page"] == 1
        assert [item["name"] for item in data["items"]] == ["Canada", "Finland", "Czechoslovakia"]

    def test_table_output(self, cli_admin, fake_client):
        result = runner.invoke(app, ["list", "teams", "--search", "team", "--page-size", "1", "--page", "2"])
        assert result.exit_code == 0, result.output
        assert "Showing 2 to 2 of 2 results" in result.output
        assert fake_client.calls_for("GET")[0][2] == {"page": 2, "page_size": 1, "name": "team"}

    def test_filter_must_apply(self, cli_admin):
        result = runner.invoke(app, ["list", "countries", "--country", "canada"])
        assert result.exit_code == 1
        assert "does not apply to countries" in result.output

    def test_events_filter_by_country_name(self, cli_admin, fake_client):
        fake_client.rows["/event"] = [
            {"id": 1, "name": "Liiga", "country_id": 2, "country_name": "Finland"},
            {"id": 2, "name": "NHL", "country_id": 1, "country_name": "Canada"},
        ]
        result = runner.invoke(app, ["list", "events", "--country", "Finland", "--format", "json"])
        assert result.exit_code == 0, result.output
        assert fake_client.calls_for("GET")[-1][1:] == ("/event", {"page": 1, "page_size": 20, "country_id": 2})

    def test_network_error_has_retry_hint(self, cli_admin, fake_client):
        fake_client.fail_with["list_page"] = NetworkError("Could not reach API server in GET /country")
        result = runner.invoke(app, ["list", "countries"])
        assert result.exit_code == 1
        assert "Could not reach API server" in result.output
        assert "retry" in result.output


class TestMutations:
    def test_create_national_team(self, cli_admin, fake_client):
        result = runner.invoke(app, ["create", "teams", "--country", "Finland"])
        assert result.exit_code == 0, result.output
        assert 'Team "National Team" created successfully' in result.output
        assert fake_client.calls_for("POST") == [("POST", "/team", {"name": None, "country_id": 2})]

    def test_create_reports_missing_field(self, cli_admin, fake_client):
        result = runner.invoke(app, ["create", "players", "--country", "2"])
        assert result.exit_code == 1
        assert "Invalid name: Name is required" in result.output
        assert fake_client.calls_for("POST") == []

    def test_create_rejects_foreign_option(self, cli_admin):
        result = runner.invoke(app, ["create", "teams", "--name", "A", "--country", "2", "--venue", "Rink"])
        assert result.exit_code == 1
        assert "--venue does not apply to teams" in result.output

    def test_toggle_by_name(self, cli_admin, fake_client):
        result = runner.invoke(app, ["toggle", "countries", "Canada", "--enable"])
        assert result.exit_code == 0, result.output
        assert 'Country "Canada" enabled successfully' in result.output
        assert fake_client.calls_for("PATCH") == [("PATCH", "/country/1", True)]

    def test_toggle_offline(self, cli_admin, fake_client):
        fake_client.fail_with["patch_status"] = NetworkError()
        result = runner.invoke(app, ["toggle", "countries", "1", "--disable"])
        assert result.exit_code == 1
        assert "Failed to update country status. Please try again." in result.output

    def test_delete_asks_for_confirmation(self, cli_admin, fake_client):
        result = runner.invoke(app, ["delete", "teams", "2"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert fake_client.calls_for("DELETE") == []

    def test_delete_with_yes(self, cli_admin, fake_client):
        result = runner.invoke(app, ["delete", "teams", "2", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Team deleted successfully" in result.output
        assert fake_client.calls_for("DELETE") == [("DELETE", "/team/2", None)]

    def test_match_update_needs_a_field(self, cli_admin):
        result = runner.invoke(app, ["update", "matches", "1"])
        assert result.exit_code == 1
        assert "Nothing to update" in result.output


class TestMatchDetail:
    @pytest.fixture(autouse=True)
    def match_rows(self, fake_client):
        fake_client.rows.update(match_detail_rows())

    def test_show_json(self, cli_admin):
        result = runner.invoke(app, ["match", "show", "7", "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert (data["stats"]["home_total_score"], data["stats"]["away_total_score"]) == (2, 1)
        assert [event["scorer_name"] for event in data["events"]] == ["Teemu Selanne"]

    def test_show_table(self, cli_admin):
        result = runner.invoke(app, ["match", "show", "7"])
        assert result.exit_code == 0, result.output
        assert "Canada vs Team 02" in result.output
        assert "P2 07:05" in result.output
        assert "Teemu Selanne" in result.output

    def test_add_goal_resolves_names(self, cli_admin, fake_client):
        args = ["match", "add-goal", "7", "--team", "home", "--scorer", "Wayne Gretzky", "--assist1", "11"]
        result = runner.invoke(app, [*args, "--period", "OT", "--time", "3:15", "--goal-type", "power_play"])
        assert result.exit_code == 0, result.output
        assert "Score event created successfully" in result.output
        assert fake_client.calls_for("POST") == [
            (
                "POST",
                "/match/7/score-events",
                {
                    "team_id": 1,
                    "scorer_id": 10,
                    "assist1_id": 11,
                    "assist2_id": None,
                    "period": 4,
                    "time_minutes": 3,
                    "time_seconds": 15,
                    "goal_type": "power_play",
                },
            )
        ]

    def test_bad_time(self, cli_admin, fake_client):
        result = runner.invoke(app, ["match", "add-goal", "7", "--team", "home", "--time", "7m"])
        assert result.exit_code == 1
        assert "Invalid time" in result.output
        assert fake_client.calls_for("POST") == []

    def test_identify_without_unidentified_goals(self, cli_admin, fake_client):
        result = runner.invoke(app, ["match", "identify-goal", "7", "--team", "away", "--scorer", "12"])
        assert result.exit_code == 1
        assert "No unidentified goals available for this team" in result.output
        assert fake_client.calls_for("POST") == []

    def test_identify_goal(self, cli_admin, fake_client):
        result = runner.invoke(app, ["match", "identify-goal", "7", "--team", "home", "--scorer", "10"])
        assert result.exit_code == 0, result.output
        assert "Goal identified successfully" in result.output
        assert fake_client.rows["/match"][0]["home_score_unidentified"] == 1

    def test_delete_goal(self, cli_admin, fake_client):
        result = runner.invoke(app, ["match", "delete-goal", "7", "1", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Score event deleted successfully" in result.output
        assert fake_client.rows["/score-events"] == []


class TestExport:
    def test_csv_export_walks_pages(self, cli_admin, fake_client, tmp_path):
        target = tmp_path / "teams.csv"
        result = runner.invoke(
            app, ["export", "teams", "--format", "csv", "--page-size", "2", "--quiet", "--output", str(target)]
        )
        assert result.exit_code == 0, result.output
        lines = target.read_text().strip().splitlines()
        assert lines[0].startswith("id,name,country_id")
        assert len(lines) == 4
        assert [params["page"] for _, _, params in fake_client.calls_for("GET")] == [1, 2]

    def test_json_export_to_file(self, cli_admin, tmp_path):
        target = tmp_path / "countries.json"
        result = runner.invoke(app, ["export", "countries", "-o", str(target), "-q"])
        assert result.exit_code == 0, result.output
        assert [row["id"] for row in json.loads(target.read_text())] == [1, 2, 3]
