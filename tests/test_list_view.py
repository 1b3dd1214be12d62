import asyncio
import threading

import pytest

from hla.core.constants import EntityType
from hla.exceptions import NetworkError
from hla.models.payloads import TeamCreate
from tests.conftest import team_rows
from tests.test_list_query import wait_for


@pytest.fixture
def teams_view(admin, fake_client):
    fake_client.rows["/team"] = team_rows(45)
    view = admin.list_view(EntityType.TEAMS)
    yield view
    view.close()


def get_params(fake_client):
    return [params for _, _, params in fake_client.calls_for("GET")]


class TestListView:
    @pytest.mark.asyncio
    async def test_initial_load(self, teams_view):
        result = await teams_view.set_search_term("")
        assert result is not None
        assert len(teams_view.rows) == 20
        assert teams_view.pager.summary() == "Showing 1 to 20 of 45 results"
        assert not teams_view.loading

    @pytest.mark.asyncio
    async def test_paging_sends_one_based_pages(self, teams_view, fake_client):
        await teams_view.set_search_term("")
        assert await teams_view.next_page()
        assert await teams_view.next_page()
        assert not await teams_view.next_page()
        assert [params["page"] for params in get_params(fake_client)] == [1, 2, 3]
        assert teams_view.pager.current_page == 3

    @pytest.mark.asyncio
    async def test_new_search_resets_to_first_page(self, teams_view, fake_client):
        await teams_view.set_search_term("")
        await teams_view.next_page()
        await teams_view.set_search_term("team 1")
        assert teams_view.pager.page_index == 0
        assert get_params(fake_client)[-1] == {"page": 1, "page_size": 20, "name": "team 1"}
        assert all("Team 1" in row.display_name for row in teams_view.rows)

    @pytest.mark.asyncio
    async def test_going_back_is_served_from_cache(self, teams_view, fake_client):
        await teams_view.set_search_term("")
        await teams_view.next_page()
        await teams_view.previous_page()
        assert len(get_params(fake_client)) == 2
        assert teams_view.pager.current_page == 1

    @pytest.mark.asyncio
    async def test_latest_search_wins(self, teams_view, fake_client):
        slow = fake_client.gates["team 0"] = threading.Event()
        first = asyncio.create_task(teams_view.set_search_term("team 0"))
        await wait_for(lambda: len(fake_client.calls_for("GET")) == 1)

        await teams_view.set_search_term("team 4")
        slow.set()
        assert await first is None
        assert teams_view.search_term == "team 4"
        assert {row.name for row in teams_view.rows} == {"Team 04", "Team 40", "Team 41", "Team 42", "Team 43", "Team 44", "Team 45"}

    @pytest.mark.asyncio
    async def test_debounced_typing_commits_final_term(self, teams_view, fake_client):
        teams_view.debouncer.delay = 0.05
        for text in ("t", "te", "team 2"):
            teams_view.type_search(text)
        await wait_for(lambda: teams_view.debouncer.last_task is not None)
        await teams_view.debouncer.last_task
        assert [params.get("name") for params in get_params(fake_client)] == ["team 2"]

    @pytest.mark.asyncio
    async def test_error_keeps_rows_until_retry(self, teams_view, fake_client):
        await teams_view.set_search_term("")
        fake_client.fail_with["list_page"] = NetworkError(url="http://league.test/team")

        assert await teams_view.retry() is None
        assert isinstance(teams_view.error, NetworkError)
        assert len(teams_view.rows) == 20

        del fake_client.fail_with["list_page"]
        assert await teams_view.retry() is not None
        assert teams_view.error is None

    @pytest.mark.asyncio
    async def test_invalidation_triggers_refetch(self, admin, teams_view, fake_client):
        changes = []
        teams_view.on_change = lambda: changes.append(teams_view.loading)
        await teams_view.set_search_term("")
        admin.cache.invalidate(EntityType.TEAMS)
        await wait_for(lambda: len(fake_client.calls_for("GET")) == 2 and not teams_view.loading)
        assert not admin.cache.entry(teams_view.current_key()).invalidated

    @pytest.mark.asyncio
    async def test_single_match_fits_one_page(self, admin, fake_client):
        view = admin.list_view(EntityType.COUNTRIES)
        try:
            result = await view.set_search_term("Canada")
            assert (result.total, result.total_pages) == (1, 1)
            assert not result.has_next
            assert not result.has_previous
            assert [row.name for row in view.rows] == ["Canada"]
            assert view.pager.page_index == 0
            assert not await view.next_page()
            assert not await view.previous_page()
            assert get_params(fake_client) == [{"page": 1, "page_size": 20, "name": "Canada"}]
        finally:
            view.close()

    @pytest.mark.asyncio
    async def test_invalidation_during_load_refetches(self, admin, fake_client):
        view = admin.list_view(EntityType.TEAMS)
        try:
            await view.set_search_term("")
            hold = fake_client.held_responses[""] = threading.Event()
            reload = asyncio.create_task(view.retry())
            await wait_for(lambda: len(fake_client.calls_for("GET")) == 2)

            await admin.mutations.create(EntityType.TEAMS, TeamCreate(name="Zed", country_id=2))
            hold.set()
            await reload

            assert len(fake_client.calls_for("GET")) == 3
            assert "Zed" in [row.display_name for row in view.rows]
            assert not admin.cache.entry(view.current_key()).invalidated
            assert not view.loading
        finally:
            view.close()
