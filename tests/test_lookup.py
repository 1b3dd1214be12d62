import pytest

from hla.cli.utils.forms import parse_date, resolve_form_values
from hla.core.constants import EntityType
from hla.exceptions import ValidationError
from hla.models.payloads import MatchUpdate, TeamCreate


class TestEntityLookup:
    @pytest.mark.asyncio
    async def test_numeric_input_is_an_id(self, admin, fake_client):
        assert await admin.lookup(EntityType.COUNTRIES, "country_id").resolve("42") == 42
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_misspelled_name(self, admin):
        assert await admin.lookup(EntityType.COUNTRIES, "country_id").resolve("finand") == 2

    @pytest.mark.asyncio
    async def test_no_match(self, admin):
        with pytest.raises(ValidationError) as info:
            await admin.lookup(EntityType.COUNTRIES, "country_id").resolve("Atlantis")
        assert info.value.field == "country_id"
        assert "Atlantis" in info.value.message

    @pytest.mark.asyncio
    async def test_blank_is_required_error(self, admin):
        with pytest.raises(ValidationError, match="Country id is required"):
            await admin.lookup(EntityType.COUNTRIES, "country_id").resolve(" ")


class TestFormValues:
    @pytest.mark.asyncio
    async def test_resolves_reference_names(self, admin, fake_client):
        data = await resolve_form_values(admin, EntityType.TEAMS, TeamCreate, {"name": "Lions", "country_id": "finland"})
        assert data == {"name": "Lions", "country_id": 2}
        # Team countries are picked from enabled countries only
        assert fake_client.calls_for("GET")[0][2]["enabled"] == "true"

    @pytest.mark.asyncio
    async def test_blank_required_field_is_kept(self, admin):
        data = await resolve_form_values(admin, EntityType.TEAMS, TeamCreate, {"name": "", "country_id": None})
        assert data == {"country_id": ""}

    @pytest.mark.asyncio
    async def test_partial_match_update(self, admin):
        data = await resolve_form_values(
            admin, EntityType.MATCHES, MatchUpdate, {"venue": "Rink", "status": "", "match_date": "2025-03-01 19:00"}
        )
        assert data == {"venue": "Rink", "match_date": "2025-03-01T19:00:00"}


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2025-01-31", "date_from", date_only=True) == "2025-01-31"

    def test_invalid_date(self):
        with pytest.raises(ValidationError) as info:
            parse_date("qqq-xyz", "date_from")
        assert info.value.field == "date_from"
