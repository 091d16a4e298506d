"""Tests for StatService view shaping and URL derivation."""

from datetime import UTC, datetime, timedelta

import pytest

from app.config import Environment, Settings
from app.exceptions import StatNotFoundError, ValueNotFoundError
from gateway.stat_store import Stat, StatPatch
from services.stat_service import (
    BaseUrls,
    StatService,
    derive_base_urls,
    to_stat_view,
    to_values_view,
)
from services.value_collection import ValueCollection

API = "https://stats.example.com/api/v1/stats"
UI = "https://stats.example.com/stats"
T0 = datetime(2026, 5, 4, 8, 0, tzinfo=UTC)


@pytest.fixture
def service(store):
    return StatService(store, BaseUrls(api=API, ui=UI))


class TestDeriveBaseUrls:
    def test_deployed_mode_uses_request_origin_for_both(self):
        settings = Settings(environment=Environment.PRODUCTION)
        urls = derive_base_urls("https", "stats.example.com", settings)
        assert urls.api == "https://stats.example.com/api/v1/stats"
        assert urls.ui == "https://stats.example.com/stats"

    def test_development_mode_uses_configured_ui_origin(self):
        settings = Settings(
            environment=Environment.DEVELOPMENT, ui_origin="http://localhost:3000/"
        )
        urls = derive_base_urls("http", "localhost:8000", settings)
        assert urls.api == "http://localhost:8000/api/v1/stats"
        assert urls.ui == "http://localhost:3000/stats"

    def test_development_without_ui_origin_falls_back_to_request(self):
        settings = Settings(environment=Environment.DEVELOPMENT, ui_origin=None)
        urls = derive_base_urls("http", "localhost:8000", settings)
        assert urls.ui == "http://localhost:8000/stats"

    def test_root_path_is_kept_in_api_url(self):
        settings = Settings(environment=Environment.STAGING)
        urls = derive_base_urls("https", "example.com", settings, root_path="/backend")
        assert urls.api == "https://example.com/backend/api/v1/stats"


class TestStatView:
    def test_links_and_no_values(self):
        stat = Stat(stat_id="abc123", name="Coffee", created=T0)

        view = to_stat_view(stat, API, UI).model_dump(by_alias=True, mode="json")
        assert view["statId"] == "abc123"
        assert view["name"] == "Coffee"
        assert view["url"] == f"{API}/abc123"
        assert view["uiUrl"] == f"{UI}/abc123"
        assert view["valuesUrl"] == f"{API}/abc123/values"
        assert "values" not in view
        assert view["chart"] is False


class TestValuesView:
    def test_scenario_numeric_then_counting_entry(self):
        values = ValueCollection()
        first = values.insert("5", T0)

        view = to_values_view(values, "abc123", API).model_dump(by_alias=True, mode="json")
        assert view["count"] == 1
        assert view["numeric"] is True
        assert view["counting"] is False
        assert view["data"][0]["value"] == "5"
        assert view["data"][0]["valueId"] == first.value_id
        assert view["data"][0]["url"] == f"{API}/abc123/values/{first.value_id}"
        assert view["statUrl"] == f"{API}/abc123"

        values.insert("", T0 + timedelta(minutes=5))
        view = to_values_view(values, "abc123", API).model_dump(by_alias=True, mode="json")
        assert view["count"] == 2
        assert view["numeric"] is False
        assert view["counting"] is False
        assert view["data"][0]["value"] == ""

    def test_empty_collection(self):
        view = to_values_view(ValueCollection(), "abc123", API)
        assert view.data == []
        assert view.count == 0
        assert view.numeric is False
        assert view.counting is False


@pytest.mark.asyncio
class TestStatService:
    async def test_create_and_list(self, service):
        created = await service.create_stat()
        listed = await service.list_stats()
        assert [s.stat_id for s in listed] == [created.stat_id]
        assert created.ui_url == f"{UI}/{created.stat_id}"

    async def test_get_missing_stat(self, service):
        with pytest.raises(StatNotFoundError) as exc_info:
            await service.get_stat("does-not-exist")
        assert exc_info.value.to_dict()["msg"] == "stat not found"

    async def test_update_returns_view(self, service):
        created = await service.create_stat()
        view = await service.update_stat(created.stat_id, StatPatch(name="Steps"))
        assert view.name == "Steps"
        assert view.url == f"{API}/{created.stat_id}"

    async def test_delete_confirmation(self, service):
        created = await service.create_stat()
        confirmation = await service.delete_stat(created.stat_id)
        assert confirmation.model_dump(by_alias=True) == {
            "msg": "stat deleted",
            "statId": created.stat_id,
        }

    async def test_value_round_trip(self, service):
        created = await service.create_stat()
        before = await service.list_values(created.stat_id)

        added = await service.add_value(created.stat_id, "12", T0)
        assert added.count == before.count + 1
        value_id = added.data[0].value_id

        detail = await service.get_value(created.stat_id, value_id)
        assert detail.stat_url == f"{API}/{created.stat_id}"
        assert detail.url == f"{API}/{created.stat_id}/values/{value_id}"

        after = await service.delete_value(created.stat_id, value_id)
        assert after.count == before.count
        assert value_id not in [v.value_id for v in after.data]

    async def test_delete_unknown_value(self, service):
        created = await service.create_stat()
        with pytest.raises(ValueNotFoundError):
            await service.delete_value(created.stat_id, "bad-id")
