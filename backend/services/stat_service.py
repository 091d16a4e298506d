"""Stat Service: request-level operations and view shaping.

Maps the resource operations (list, create, read, update, delete,
list-values, add-value, get-value, delete-value) onto StatStore and turns
internal state into the externally shaped payloads with materialized URLs.

URL families (must be reproduced exactly by other components):
    url        {api}/{statId}
    uiUrl      {ui}/{statId}
    valuesUrl  {api}/{statId}/values
    value url  {api}/{statId}/values/{valueId}
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.config import Settings
from gateway.stat_store import Stat, StatPatch, StatStore
from services.value_collection import Value, ValueCollection


class _View(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatView(_View):
    """External representation of a stat, without its values."""

    stat_id: str
    name: str | None = None
    description: str | None = None
    chart: bool = False
    public: bool = False
    showroom: bool = False
    created: datetime
    url: str
    ui_url: str
    values_url: str


class ValueView(_View):
    value_id: str
    value: str
    timestamp: datetime
    url: str


class ValueDetailView(ValueView):
    stat_url: str


class ValuesView(_View):
    """Values of one stat, newest first, with derived classification."""

    data: list[ValueView]
    count: int
    numeric: bool
    counting: bool
    stat_url: str


class DeleteConfirmation(_View):
    msg: str = "stat deleted"
    stat_id: str


@dataclass(frozen=True)
class BaseUrls:
    """Base URLs for the API and UI stat collections."""

    api: str
    ui: str


def derive_base_urls(
    scheme: str, netloc: str, settings: Settings, root_path: str = ""
) -> BaseUrls:
    """Build base URLs from the current request's scheme and host.

    In development the UI is served from its own origin (``ui_origin``);
    everywhere else it shares the API's origin.
    """
    origin = f"{scheme}://{netloc}"
    api = f"{origin}{root_path}{settings.api_prefix}/stats"

    ui_origin = origin
    if settings.is_development and settings.ui_origin:
        ui_origin = settings.ui_origin.rstrip("/")

    return BaseUrls(api=api, ui=f"{ui_origin}{settings.ui_stats_path}")


def stat_url(base_api_url: str, stat_id: str) -> str:
    return f"{base_api_url}/{stat_id}"


def value_url(base_api_url: str, stat_id: str, value_id: str) -> str:
    return f"{stat_url(base_api_url, stat_id)}/values/{value_id}"


def to_stat_view(stat: Stat, base_api_url: str, base_ui_url: str) -> StatView:
    return StatView(
        stat_id=stat.stat_id,
        name=stat.name,
        description=stat.description,
        chart=stat.chart,
        public=stat.public,
        showroom=stat.showroom,
        created=stat.created,
        url=stat_url(base_api_url, stat.stat_id),
        ui_url=f"{base_ui_url}/{stat.stat_id}",
        values_url=f"{stat_url(base_api_url, stat.stat_id)}/values",
    )


def to_value_view(value: Value, stat_id: str, base_api_url: str) -> ValueView:
    return ValueView(
        value_id=value.value_id,
        value=value.value,
        timestamp=value.timestamp,
        url=value_url(base_api_url, stat_id, value.value_id),
    )


def to_values_view(values: ValueCollection, stat_id: str, base_api_url: str) -> ValuesView:
    classification = values.classify()
    return ValuesView(
        data=[to_value_view(v, stat_id, base_api_url) for v in values.list_sorted()],
        count=classification.count,
        numeric=classification.numeric,
        counting=classification.counting,
        stat_url=stat_url(base_api_url, stat_id),
    )


class StatService:
    """Resource operations over a StatStore, bound to one request's URLs."""

    def __init__(self, store: StatStore, urls: BaseUrls) -> None:
        self.store = store
        self.urls = urls

    def _stat_view(self, stat: Stat) -> StatView:
        return to_stat_view(stat, self.urls.api, self.urls.ui)

    def _values_view(self, values: ValueCollection, stat_id: str) -> ValuesView:
        return to_values_view(values, stat_id, self.urls.api)

    async def list_stats(self) -> list[StatView]:
        stats = await self.store.list_stats()
        return [self._stat_view(s) for s in stats]

    async def create_stat(self) -> StatView:
        return self._stat_view(await self.store.create_stat())

    async def get_stat(self, stat_id: str) -> StatView:
        return self._stat_view(await self.store.get_stat(stat_id))

    async def update_stat(self, stat_id: str, patch: StatPatch) -> StatView:
        return self._stat_view(await self.store.update_stat(stat_id, patch))

    async def delete_stat(self, stat_id: str) -> DeleteConfirmation:
        await self.store.delete_stat(stat_id)
        return DeleteConfirmation(stat_id=stat_id)

    async def list_values(self, stat_id: str) -> ValuesView:
        stat = await self.store.get_stat(stat_id)
        return self._values_view(stat.value_collection(), stat_id)

    async def add_value(
        self, stat_id: str, value: str, timestamp: datetime | None = None
    ) -> ValuesView:
        values = await self.store.add_value(stat_id, value, timestamp)
        return self._values_view(values, stat_id)

    async def get_value(self, stat_id: str, value_id: str) -> ValueDetailView:
        entry = await self.store.get_value(stat_id, value_id)
        return ValueDetailView(
            **to_value_view(entry, stat_id, self.urls.api).model_dump(),
            stat_url=stat_url(self.urls.api, stat_id),
        )

    async def delete_value(self, stat_id: str, value_id: str) -> ValuesView:
        values = await self.store.remove_value(stat_id, value_id)
        return self._values_view(values, stat_id)
