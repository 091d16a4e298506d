"""Stat Store.

Redis-backed document store for stats and their values.

Layout:
    stat:{stat_id}  -> JSON document (metadata + values in insertion order)
    stats:index     -> sorted set of stat ids scored by creation time

Every read-modify-write runs as an optimistic WATCH/MULTI/EXEC
transaction on the stat key, so concurrent value inserts or field
updates on the same stat are retried instead of lost.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from pydantic.alias_generators import to_camel
from redis.exceptions import RedisError, WatchError

from app.exceptions import (
    InvalidPayloadError,
    StatNotFoundError,
    StoreError,
    ValueNotFoundError,
)
from app.logging_config import get_logger
from app.metrics import (
    STATS_CREATED,
    STATS_DELETED,
    STORE_ERRORS,
    TRANSACTION_RETRIES,
    VALUES_ADDED,
    VALUES_REMOVED,
)
from services.value_collection import Value, ValueCollection, utc_now

logger = get_logger(__name__)

_STAT_PREFIX = "stat:"
INDEX_KEY = "stats:index"

T = TypeVar("T")


class Stat(BaseModel):
    """A named time series and its recorded values."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    stat_id: str
    name: str | None = None
    description: str | None = None
    chart: bool = False
    public: bool = False
    showroom: bool = False
    created: datetime
    values: list[Value] = Field(default_factory=list)

    def value_collection(self) -> ValueCollection:
        return ValueCollection(self.values)

    def to_document(self) -> str:
        return self.model_dump_json(by_alias=True)


class StatPatch(BaseModel):
    """Partial update of a stat's mutable metadata.

    Only fields that are present and non-null are applied. Empty strings
    are rejected for ``name`` and ``description``, so a patch cannot
    reset them to blank.
    """

    model_config = ConfigDict(extra="ignore")

    name: StrictStr | None = Field(None, min_length=1)
    description: StrictStr | None = Field(None, min_length=1)
    chart: StrictBool | None = None
    public: StrictBool | None = None
    showroom: StrictBool | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.changes()


def _stat_key(stat_id: str) -> str:
    return f"{_STAT_PREFIX}{stat_id}"


@contextmanager
def _store_errors(
    operation: str, stat_id: str | None = None, value_id: str | None = None
) -> Iterator[None]:
    """Surface Redis failures as StoreError with operation context."""
    try:
        yield
    except RedisError as e:
        STORE_ERRORS.labels(operation=operation).inc()
        logger.error(
            "stat_store_error",
            operation=operation,
            stat_id=stat_id,
            value_id=value_id,
            error=str(e),
        )
        raise StoreError(operation, stat_id=stat_id, value_id=value_id) from e


class StatStore:
    """Owns stat identity and metadata; delegates values to ValueCollection."""

    def __init__(self, redis_client: Any) -> None:
        self._redis = redis_client

    async def create_stat(self) -> Stat:
        """Allocate an empty stat with a fresh id."""
        stat = Stat(stat_id=uuid.uuid4().hex, created=utc_now())

        with _store_errors("creating_stat", stat.stat_id):
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(_stat_key(stat.stat_id), stat.to_document())
                pipe.zadd(INDEX_KEY, {stat.stat_id: stat.created.timestamp()})
                await pipe.execute()

        STATS_CREATED.inc()
        logger.info("stat_created", stat_id=stat.stat_id)
        return stat

    async def get_stat(self, stat_id: str) -> Stat:
        """Load one stat. Raises StatNotFoundError if absent."""
        with _store_errors("getting_stat", stat_id):
            raw = await self._redis.get(_stat_key(stat_id))
        if raw is None:
            raise StatNotFoundError(stat_id)
        return Stat.model_validate_json(raw)

    async def list_stats(self) -> list[Stat]:
        """All stats, newest first."""
        with _store_errors("getting_all_stats"):
            raw_ids = await self._redis.zrevrange(INDEX_KEY, 0, -1)
            if not raw_ids:
                return []
            ids = [i.decode() if isinstance(i, bytes) else i for i in raw_ids]
            documents = await self._redis.mget([_stat_key(i) for i in ids])

        # A stat deleted between the two reads leaves a gap
        stats = [Stat.model_validate_json(doc) for doc in documents if doc is not None]
        return sorted(stats, key=lambda s: s.created, reverse=True)

    async def update_stat(self, stat_id: str, patch: StatPatch) -> Stat:
        """Apply the fields present in ``patch``; others keep their values."""
        if patch.is_empty():
            raise InvalidPayloadError()
        changes = patch.changes()

        def apply(stat: Stat) -> None:
            for field_name, new_value in changes.items():
                setattr(stat, field_name, new_value)

        stat, _ = await self._mutate("updating_stat", stat_id, apply)
        logger.info("stat_updated", stat_id=stat_id, fields=sorted(changes))
        return stat

    async def delete_stat(self, stat_id: str) -> bool:
        """Remove a stat and all of its values.

        Returns whether anything was deleted; a missing id is not an error.
        """
        with _store_errors("deleting_stat", stat_id):
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.delete(_stat_key(stat_id))
                pipe.zrem(INDEX_KEY, stat_id)
                deleted, _ = await pipe.execute()

        existed = deleted > 0
        if existed:
            STATS_DELETED.inc()
            logger.info("stat_deleted", stat_id=stat_id)
        else:
            logger.info("stat_delete_noop", stat_id=stat_id)
        return existed

    async def add_value(
        self, stat_id: str, value: str, timestamp: datetime | None = None
    ) -> ValueCollection:
        """Insert a value into a stat and return the refreshed collection."""
        # Captured once so a retried transaction keeps the same default
        moment = timestamp if timestamp is not None else utc_now()

        def apply(stat: Stat) -> Value:
            collection = stat.value_collection()
            entry = collection.insert(value, moment)
            stat.values = collection.to_list()
            return entry

        stat, entry = await self._mutate("adding_value", stat_id, apply)
        VALUES_ADDED.inc()
        logger.info("value_added", stat_id=stat_id, value_id=entry.value_id)
        return stat.value_collection()

    async def remove_value(self, stat_id: str, value_id: str) -> ValueCollection:
        """Remove one value. Raises ValueNotFoundError if the stat lacks it."""

        def apply(stat: Stat) -> None:
            collection = stat.value_collection()
            if not collection.remove(value_id):
                raise ValueNotFoundError(stat_id, value_id)
            stat.values = collection.to_list()

        stat, _ = await self._mutate("deleting_value", stat_id, apply, value_id=value_id)
        VALUES_REMOVED.inc()
        logger.info("value_removed", stat_id=stat_id, value_id=value_id)
        return stat.value_collection()

    async def get_value(self, stat_id: str, value_id: str) -> Value:
        stat = await self.get_stat(stat_id)
        entry = stat.value_collection().get(value_id)
        if entry is None:
            raise ValueNotFoundError(stat_id, value_id)
        return entry

    async def _mutate(
        self,
        operation: str,
        stat_id: str,
        apply: Callable[[Stat], T],
        value_id: str | None = None,
    ) -> tuple[Stat, T]:
        """Read-modify-write one stat document under WATCH.

        ``apply`` mutates the loaded stat in place. Domain errors it raises
        abort the transaction without writing.
        """
        key = _stat_key(stat_id)
        with _store_errors(operation, stat_id, value_id):
            async with self._redis.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(key)
                        raw = await pipe.get(key)
                        if raw is None:
                            raise StatNotFoundError(stat_id)
                        stat = Stat.model_validate_json(raw)
                        result = apply(stat)

                        pipe.multi()
                        pipe.set(key, stat.to_document())
                        await pipe.execute()
                        return stat, result
                    except WatchError:
                        TRANSACTION_RETRIES.labels(operation=operation).inc()
                        logger.debug("stat_transaction_retry", operation=operation, stat_id=stat_id)
                        continue
