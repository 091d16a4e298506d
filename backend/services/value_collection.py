"""Value collection for a single stat.

Holds the recorded observations of one stat in insertion order and
derives everything readers see from the current contents:

- ``list_sorted()`` presents values newest first by ``timestamp``.
- ``classify()`` reports ``count`` plus the ``numeric`` / ``counting``
  flags. Both are recomputed on every call; back-dated inserts and
  removals from the middle make cached counters unreliable.
"""

from __future__ import annotations

import math
import re
import uuid
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored timestamps stay comparable."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def is_numeric(raw: str) -> bool:
    """Whether ``raw`` is a non-empty decimal number with a finite value.

    Accepts integers, decimals, a leading sign and an exponent. Rejects
    the empty string, free text, ``nan``/``inf`` and hex literals.
    """
    candidate = raw.strip()
    if not candidate or not _DECIMAL_RE.match(candidate):
        return False
    return math.isfinite(float(candidate))


class Value(BaseModel):
    """One timestamped observation belonging to a stat."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    value_id: str
    value: str = ""
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)


class Classification(BaseModel):
    """Derived, never persisted summary of a collection."""

    count: int = 0
    numeric: bool = False
    counting: bool = False


class ValueCollection:
    """Insertion-ordered values of one stat."""

    def __init__(self, values: Iterable[Value] | None = None) -> None:
        self._values: list[Value] = list(values or [])

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def insert(self, value: str, timestamp: datetime | None = None) -> Value:
        """Append a value, defaulting its timestamp to now.

        Any string is accepted, including the empty string which marks
        a pure count/event entry.
        """
        moment = as_utc(timestamp) if timestamp is not None else utc_now()
        taken = {v.value_id for v in self._values}
        value_id = uuid.uuid4().hex
        while value_id in taken:
            value_id = uuid.uuid4().hex

        entry = Value(value_id=value_id, value=value, timestamp=moment)
        self._values.append(entry)
        return entry

    def remove(self, value_id: str) -> bool:
        """Remove the value with ``value_id``. Returns False if absent."""
        for index, entry in enumerate(self._values):
            if entry.value_id == value_id:
                del self._values[index]
                return True
        return False

    def get(self, value_id: str) -> Value | None:
        for entry in self._values:
            if entry.value_id == value_id:
                return entry
        return None

    def list_sorted(self) -> list[Value]:
        """All values, most recent ``timestamp`` first."""
        return sorted(self._values, key=lambda v: v.timestamp, reverse=True)

    def classify(self) -> Classification:
        count = len(self._values)
        if count == 0:
            return Classification()

        all_numeric = True
        all_empty = True
        for entry in self._values:
            if entry.value != "":
                all_empty = False
            if not is_numeric(entry.value):
                all_numeric = False

        return Classification(count=count, numeric=all_numeric, counting=all_empty)

    def to_list(self) -> list[Value]:
        """Values in insertion order, as persisted."""
        return list(self._values)
