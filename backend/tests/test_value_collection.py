"""Tests for ValueCollection ordering and classification."""

import random
from datetime import UTC, datetime, timedelta

import pytest

from services.value_collection import Classification, ValueCollection, as_utc, is_numeric

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def collection():
    return ValueCollection()


class TestIsNumeric:
    @pytest.mark.parametrize(
        "raw", ["5", "-3", "+2.5", "0.75", ".5", "5.", "1e3", "-2.5E-2", " 42 "]
    )
    def test_accepts_decimal_numbers(self, raw):
        assert is_numeric(raw) is True

    @pytest.mark.parametrize(
        "raw", ["", "   ", "abc", "5kg", "1.2.3", "nan", "inf", "-Infinity", "0x1F", "1_000", "1e999"]
    )
    def test_rejects_everything_else(self, raw):
        assert is_numeric(raw) is False


class TestInsert:
    def test_insert_returns_value_with_fresh_id(self, collection):
        first = collection.insert("5", T0)
        second = collection.insert("5", T0)
        assert first.value_id != second.value_id
        assert len(collection) == 2

    def test_insert_accepts_empty_string(self, collection):
        entry = collection.insert("")
        assert entry.value == ""
        assert len(collection) == 1

    def test_insert_defaults_timestamp_to_now(self, collection):
        before = datetime.now(UTC)
        entry = collection.insert("1")
        after = datetime.now(UTC)
        assert before <= entry.timestamp <= after

    def test_insert_keeps_explicit_timestamp(self, collection):
        entry = collection.insert("1", T0)
        assert entry.timestamp == T0

    def test_naive_timestamp_is_treated_as_utc(self, collection):
        entry = collection.insert("1", datetime(2026, 1, 1, 12, 0))
        assert entry.timestamp == T0
        assert entry.timestamp.tzinfo is not None

    def test_as_utc_converts_offsets(self):
        from datetime import timezone

        plus_two = datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert as_utc(plus_two) == T0
        assert as_utc(plus_two).utcoffset() == timedelta(0)


class TestRemove:
    def test_remove_existing(self, collection):
        entry = collection.insert("1", T0)
        assert collection.remove(entry.value_id) is True
        assert len(collection) == 0

    def test_remove_missing_returns_false(self, collection):
        collection.insert("1", T0)
        assert collection.remove("bad-id") is False
        assert len(collection) == 1

    def test_remove_only_matching_entry(self, collection):
        keep = collection.insert("1", T0)
        drop = collection.insert("2", T0 + timedelta(minutes=1))
        collection.remove(drop.value_id)
        assert [v.value_id for v in collection] == [keep.value_id]

    def test_get(self, collection):
        entry = collection.insert("7", T0)
        assert collection.get(entry.value_id) == entry
        assert collection.get("missing") is None


class TestListSorted:
    def test_most_recent_first(self, collection):
        collection.insert("old", T0)
        collection.insert("new", T0 + timedelta(hours=1))
        collection.insert("backdated", T0 - timedelta(days=1))
        assert [v.value for v in collection.list_sorted()] == ["new", "old", "backdated"]

    def test_does_not_reorder_storage(self, collection):
        collection.insert("a", T0)
        collection.insert("b", T0 + timedelta(hours=1))
        collection.list_sorted()
        assert [v.value for v in collection.to_list()] == ["a", "b"]

    def test_non_increasing_for_random_insertions(self, collection):
        rng = random.Random(1234)
        for i in range(200):
            collection.insert(str(i), T0 + timedelta(seconds=rng.randint(-10_000, 10_000)))

        ordered = collection.list_sorted()
        assert len(ordered) == 200
        for newer, older in zip(ordered, ordered[1:]):
            assert newer.timestamp >= older.timestamp


class TestClassify:
    def test_empty_collection(self, collection):
        assert collection.classify() == Classification(count=0, numeric=False, counting=False)

    def test_all_numeric(self, collection):
        collection.insert("5", T0)
        collection.insert("-2.5", T0)
        result = collection.classify()
        assert result.count == 2
        assert result.numeric is True
        assert result.counting is False

    def test_all_empty_is_counting(self, collection):
        collection.insert("", T0)
        collection.insert("", T0)
        result = collection.classify()
        assert result.counting is True
        assert result.numeric is False

    def test_numeric_and_empty_is_neither(self, collection):
        collection.insert("5", T0)
        collection.insert("", T0 + timedelta(minutes=1))
        result = collection.classify()
        assert result.count == 2
        assert result.numeric is False
        assert result.counting is False

    def test_free_text_is_neither(self, collection):
        collection.insert("felt great", T0)
        result = collection.classify()
        assert result.numeric is False
        assert result.counting is False

    def test_pure_across_calls(self, collection):
        collection.insert("5", T0)
        assert collection.classify() == collection.classify()

    def test_insert_then_remove_restores_classification(self, collection):
        collection.insert("5", T0)
        collection.insert("6", T0)
        before = collection.classify()

        entry = collection.insert("", T0 + timedelta(hours=1))
        assert collection.classify() != before

        collection.remove(entry.value_id)
        assert collection.classify() == before

    def test_reflects_backdated_insert(self, collection):
        collection.insert("", T0)
        assert collection.classify().counting is True
        collection.insert("3", T0 - timedelta(days=30))
        assert collection.classify().counting is False
