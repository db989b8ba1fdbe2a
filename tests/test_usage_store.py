"""
Tests for the in-memory usage store: lazy creation, the per-record
window, write-back on increment, read-only peeks and wholesale clears.

Run with: pytest tests/test_usage_store.py -v
"""
from __future__ import annotations

from datetime import timedelta

from relay.usage import UsageRecord, UsageStore


class TestGetOrCreate:
    def test_unseen_user_gets_fresh_record(self, store, clock):
        record = store.get_or_create("alice")
        assert record.count == 0
        assert record.last_reset == clock.now
        assert "alice" in store

    def test_returns_same_record_on_repeat_lookup(self, store):
        first = store.get_or_create("alice")
        assert store.get_or_create("alice") is first
        assert len(store) == 1


class TestWindowPolicy:
    def test_record_inside_window_untouched(self, store, clock):
        record = store.get_or_create("alice")
        store.increment("alice", record)
        clock.advance(days=29, hours=23)
        store.apply_window_policy(record)
        assert record.count == 1

    def test_record_resets_once_window_elapsed(self, store, clock):
        record = store.get_or_create("alice")
        store.increment("alice", record)
        store.increment("alice", record)
        clock.advance(days=30)
        store.apply_window_policy(record)
        assert record.count == 0
        assert record.last_reset == clock.now

    def test_disabled_window_never_resets(self, clock):
        store = UsageStore(window=None, clock=clock)
        record = store.get_or_create("alice")
        store.increment("alice", record)
        clock.advance(days=3650)
        assert store.apply_window_policy(record).count == 1


class TestIncrement:
    def test_increment_writes_back(self, store):
        record = store.get_or_create("alice")
        updated = store.increment("alice", record)
        assert updated is record
        assert store.get_or_create("alice").count == 1

    def test_increment_after_clear_does_not_resurrect_old_count(self, store):
        record = store.get_or_create("alice")
        for _ in range(5):
            store.increment("alice", record)
        store.clear()
        updated = store.increment("alice", record)
        assert updated is not record
        assert updated.count == 1
        assert store.get_or_create("alice").count == 1

    def test_increment_after_clear_lands_on_live_record(self, store):
        stale = store.get_or_create("alice")
        store.increment("alice", stale)
        store.clear()
        live = store.get_or_create("alice")
        store.increment("alice", stale)
        assert live.count == 1


class TestPeek:
    def test_peek_unknown_user_does_not_create(self, store):
        assert store.peek("ghost").count == 0
        assert "ghost" not in store
        assert len(store) == 0

    def test_peek_returns_copy(self, store):
        record = store.get_or_create("alice")
        store.increment("alice", record)
        snapshot = store.peek("alice")
        snapshot.count = 99
        assert record.count == 1

    def test_peek_applies_window_without_mutating(self, store, clock):
        record = store.get_or_create("alice")
        store.increment("alice", record)
        original_reset = record.last_reset
        clock.advance(days=31)
        assert store.peek("alice").count == 0
        assert record.count == 1
        assert record.last_reset == original_reset


class TestClear:
    def test_clear_drops_everyone(self, store):
        for user in ("a", "b", "c"):
            store.get_or_create(user)
        assert store.clear() == 3
        assert len(store) == 0

    def test_clear_ignores_record_age(self, store, clock):
        store.get_or_create("old")
        clock.advance(days=10)
        store.get_or_create("new")
        store.clear()
        assert "old" not in store
        assert "new" not in store


def test_record_defaults():
    record = UsageRecord()
    assert record.count == 0
    assert record.last_reset.tzinfo is not None


def test_default_window_is_thirty_days():
    assert UsageStore().window == timedelta(days=30)
