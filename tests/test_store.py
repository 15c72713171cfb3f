"""
PURPOSE: Tests for the bounded message store and id generation.

Covers:
- Newest-first ordering and FIFO eviction at capacity
- Lifetime counter independent of eviction
- Snapshot stability and clear() idempotence
- Unique ids under concurrent appends
"""

import threading

import pytest

from hookrelay.config.constants import Category
from hookrelay.webhook.ids import MessageIdGenerator
from hookrelay.webhook.store import EventStore


class TestAppend:
    """Test EventStore.append."""

    def test_append_builds_message(self, store, sample_alert):
        message = store.append(sample_alert, "10.0.0.1", "application/json", "TradingView")

        assert message.payload == sample_alert
        assert message.category is Category.ALERT
        assert message.source_addr == "10.0.0.1"
        assert message.content_type == "application/json"
        assert message.user_agent == "TradingView"
        assert message.received_at.tzinfo is not None
        assert store.total_count == 1
        assert len(store) == 1

    def test_newest_first(self, store):
        first = store.append({"n": 1}, "a")
        second = store.append({"n": 2}, "a")

        messages, _ = store.snapshot()
        assert [m.id for m in messages] == [second.id, first.id]
        assert store.last_received_at == second.received_at

    def test_messages_are_immutable(self, store):
        message = store.append("hello", "a")
        with pytest.raises(Exception):
            message.id = "other"

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            EventStore(capacity=0)


class TestEviction:
    """Test ring buffer semantics."""

    def test_keeps_most_recent_hundred(self, store):
        ids = [store.append({"n": i}, "a").id for i in range(150)]

        messages, total = store.snapshot()
        assert len(messages) == 100
        assert total == 150
        assert [m.id for m in messages] == list(reversed(ids[-100:]))

    def test_one_over_capacity_drops_first(self, store):
        first = store.append({"n": 0}, "a")
        for i in range(1, 101):
            store.append({"n": i}, "a")

        messages, total = store.snapshot()
        assert total == 101
        assert len(messages) == 100
        assert first.id not in {m.id for m in messages}

    def test_small_capacity(self):
        small = EventStore(capacity=2)
        small.append("a", "x")
        b = small.append("b", "x")
        c = small.append("c", "x")
        assert [m.id for m in small.snapshot().messages] == [c.id, b.id]


class TestSnapshotAndClear:
    """Test snapshot copies and clear()."""

    def test_snapshot_unaffected_by_later_appends(self, store):
        store.append("one", "a")
        snapshot = store.snapshot()
        store.append("two", "a")

        assert len(snapshot.messages) == 1
        assert snapshot.total_count == 1

    def test_clear_resets_everything(self, store):
        for i in range(5):
            store.append({"n": i}, "a")
        store.clear()

        assert store.snapshot() == ((), 0)
        assert store.last_received_at is None

    def test_clear_is_idempotent(self, store):
        store.append("x", "a")
        store.clear()
        once = store.snapshot()
        store.clear()
        assert store.snapshot() == once

    def test_counter_continues_after_clear(self, store):
        first = store.append("x", "a")
        store.clear()
        second = store.append("y", "a")

        assert store.total_count == 1
        assert second.id != first.id


class TestIds:
    """Test message id generation."""

    def test_ids_unique_with_fixed_salt(self):
        generator = MessageIdGenerator(salt="s")
        assert generator.next_id() == "s-000001"
        assert generator.next_id() == "s-000002"

    def test_ids_unique_across_threads(self, store):
        ids = []
        lock = threading.Lock()

        def worker():
            for _ in range(200):
                message = store.append("x", "a")
                with lock:
                    ids.append(message.id)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(ids) == 1600
        assert len(set(ids)) == 1600
        assert store.total_count == 1600
        assert len(store) == 100
