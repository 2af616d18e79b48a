"""
Tests for assignflow.channel
============================

Queue ordering, drain semantics, completion publication, and waiting.
"""

import random
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from assignflow.channel import SharedChannel
from assignflow.errors import ProtocolError
from assignflow.models import Priority, PriorityItem

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _item(desc, days, priority=Priority.MEDIUM):
    return PriorityItem(description=desc, due=NOW + timedelta(days=days), priority=priority)


# ===========================================================================
# push / drain_all
# ===========================================================================


class TestDrain:

    def test_drain_empty_returns_empty_list(self):
        channel = SharedChannel()
        assert channel.drain_all() == []
        assert channel.drain_all() == []

    def test_drain_empty_does_not_block(self):
        channel = SharedChannel()
        start = time.monotonic()
        channel.drain_all()
        assert time.monotonic() - start < 0.5

    def test_drain_removes_everything(self):
        channel = SharedChannel()
        for i in range(5):
            channel.push(_item(str(i), i))
        assert len(channel.drain_all()) == 5
        assert channel.empty
        assert channel.size == 0
        assert channel.drain_all() == []

    def test_reference_ordering(self):
        channel = SharedChannel()
        pushed = [
            _item("milk", 2, Priority.MEDIUM),
            _item("show", 6, Priority.LOW),
            _item("course", 5, Priority.MEDIUM),
            _item("work1", 4, Priority.HIGH),
            _item("work2", 2, Priority.HIGH),
            _item("restaurant", 13, Priority.LOW),
        ]
        for item in pushed:
            channel.push(item)

        drained = channel.drain_all()
        assert [i.description for i in drained] == [
            "work2", "milk", "work1", "course", "show", "restaurant",
        ]

    def test_arbitrary_insertion_order(self):
        rng = random.Random(1234)
        items = [
            _item(f"item-{i}", rng.randint(0, 10), rng.choice(list(Priority)))
            for i in range(200)
        ]
        shuffled = list(items)
        rng.shuffle(shuffled)

        channel = SharedChannel()
        drains = []
        for i, item in enumerate(shuffled):
            channel.push(item)
            if i % 37 == 0:
                drains.append(channel.drain_all())
        drains.append(channel.drain_all())

        drained = [item for batch in drains for item in batch]
        assert len(drained) == len(items)
        assert sorted(i.description for i in drained) == sorted(i.description for i in items)
        # Each drain is ordered; the concatenation of drains need not be.
        for batch in drains:
            keys = [i.sort_key for i in batch]
            assert keys == sorted(keys)

    def test_single_drain_is_ordered(self):
        rng = random.Random(42)
        channel = SharedChannel()
        for i in range(100):
            channel.push(_item(str(i), rng.randint(0, 5), rng.choice(list(Priority))))
        drained = channel.drain_all()
        keys = [i.sort_key for i in drained]
        assert keys == sorted(keys)

    def test_ties_keep_insertion_order(self):
        channel = SharedChannel()
        for name in ["first", "second", "third"]:
            channel.push(_item(name, 1, Priority.HIGH))
        assert [i.description for i in channel.drain_all()] == ["first", "second", "third"]

    def test_push_rejects_non_items(self):
        channel = SharedChannel()
        with pytest.raises(TypeError):
            channel.push("not an item")
        assert channel.empty

    def test_len_and_size(self):
        channel = SharedChannel()
        channel.push(_item("a", 1))
        channel.push(_item("b", 2))
        assert len(channel) == 2
        assert channel.size == 2
        assert not channel.empty


# ===========================================================================
# Completion state
# ===========================================================================


class TestCompletion:

    def test_initial_state(self):
        channel = SharedChannel()
        assert channel.is_production_done() is False
        assert channel.snapshot() == (False, None)

    def test_total_before_done_is_protocol_error(self):
        channel = SharedChannel()
        with pytest.raises(ProtocolError):
            channel.get_total_count()

    def test_mark_done_publishes_count(self):
        channel = SharedChannel()
        channel.mark_production_done(6)
        assert channel.is_production_done() is True
        assert channel.get_total_count() == 6
        assert channel.snapshot() == (True, 6)

    def test_mark_done_zero(self):
        channel = SharedChannel()
        channel.mark_production_done(0)
        assert channel.get_total_count() == 0

    def test_mark_done_twice_is_protocol_error(self):
        channel = SharedChannel()
        channel.mark_production_done(3)
        with pytest.raises(ProtocolError):
            channel.mark_production_done(5)
        assert channel.get_total_count() == 3

    def test_negative_count_rejected(self):
        channel = SharedChannel()
        with pytest.raises(ValueError):
            channel.mark_production_done(-1)
        assert channel.is_production_done() is False

    def test_push_after_done_is_protocol_error(self):
        channel = SharedChannel()
        channel.mark_production_done(0)
        with pytest.raises(ProtocolError):
            channel.push(_item("late", 1))
        assert channel.empty

    def test_protocol_error_is_runtime_error(self):
        assert issubclass(ProtocolError, RuntimeError)


# ===========================================================================
# wait_for_items / wake
# ===========================================================================


class TestWaiting:

    def test_wait_times_out_when_empty(self):
        channel = SharedChannel()
        start = time.monotonic()
        assert channel.wait_for_items(timeout=0.05) is False
        assert time.monotonic() - start >= 0.04

    def test_wait_returns_immediately_with_items(self):
        channel = SharedChannel()
        channel.push(_item("a", 1))
        start = time.monotonic()
        assert channel.wait_for_items(timeout=5) is True
        assert time.monotonic() - start < 1

    def test_wait_returns_immediately_when_done(self):
        channel = SharedChannel()
        channel.mark_production_done(0)
        start = time.monotonic()
        assert channel.wait_for_items(timeout=5) is False
        assert time.monotonic() - start < 1

    def test_push_wakes_waiter(self):
        channel = SharedChannel()
        result = {}

        def waiter():
            result["available"] = channel.wait_for_items(timeout=5)

        t = threading.Thread(target=waiter)
        t.start()
        time.sleep(0.05)
        channel.push(_item("a", 1))
        t.join(timeout=2)
        assert not t.is_alive()
        assert result["available"] is True

    def test_wake_releases_waiter(self):
        channel = SharedChannel()
        t = threading.Thread(target=channel.wait_for_items, kwargs={"timeout": 5})
        start = time.monotonic()
        t.start()
        time.sleep(0.05)
        channel.wake()
        t.join(timeout=2)
        assert not t.is_alive()
        assert time.monotonic() - start < 2
