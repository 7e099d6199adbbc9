# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for EventBus (modelpile/eventbus.py)."""

import logging

import pytest

from modelpile.eventbus import EventBus


# ---------------------------------------------------------------------------
# subscribe / unsubscribe
# ---------------------------------------------------------------------------


class TestSubscribe:
    def test_subscribe_adds_handler(self):
        bus = EventBus()
        bus.subscribe("add", lambda *a: None)
        assert bus.has_subscribers("add")
        assert len(bus) == 1

    def test_subscribe_rejects_non_callable(self):
        bus = EventBus()
        with pytest.raises(TypeError):
            bus.subscribe("add", "not callable")

    def test_same_handler_twice_is_called_twice(self):
        bus = EventBus()
        calls = []

        def handler():
            calls.append(1)

        bus.subscribe("ping", handler)
        bus.subscribe("ping", handler)
        bus.emit("ping")
        assert calls == [1, 1]


class TestUnsubscribe:
    def test_unsubscribe_removes_handler(self):
        bus = EventBus()

        def handler():
            pass

        bus.subscribe("ping", handler)
        bus.unsubscribe("ping", handler)
        assert not bus.has_subscribers("ping")
        assert "ping" not in bus.topics()

    def test_unsubscribe_nonexistent_is_noop(self):
        bus = EventBus()
        bus.unsubscribe("ping", lambda: None)
        assert len(bus) == 0

    def test_unsubscribe_only_removes_one_registration(self):
        bus = EventBus()
        calls = []

        def handler():
            calls.append(1)

        bus.subscribe("ping", handler)
        bus.subscribe("ping", handler)
        bus.unsubscribe("ping", handler)
        bus.emit("ping")
        assert calls == [1]

    def test_clear(self):
        bus = EventBus()
        bus.subscribe("a", lambda: None)
        bus.subscribe("b", lambda: None)
        bus.clear()
        assert bus.topics() == []


# ---------------------------------------------------------------------------
# emit
# ---------------------------------------------------------------------------


class TestEmit:
    def test_handlers_called_in_subscription_order(self):
        bus = EventBus()
        order = []
        bus.subscribe("ping", lambda: order.append("first"))
        bus.subscribe("ping", lambda: order.append("second"))
        bus.emit("ping")
        assert order == ["first", "second"]

    def test_arguments_are_passed_through(self):
        bus = EventBus()
        received = []
        bus.subscribe("name", lambda *args, **kw: received.append((args, kw)))
        bus.emit("name", "Bob", "Alice", flag=True)
        assert received == [(("Bob", "Alice"), {"flag": True})]

    def test_emit_without_subscribers(self):
        bus = EventBus()
        bus.emit("nothing")
        assert bus.statistics("nothing")["emitted"] == 1

    def test_other_topics_not_called(self):
        bus = EventBus()
        calls = []
        bus.subscribe("a", lambda: calls.append("a"))
        bus.emit("b")
        assert calls == []

    def test_subscribe_during_emit_affects_next_emit_only(self):
        bus = EventBus()
        calls = []

        def late():
            calls.append("late")

        def first():
            calls.append("first")
            bus.subscribe("ping", late)

        bus.subscribe("ping", first)
        bus.emit("ping")
        assert calls == ["first"]
        bus.emit("ping")
        assert calls == ["first", "first", "late"]

    def test_statistics_count_handled(self):
        bus = EventBus()
        bus.subscribe("ping", lambda: None)
        bus.subscribe("ping", lambda: None)
        bus.emit("ping")
        assert bus.statistics("ping") == {
            "emitted": 1,
            "handled": 2,
            "failed": 0,
        }


# ---------------------------------------------------------------------------
# handler failures
# ---------------------------------------------------------------------------


def _boom(*args):
    raise RuntimeError("boom")


class TestHandlerFailures:
    def test_isolated_failure_does_not_stop_other_handlers(self, caplog):
        bus = EventBus(isolate_errors=True)
        calls = []
        bus.subscribe("ping", _boom)
        bus.subscribe("ping", lambda: calls.append("ok"))

        with caplog.at_level(logging.ERROR, logger="modelpile.eventbus"):
            bus.emit("ping")

        assert calls == ["ok"]
        assert bus.statistics("ping")["failed"] == 1
        assert bus.statistics("ping")["handled"] == 1
        assert "_boom" in caplog.text

    def test_failure_propagates_when_not_isolated(self):
        bus = EventBus(isolate_errors=False)
        calls = []
        bus.subscribe("ping", _boom)
        bus.subscribe("ping", lambda: calls.append("ok"))

        with pytest.raises(RuntimeError, match="boom"):
            bus.emit("ping")

        assert calls == []
        assert bus.statistics("ping")["failed"] == 1
