"""Integration tests for the EventBus."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from sprite_toolbox.core.events import EventBus


class TestEventBusSubscribeEmit:
    """Tests for basic subscribe/emit behaviour."""

    def test_handler_receives_emitted_kwargs(self) -> None:
        """A subscribed handler receives all keyword arguments."""
        bus = EventBus()
        received: list[dict[str, Any]] = []
        bus.subscribe("progress", lambda **kw: received.append(kw))

        bus.emit("progress", current=1, total=2, message="Decoded a.png")

        assert received == [{"current": 1, "total": 2, "message": "Decoded a.png"}]

    def test_handlers_called_in_order(self) -> None:
        """Handlers run in subscription order."""
        bus = EventBus()
        calls: list[str] = []
        bus.subscribe("completed", lambda **_kw: calls.append("a"))
        bus.subscribe("completed", lambda **_kw: calls.append("b"))

        bus.emit("completed")

        assert calls == ["a", "b"]

    def test_emit_without_subscribers_is_noop(self) -> None:
        """Emitting an event with no subscribers does not raise."""
        EventBus().emit("unknown_event", data=123)

    def test_handler_may_subscribe_during_emit(self) -> None:
        """Subscribing from inside a handler does not deadlock."""
        bus = EventBus()
        calls: list[str] = []

        def handler(**_kw: Any) -> None:
            calls.append("outer")
            bus.subscribe("progress", lambda **_kw: calls.append("inner"))

        bus.subscribe("progress", handler)
        bus.emit("progress")
        bus.emit("progress")

        assert calls == ["outer", "outer", "inner"]

    def test_emit_from_threads(self) -> None:
        """Concurrent emitters all reach the handler."""
        bus = EventBus()
        received: list[int] = []
        lock = threading.Lock()

        def handler(**kw: Any) -> None:
            with lock:
                received.append(kw["n"])

        bus.subscribe("progress", handler)
        threads = [threading.Thread(target=bus.emit, args=("progress",), kwargs={"n": i}) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(received) == list(range(8))


class TestEventBusUnsubscribe:
    """Tests for handler removal."""

    def test_unsubscribed_handler_not_called(self) -> None:
        """After unsubscribe, the handler is no longer invoked."""
        bus = EventBus()
        calls: list[int] = []

        def handler(**_kw: Any) -> None:
            calls.append(1)

        bus.subscribe("progress", handler)
        bus.unsubscribe("progress", handler)
        bus.emit("progress")

        assert calls == []

    def test_unsubscribe_unknown_handler_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """Removing a handler that was never subscribed logs a warning."""
        EventBus().unsubscribe("progress", lambda **_kw: None)

        assert "was not subscribed" in caplog.text


class TestEventBusErrorHandling:
    """Tests for handler error isolation."""

    def test_failing_handler_does_not_break_others(self, caplog: pytest.LogCaptureFixture) -> None:
        """A handler that raises does not prevent subsequent handlers."""
        bus = EventBus()
        results: list[str] = []

        def bad_handler(**_kw: Any) -> None:
            msg = "boom"
            raise RuntimeError(msg)

        bus.subscribe("completed", bad_handler)
        bus.subscribe("completed", lambda **_kw: results.append("ok"))

        bus.emit("completed")

        assert results == ["ok"]
        assert "boom" in caplog.text
