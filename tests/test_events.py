"""EventBus and event model unit tests."""

import logging

import pytest
from fecusio_core import (
    ConfigEvaluationFailedEvent,
    ConfigEvaluationSucceededEvent,
    EventBus,
    FecusioCoreEvent,
    FecusioError,
    FecusioErrorCodes,
    FecusioEventType,
    FlagEvaluationSucceededEvent,
)


def make_event() -> FlagEvaluationSucceededEvent:
    return FlagEvaluationSucceededEvent(environment_id="env-1", flag_key="beta", enabled=True)


def test_dispatch_in_registration_order() -> None:
    bus = EventBus()
    calls: list[str] = []
    bus.add_listener(lambda e: calls.append("first"))
    bus.add_listener(lambda e: calls.append("second"))
    bus.dispatch(make_event())
    assert calls == ["first", "second"]


def test_add_same_handler_twice_is_noop() -> None:
    bus = EventBus()
    received: list[FecusioCoreEvent] = []
    handler = received.append
    bus.add_listener(handler)
    bus.add_listener(handler)
    bus.dispatch(make_event())
    assert len(received) == 1
    assert len(bus.listeners) == 1


def test_equivalent_closures_both_registered() -> None:
    """Distinct handler objects are registered even if they behave the same."""
    bus = EventBus()
    calls: list[int] = []
    bus.add_listener(lambda e: calls.append(1))
    bus.add_listener(lambda e: calls.append(1))
    bus.dispatch(make_event())
    assert calls == [1, 1]


def test_failing_handler_is_isolated(caplog: pytest.LogCaptureFixture) -> None:
    bus = EventBus()
    received: list[FecusioCoreEvent] = []

    def broken(event: FecusioCoreEvent) -> None:
        raise RuntimeError("handler exploded")

    bus.add_listener(broken)
    bus.add_listener(received.append)
    with caplog.at_level(logging.ERROR, logger="fecusio_core.events"):
        bus.dispatch(make_event())
    assert len(received) == 1
    assert "Fecusio event handler failed" in caplog.text


def test_remove_listener() -> None:
    bus = EventBus()
    received: list[FecusioCoreEvent] = []
    handler = received.append
    bus.add_listener(handler)
    bus.remove_listener(handler)
    bus.dispatch(make_event())
    assert received == []


def test_dispatch_without_listeners() -> None:
    # Should not raise
    EventBus().dispatch(make_event())


def test_event_types() -> None:
    error = FecusioError(FecusioErrorCodes.TIMEOUT, "slow")
    assert ConfigEvaluationSucceededEvent(response={}).type == FecusioEventType.CONFIG_EVALUATION_SUCCEEDED
    assert ConfigEvaluationFailedEvent(error=error).type == FecusioEventType.CONFIG_EVALUATION_FAILED
    assert make_event().type == "flag-evaluation-succeeded"


def test_flag_event_to_dict() -> None:
    data = make_event().to_dict()
    assert data["type"] == "flag-evaluation-succeeded"
    assert data["payload"] == {"environment_id": "env-1", "flag_key": "beta", "enabled": True}
    assert data["timestamp"]


def test_succeeded_event_response_is_deeply_read_only() -> None:
    raw = {"data": {"flags": {"beta": {"enabled": True}}}, "items": [{"a": 1}]}
    event = ConfigEvaluationSucceededEvent(response=raw)

    with pytest.raises(TypeError):
        event.response["data"] = {}  # type: ignore[index]
    with pytest.raises(TypeError):
        event.response["data"]["flags"]["beta"]["enabled"] = False  # type: ignore[index]
    assert event.response["items"] == ({"a": 1},)

    raw["data"]["flags"]["beta"]["enabled"] = False
    assert event.response["data"]["flags"]["beta"]["enabled"] is True
