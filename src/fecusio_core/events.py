"""Fecusio core events and the synchronous event bus."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Callable, Union

from .exceptions import FecusioError

logger = logging.getLogger(__name__)


def _freeze(value: Any) -> Any:
    """Return a read-only deep view of a decoded JSON value."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


class FecusioEventType(StrEnum):
    """Event type tags."""

    CONFIG_EVALUATION_SUCCEEDED = "config-evaluation-succeeded"
    CONFIG_EVALUATION_FAILED = "config-evaluation-failed"
    FLAG_EVALUATION_SUCCEEDED = "flag-evaluation-succeeded"


@dataclass(frozen=True)
class ConfigEvaluationSucceededEvent:
    """Dispatched after a successful /evaluate fetch.

    The raw response is stored as a read-only copy shared by all handlers.
    """

    response: Mapping[str, Any]
    type: FecusioEventType = field(
        default=FecusioEventType.CONFIG_EVALUATION_SUCCEEDED, init=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "response", _freeze(self.response))


@dataclass(frozen=True)
class ConfigEvaluationFailedEvent:
    """Dispatched when /evaluate fails and default flags are served."""

    error: FecusioError
    type: FecusioEventType = field(
        default=FecusioEventType.CONFIG_EVALUATION_FAILED, init=False
    )


@dataclass(frozen=True)
class FlagEvaluationSucceededEvent:
    """Dispatched for every is_feature_enabled() lookup."""

    environment_id: str
    flag_key: str
    enabled: bool
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    type: FecusioEventType = field(
        default=FecusioEventType.FLAG_EVALUATION_SUCCEEDED, init=False
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "payload": {
                "environment_id": self.environment_id,
                "flag_key": self.flag_key,
                "enabled": self.enabled,
            },
            "timestamp": self.timestamp.isoformat(),
        }


FecusioCoreEvent = Union[
    ConfigEvaluationSucceededEvent,
    ConfigEvaluationFailedEvent,
    FlagEvaluationSucceededEvent,
]

EventHandler = Callable[[FecusioCoreEvent], None]


class EventBus:
    """Ordered list of handlers, dispatched synchronously.

    A handler that raises is logged and skipped; the remaining handlers
    still receive the event and the caller never sees the error.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    @property
    def listeners(self) -> tuple[EventHandler, ...]:
        return tuple(self._handlers)

    def add_listener(self, handler: EventHandler) -> None:
        """Register a handler. Registering the same object twice is a no-op."""
        if any(h is handler for h in self._handlers):
            return
        self._handlers.append(handler)

    def remove_listener(self, handler: EventHandler) -> None:
        """Unregister a handler if present."""
        self._handlers = [h for h in self._handlers if h is not handler]

    def dispatch(self, event: FecusioCoreEvent) -> None:
        """Invoke every handler in registration order."""
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Fecusio event handler failed",
                    extra={"event_type": str(event.type), "handler": repr(handler)},
                )
