"""Shared test doubles for fecusio-core tests."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest
from fecusio_core import (
    EvaluationResponse,
    FecusioError,
    FecusioErrorCodes,
    FecusioTransport,
    FetchFailure,
    FetchResult,
    FetchSuccess,
    FlagEvaluationSucceededEvent,
    IdentityReference,
)
from fecusio_core.scheduler import Callback


class VirtualScheduler:
    """Records scheduled callbacks and runs them on demand."""

    def __init__(self) -> None:
        self.scheduled: list[tuple[float, Callback]] = []

    def after(self, delay: float, callback: Callback) -> None:
        self.scheduled.append((delay, callback))

    async def run_all(self) -> None:
        while self.scheduled:
            _, callback = self.scheduled.pop(0)
            await callback()


class FakeTransport(FecusioTransport):
    """Transport returning queued responses and recording calls."""

    def __init__(self) -> None:
        self.responses: list[dict[str, Any] | Exception] = []
        self.fetch_calls: list[list[IdentityReference] | None] = []
        self.track_calls: list[list[FlagEvaluationSucceededEvent]] = []
        self.track_error: Exception | None = None

    def respond(self, body: dict[str, Any]) -> None:
        self.responses.append(body)

    def fail(self, error: Exception | None = None) -> None:
        self.responses.append(
            error or FecusioError(FecusioErrorCodes.CONNECTION_ERROR, "connection refused")
        )

    async def fetch_evaluation(
        self, identities: Sequence[IdentityReference] | None
    ) -> FetchResult:
        self.fetch_calls.append(list(identities) if identities is not None else None)
        outcome = self.responses.pop(0)
        if isinstance(outcome, FecusioError):
            return FetchFailure(outcome)
        if isinstance(outcome, Exception):
            return FetchFailure(FecusioError(FecusioErrorCodes.CONNECTION_ERROR, str(outcome)))
        return FetchSuccess(EvaluationResponse.from_dict(outcome))

    async def track(self, events: Sequence[FlagEvaluationSucceededEvent]) -> None:
        self.track_calls.append(list(events))
        if self.track_error is not None:
            raise self.track_error


def make_body(
    flags: dict[str, bool], environment_id: str | None = "env-1"
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "data": {"flags": {key: {"enabled": value} for key, value in flags.items()}}
    }
    if environment_id is not None:
        body["meta"] = {
            "organization_id": "org-1",
            "workspace_id": "ws-1",
            "environment_id": environment_id,
        }
    return body


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
