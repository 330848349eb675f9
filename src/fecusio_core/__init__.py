"""Fecusio core feature flag client library."""

from .cache import EvaluationCache
from .client import FecusioClient
from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, FecusioConfig
from .evaluation import Evaluation
from .events import (
    ConfigEvaluationFailedEvent,
    ConfigEvaluationSucceededEvent,
    EventBus,
    EventHandler,
    FecusioCoreEvent,
    FecusioEventType,
    FlagEvaluationSucceededEvent,
)
from .exceptions import FecusioError, FecusioErrorCodes
from .http_client import (
    FecusioTransport,
    FetchFailure,
    FetchResult,
    FetchSuccess,
    HttpFecusioTransport,
)
from .identity import Identity, IdentityReference, derive_cache_key
from .models import EvaluationMeta, EvaluationResponse, FlagState
from .scheduler import AsyncioScheduler, Scheduler
from .tracking import DEFAULT_TRACKING_INTERVAL_SECONDS, TrackingDebouncer, TrackingState

__all__ = [
    "AsyncioScheduler",
    "ConfigEvaluationFailedEvent",
    "ConfigEvaluationSucceededEvent",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_TRACKING_INTERVAL_SECONDS",
    "Evaluation",
    "EvaluationCache",
    "EvaluationMeta",
    "EvaluationResponse",
    "EventBus",
    "EventHandler",
    "FecusioClient",
    "FecusioConfig",
    "FecusioCoreEvent",
    "FecusioError",
    "FecusioErrorCodes",
    "FecusioEventType",
    "FecusioTransport",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "FlagEvaluationSucceededEvent",
    "FlagState",
    "HttpFecusioTransport",
    "Identity",
    "IdentityReference",
    "Scheduler",
    "TrackingDebouncer",
    "TrackingState",
    "derive_cache_key",
]
