"""FecusioClient — フラグ評価のオーケストレーター"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any

from .cache import EvaluationCache
from .config import FecusioConfig
from .evaluation import Evaluation
from .events import (
    ConfigEvaluationFailedEvent,
    ConfigEvaluationSucceededEvent,
    EventBus,
    EventHandler,
)
from .http_client import FecusioTransport, FetchFailure, HttpFecusioTransport
from .identity import IdentityReference, derive_cache_key, normalize_identities
from .scheduler import Scheduler
from .tracking import TrackingDebouncer

logger = logging.getLogger(__name__)


class FecusioClient:
    """アイデンティティごとにフラグ評価を取得・キャッシュするクライアント。

    evaluate() と Evaluation.is_feature_enabled() は呼び出し側に例外を送出しない。
    通信失敗時はデフォルトフラグから作った Evaluation を返し、キャッシュはしない。

    Example:
        async with FecusioClient("env-key", default_flags={"beta": False}) as client:
            evaluation = await client.evaluate(["user-1"])
            if evaluation.is_feature_enabled("beta"):
                ...
    """

    def __init__(
        self,
        environment_key: str,
        *,
        default_flags: Mapping[str, Any] | None = None,
        default_identities: Sequence[IdentityReference | Mapping[str, Any]] | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        tracking_interval: float | None = None,
        event_handler: EventHandler | None = None,
        cache: EvaluationCache | None = None,
        event_bus: EventBus | None = None,
        transport: FecusioTransport | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        config = FecusioConfig.create(
            environment_key=environment_key,
            default_flags=default_flags,
            default_identities=default_identities,
            base_url=base_url,
            timeout=timeout,
            tracking_interval=tracking_interval,
        )
        self._setup(config, event_handler, cache, event_bus, transport, scheduler)

    @classmethod
    def from_config(
        cls,
        config: FecusioConfig,
        *,
        event_handler: EventHandler | None = None,
        cache: EvaluationCache | None = None,
        event_bus: EventBus | None = None,
        transport: FecusioTransport | None = None,
        scheduler: Scheduler | None = None,
    ) -> FecusioClient:
        """検証済みの FecusioConfig からクライアントを作る。"""
        client = cls.__new__(cls)
        client._setup(config, event_handler, cache, event_bus, transport, scheduler)
        return client

    def _setup(
        self,
        config: FecusioConfig,
        event_handler: EventHandler | None,
        cache: EvaluationCache | None,
        event_bus: EventBus | None,
        transport: FecusioTransport | None,
        scheduler: Scheduler | None,
    ) -> None:
        self._config = config
        self._default_flags = dict(config.default_flags)
        self._default_identities = (
            list(config.default_identities) if config.default_identities is not None else None
        )
        self._cache = cache if cache is not None else EvaluationCache()
        self._event_bus = event_bus if event_bus is not None else EventBus()
        self._transport = transport if transport is not None else HttpFecusioTransport(config)
        self._tracker = TrackingDebouncer(
            self._transport,
            interval=config.tracking_interval,
            scheduler=scheduler,
        )
        self._event_bus.add_listener(self._tracker)
        if event_handler is not None:
            self._event_bus.add_listener(event_handler)

    @property
    def config(self) -> FecusioConfig:
        return self._config

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def tracker(self) -> TrackingDebouncer:
        return self._tracker

    @property
    def default_identities(self) -> list[IdentityReference] | None:
        if self._default_identities is None:
            return None
        return list(self._default_identities)

    def set_default_identities(
        self, identities: Sequence[IdentityReference | Mapping[str, Any]] | None
    ) -> None:
        """evaluate() で identities 省略時に使うアイデンティティ列を設定する。"""
        self._default_identities = normalize_identities(identities)

    def add_event_listener(self, handler: EventHandler) -> None:
        """イベントハンドラを登録する。同じハンドラの二重登録は無視される。"""
        self._event_bus.add_listener(handler)

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_size(self) -> int:
        return self._cache.size()

    async def evaluate(
        self,
        identities: Sequence[IdentityReference | Mapping[str, Any]] | None = None,
        fresh: bool = False,
    ) -> Evaluation:
        """identities に対するフラグ評価を返す。

        Args:
            identities: 評価対象のアイデンティティ列。None の場合はデフォルトを使う
            fresh: True の場合はキャッシュを無視して必ず取得し直す

        Returns:
            Evaluation。取得失敗時はデフォルトフラグから作った未キャッシュの Evaluation
        """
        if identities is None:
            resolved = self._default_identities
        else:
            resolved = normalize_identities(identities)
        cache_key = derive_cache_key(resolved)

        if not fresh:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Evaluation cache hit", extra={"cache_key": cache_key})
                return cached

        result = await self._transport.fetch_evaluation(resolved)

        if isinstance(result, FetchFailure):
            logger.warning(
                "Flag evaluation failed, serving default flags",
                extra={"cache_key": cache_key, "error": str(result.error)},
            )
            self._event_bus.dispatch(ConfigEvaluationFailedEvent(error=result.error))
            return Evaluation(self._default_flags, track=self._event_bus.dispatch)

        response = result.response
        evaluation = Evaluation(
            response.flags,
            meta=response.meta,
            track=self._event_bus.dispatch,
        )
        self._cache.put(cache_key, evaluation)
        self._event_bus.dispatch(ConfigEvaluationSucceededEvent(response=response.raw))
        return evaluation

    async def aclose(self) -> None:
        """送信待ちのトラッキングイベントを送信する。"""
        await self._tracker.flush()

    async def __aenter__(self) -> FecusioClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
