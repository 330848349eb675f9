"""Evaluation 結果オブジェクト"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Callable

from .events import FecusioCoreEvent, FlagEvaluationSucceededEvent
from .models import EvaluationMeta, FlagState

logger = logging.getLogger(__name__)


class Evaluation:
    """1 つのアイデンティティコンテキストに対するフラグ状態のスナップショット。

    track が渡され、かつ meta がある場合は is_feature_enabled() のたびに
    FlagEvaluationSucceededEvent を同期的に発行する。
    """

    __slots__ = ("_flags", "_meta", "_track")

    def __init__(
        self,
        flags: Mapping[str, FlagState],
        meta: EvaluationMeta | None = None,
        track: Callable[[FecusioCoreEvent], None] | None = None,
    ) -> None:
        self._flags: dict[str, FlagState] = dict(flags)
        self._meta = meta
        self._track = track

    @property
    def meta(self) -> EvaluationMeta | None:
        return self._meta

    def is_feature_enabled(self, flag_key: str) -> bool:
        """フラグが有効かを返す。

        存在しないキー、空文字や文字列以外のキー、無効なフラグはすべて False。
        例外は送出しない。
        """
        if not isinstance(flag_key, str) or not flag_key:
            return False
        state = self._flags.get(flag_key)
        enabled = state is not None and state.enabled is True
        self._emit(flag_key, enabled)
        return enabled

    def get_all_flags(self) -> Mapping[str, FlagState]:
        """全フラグの読み取り専用コピーを返す。イベントは発行しない。"""
        return MappingProxyType(dict(self._flags))

    def _emit(self, flag_key: str, enabled: bool) -> None:
        if self._track is None or self._meta is None:
            return
        event = FlagEvaluationSucceededEvent(
            environment_id=self._meta.environment_id,
            flag_key=flag_key,
            enabled=enabled,
        )
        try:
            self._track(event)
        except Exception:
            logger.exception("Failed to emit flag evaluation event", extra={"flag_key": flag_key})

    def __repr__(self) -> str:
        return f"Evaluation(flags={sorted(self._flags)!r}, meta={self._meta!r})"
