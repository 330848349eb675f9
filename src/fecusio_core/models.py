"""Fecusio データモデル"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import FecusioError, FecusioErrorCodes


@dataclass(frozen=True)
class FlagState:
    """単一フラグの評価状態。"""

    enabled: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FlagState:
        enabled = data.get("enabled", False)
        if not isinstance(enabled, bool):
            raise ValueError(f"enabled must be a bool, got {type(enabled).__name__}")
        return cls(enabled=enabled)

    def to_dict(self) -> dict[str, bool]:
        return {"enabled": self.enabled}


@dataclass(frozen=True)
class EvaluationMeta:
    """トラッキングの帰属に使うレスポンスメタデータ。"""

    organization_id: str = ""
    workspace_id: str = ""
    environment_id: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EvaluationMeta:
        return cls(
            organization_id=str(data.get("organization_id", "")),
            workspace_id=str(data.get("workspace_id", "")),
            environment_id=str(data.get("environment_id", "")),
        )


@dataclass(frozen=True)
class EvaluationResponse:
    """/evaluate のレスポンス。"""

    flags: dict[str, FlagState] = field(default_factory=dict)
    meta: EvaluationMeta | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> EvaluationResponse:
        """レスポンスボディを検証して変換する。

        Raises:
            FecusioError: data.flags が期待する形でない場合 (INVALID_RESPONSE)
        """
        try:
            body = data["data"]
            raw_flags = body["flags"]
            if not isinstance(raw_flags, Mapping):
                raise ValueError("data.flags must be an object")
            flags = {
                str(key): FlagState.from_dict(value) for key, value in raw_flags.items()
            }
            raw_meta = data.get("meta")
            meta = EvaluationMeta.from_dict(raw_meta) if isinstance(raw_meta, Mapping) else None
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise FecusioError(
                code=FecusioErrorCodes.INVALID_RESPONSE,
                message=f"Malformed evaluation response: {e}",
                cause=e,
            ) from e
        return cls(flags=flags, meta=meta, raw=dict(data))


def coerce_flags(flags: Mapping[str, Any] | None) -> dict[str, FlagState]:
    """デフォルトフラグ指定を FlagState の辞書に揃える。

    {"promo": {"enabled": True}}、{"promo": FlagState(True)}、{"promo": True}
    のいずれも受け付ける。
    """
    if not flags:
        return {}
    if not isinstance(flags, Mapping):
        raise ValueError(f"flags must be a mapping, got {type(flags).__name__}")
    result: dict[str, FlagState] = {}
    for key, value in flags.items():
        if isinstance(value, FlagState):
            result[key] = value
        elif isinstance(value, bool):
            result[key] = FlagState(enabled=value)
        elif isinstance(value, Mapping):
            result[key] = FlagState.from_dict(value)
        else:
            raise ValueError(f"invalid flag definition for {key!r}: {value!r}")
    return result
