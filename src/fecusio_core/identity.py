"""アイデンティティ参照とキャッシュキー導出"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

DEFAULT_CACHE_KEY = "default"


@dataclass(frozen=True)
class Identity:
    """型付きアイデンティティ参照。"""

    type: str
    key: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Identity:
        return cls(type=str(data["type"]), key=str(data["key"]))

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "key": self.key}

    def __str__(self) -> str:
        return f"{self.type}-{self.key}"


IdentityReference = Union[str, Identity]


def normalize_identities(
    identities: Sequence[IdentityReference | Mapping[str, Any]] | None,
) -> list[IdentityReference] | None:
    """dict 形式の参照を Identity に変換する。None はそのまま返す。

    Raises:
        TypeError: 列ではなく単一の文字列が渡された場合、または参照が不正な場合
    """
    if identities is None:
        return None
    if isinstance(identities, str):
        raise TypeError(
            f"identities must be a sequence of references, not a str: {identities!r}"
        )
    normalized: list[IdentityReference] = []
    for ref in identities:
        if isinstance(ref, (str, Identity)):
            normalized.append(ref)
        elif isinstance(ref, Mapping):
            try:
                normalized.append(Identity.from_dict(ref))
            except KeyError as e:
                raise TypeError(f"identity reference is missing {e}: {dict(ref)!r}") from e
        else:
            raise TypeError(f"unsupported identity reference: {ref!r}")
    return normalized


def serialize_identities(
    identities: Sequence[IdentityReference] | None,
) -> list[str | dict[str, str]] | None:
    """リクエストボディ用に変換する。"""
    if identities is None:
        return None
    return [ref.to_dict() if isinstance(ref, Identity) else ref for ref in identities]


def derive_cache_key(identities: Sequence[IdentityReference] | None) -> str:
    """アイデンティティ列からキャッシュキーを導出する。

    None は "default"、空の列は "" になる。要素の順序は保持され、
    並べ替えは行わない。
    """
    if identities is None:
        return DEFAULT_CACHE_KEY
    return ",".join(str(ref) for ref in identities)
