"""評価結果キャッシュ"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .evaluation import Evaluation


class EvaluationCache:
    """キャッシュキーから Evaluation へのインメモリキャッシュ。

    TTL やサイズ上限は持たず、clear() されるまでエントリを保持する。
    """

    def __init__(self) -> None:
        self._store: dict[str, Evaluation] = {}

    def get(self, key: str) -> Evaluation | None:
        """キーに対応する Evaluation を取得する。存在しなければ None。"""
        return self._store.get(key)

    def put(self, key: str, evaluation: Evaluation) -> None:
        """既存エントリがあれば上書きする。"""
        self._store[key] = evaluation

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store
