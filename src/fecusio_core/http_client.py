"""Fecusio HTTP トランスポート実装"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

import httpx

from .exceptions import FecusioError, FecusioErrorCodes
from .identity import IdentityReference, serialize_identities
from .models import EvaluationResponse

if TYPE_CHECKING:
    from .config import FecusioConfig
    from .events import FlagEvaluationSucceededEvent


@dataclass(frozen=True)
class FetchSuccess:
    """/evaluate 成功。"""

    response: EvaluationResponse


@dataclass(frozen=True)
class FetchFailure:
    """/evaluate 失敗。"""

    error: FecusioError


FetchResult = Union[FetchSuccess, FetchFailure]


class FecusioTransport(ABC):
    """Fecusio サーバーとの通信を抽象化する基底クラス。"""

    @abstractmethod
    async def fetch_evaluation(
        self, identities: Sequence[IdentityReference] | None
    ) -> FetchResult:
        """フラグ評価を取得する。例外は送出せず FetchFailure で返す。"""
        ...

    @abstractmethod
    async def track(self, events: Sequence[FlagEvaluationSucceededEvent]) -> None:
        """評価イベントをまとめて送信する。失敗時は FecusioError。"""
        ...


class HttpFecusioTransport(FecusioTransport):
    """httpx を使った Fecusio HTTP クライアント。"""

    def __init__(self, config: FecusioConfig) -> None:
        self._config = config
        self._headers: dict[str, str] = {
            "X-Environment-Key": config.environment_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=self._headers,
            timeout=self._config.timeout,
        )

    def _handle_error(self, resp: httpx.Response, context: str) -> None:
        if resp.status_code >= 400:
            raise FecusioError(
                code=FecusioErrorCodes.HTTP_ERROR,
                message=f"{context}: HTTP {resp.status_code}: {resp.text}",
            )

    async def _post(self, path: str, body: dict[str, Any], context: str) -> httpx.Response:
        try:
            async with self._make_client() as client:
                resp = await client.post(path, json=body)
        except httpx.TimeoutException as e:
            raise FecusioError(
                code=FecusioErrorCodes.TIMEOUT,
                message=f"{context}: request timed out",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise FecusioError(
                code=FecusioErrorCodes.CONNECTION_ERROR,
                message=f"{context}: {e}",
                cause=e,
            ) from e
        self._handle_error(resp, context)
        return resp

    async def fetch_evaluation(
        self, identities: Sequence[IdentityReference] | None
    ) -> FetchResult:
        try:
            resp = await self._post(
                "evaluate",
                {"identities": serialize_identities(identities)},
                "evaluate",
            )
            try:
                data: Any = resp.json()
            except ValueError as e:
                raise FecusioError(
                    code=FecusioErrorCodes.INVALID_RESPONSE,
                    message=f"evaluate: response is not JSON: {e}",
                    cause=e,
                ) from e
            return FetchSuccess(EvaluationResponse.from_dict(data))
        except FecusioError as e:
            return FetchFailure(e)
        except Exception as e:
            return FetchFailure(
                FecusioError(
                    code=FecusioErrorCodes.CONNECTION_ERROR,
                    message=f"Failed to evaluate flags: {e}",
                    cause=e,
                )
            )

    async def track(self, events: Sequence[FlagEvaluationSucceededEvent]) -> None:
        try:
            await self._post(
                "evaluations/track",
                {"events": [event.to_dict() for event in events]},
                "track",
            )
        except FecusioError:
            raise
        except Exception as e:
            raise FecusioError(
                code=FecusioErrorCodes.TRACKING_FAILED,
                message=f"Failed to send tracking events: {e}",
                cause=e,
            ) from e
