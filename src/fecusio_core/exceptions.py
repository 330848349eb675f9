"""fecusio-core ライブラリの例外型定義"""

from __future__ import annotations


class FecusioError(Exception):
    """fecusio-core ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FecusioErrorCodes:
    """FecusioError のエラーコード定数。"""

    CONFIG_ERROR: str = "CONFIG_ERROR"
    HTTP_ERROR: str = "HTTP_ERROR"
    TIMEOUT: str = "TIMEOUT"
    CONNECTION_ERROR: str = "CONNECTION_ERROR"
    INVALID_RESPONSE: str = "INVALID_RESPONSE"
    TRACKING_FAILED: str = "TRACKING_FAILED"
