"""Fecusio クライアント設定（pydantic BaseModel）"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import FecusioError, FecusioErrorCodes
from .identity import IdentityReference, normalize_identities
from .models import FlagState, coerce_flags
from .tracking import DEFAULT_TRACKING_INTERVAL_SECONDS

DEFAULT_BASE_URL = "https://core.fecusio.com/v1/"
DEFAULT_TIMEOUT_SECONDS = 5.0

_ENV_PREFIX = "FECUSIO_"


class FecusioConfig(BaseModel):
    """Fecusio クライアント設定。"""

    model_config = ConfigDict(frozen=True)

    environment_key: str = Field(min_length=1)
    default_flags: dict[str, FlagState] = Field(default_factory=dict)
    default_identities: list[IdentityReference] | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    tracking_interval: float = Field(default=DEFAULT_TRACKING_INTERVAL_SECONDS, gt=0)

    @field_validator("environment_key")
    @classmethod
    def _strip_environment_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("environment_key must not be blank")
        return value

    @field_validator("default_flags", mode="before")
    @classmethod
    def _coerce_default_flags(cls, value: Any) -> dict[str, FlagState]:
        return coerce_flags(value)

    @field_validator("default_identities", mode="before")
    @classmethod
    def _coerce_default_identities(cls, value: Any) -> list[IdentityReference] | None:
        try:
            return normalize_identities(value)
        except (TypeError, KeyError) as e:
            raise ValueError(f"invalid identity reference: {e}") from e

    @classmethod
    def create(cls, **values: Any) -> FecusioConfig:
        """None の値を既定値に置き換えて検証する。

        Raises:
            FecusioError: 設定値が不正な場合 (CONFIG_ERROR)
        """
        data = {k: v for k, v in values.items() if v is not None or k == "default_identities"}
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise FecusioError(
                code=FecusioErrorCodes.CONFIG_ERROR,
                message=f"Invalid Fecusio configuration: {e}",
                cause=e,
            ) from e

    @classmethod
    def from_env(cls, **overrides: Any) -> FecusioConfig:
        """FECUSIO_* 環境変数から設定を読み込む。overrides が優先される。"""
        values: dict[str, Any] = {
            "environment_key": os.environ.get(f"{_ENV_PREFIX}ENVIRONMENT_KEY"),
            "base_url": os.environ.get(f"{_ENV_PREFIX}BASE_URL"),
            "timeout": os.environ.get(f"{_ENV_PREFIX}TIMEOUT"),
            "tracking_interval": os.environ.get(f"{_ENV_PREFIX}TRACKING_INTERVAL"),
        }
        values.update(overrides)
        if values["environment_key"] is None:
            raise FecusioError(
                code=FecusioErrorCodes.CONFIG_ERROR,
                message=f"{_ENV_PREFIX}ENVIRONMENT_KEY is not set",
            )
        return cls.create(**values)

