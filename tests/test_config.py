"""FecusioConfig のユニットテスト"""

import pytest
from fecusio_core import (
    DEFAULT_BASE_URL,
    FecusioConfig,
    FecusioError,
    FecusioErrorCodes,
    FlagState,
    Identity,
)


def test_defaults() -> None:
    """デフォルト値。"""
    config = FecusioConfig.create(environment_key="env-key")
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 5.0
    assert config.tracking_interval == 2.0
    assert config.default_flags == {}
    assert config.default_identities is None


@pytest.mark.parametrize("key", ["", "   ", None])
def test_missing_environment_key(key) -> None:
    """環境キーがない場合は CONFIG_ERROR。"""
    with pytest.raises(FecusioError) as exc_info:
        FecusioConfig.create(environment_key=key)
    assert exc_info.value.code == FecusioErrorCodes.CONFIG_ERROR


def test_non_positive_timeout() -> None:
    with pytest.raises(FecusioError) as exc_info:
        FecusioConfig.create(environment_key="env-key", timeout=0)
    assert exc_info.value.code == FecusioErrorCodes.CONFIG_ERROR


def test_default_flags_forms() -> None:
    """デフォルトフラグは複数の形式を受け付ける。"""
    config = FecusioConfig.create(
        environment_key="env-key",
        default_flags={"a": {"enabled": True}, "b": FlagState(False), "c": True},
    )
    assert config.default_flags == {
        "a": FlagState(True),
        "b": FlagState(False),
        "c": FlagState(True),
    }


def test_invalid_default_flags() -> None:
    with pytest.raises(FecusioError) as exc_info:
        FecusioConfig.create(environment_key="env-key", default_flags={"a": "on"})
    assert exc_info.value.code == FecusioErrorCodes.CONFIG_ERROR


def test_default_identities_normalized() -> None:
    config = FecusioConfig.create(
        environment_key="env-key",
        default_identities=["u1", {"type": "team", "key": "core"}],
    )
    assert config.default_identities == ["u1", Identity("team", "core")]


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """FECUSIO_* 環境変数から読み込む。"""
    monkeypatch.setenv("FECUSIO_ENVIRONMENT_KEY", "from-env")
    monkeypatch.setenv("FECUSIO_BASE_URL", "http://localhost:9000/v1/")
    monkeypatch.setenv("FECUSIO_TIMEOUT", "1.5")
    monkeypatch.delenv("FECUSIO_TRACKING_INTERVAL", raising=False)
    config = FecusioConfig.from_env()
    assert config.environment_key == "from-env"
    assert config.base_url == "http://localhost:9000/v1/"
    assert config.timeout == 1.5
    assert config.tracking_interval == 2.0


def test_from_env_missing_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FECUSIO_ENVIRONMENT_KEY", raising=False)
    with pytest.raises(FecusioError) as exc_info:
        FecusioConfig.from_env()
    assert exc_info.value.code == FecusioErrorCodes.CONFIG_ERROR


def test_default_identities_bare_string_rejected() -> None:
    """文字列 1 つの default_identities は CONFIG_ERROR。"""
    with pytest.raises(FecusioError) as exc_info:
        FecusioConfig.create(environment_key="env-key", default_identities="team-a")
    assert exc_info.value.code == FecusioErrorCodes.CONFIG_ERROR
