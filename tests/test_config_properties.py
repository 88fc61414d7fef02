"""
Tests for configuration loading from file and environment.
"""

import json

import allure
import pytest
from hypothesis import given, settings, strategies as st

from larkcard.config import ConfigManager, RendererConfig
from larkcard.errors import ConfigError


ENV_VARS = (
    ConfigManager.ENV_TOKEN,
    ConfigManager.ENV_BASE_URL,
    ConfigManager.ENV_MIN_INTERVAL,
    ConfigManager.ENV_DEBUG_PAYLOADS,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@allure.feature("Configuration")
@allure.story("Defaults")
@allure.severity(allure.severity_level.NORMAL)
def test_missing_file_gives_defaults(tmp_path):
    """Test defaults when no config file exists, and that none is written."""
    path = tmp_path / "config.json"
    config = ConfigManager(path)

    assert config.renderer.min_update_interval_ms == 350
    assert config.renderer.min_update_interval == pytest.approx(0.35)
    assert config.renderer.debug_payloads is False
    assert config.lark.base_url == "https://open.feishu.cn/open-apis"
    assert config.lark.tenant_access_token is None
    assert not path.exists()


@allure.feature("Configuration")
@allure.story("Environment overrides file")
@allure.severity(allure.severity_level.CRITICAL)
def test_env_vars_override_file(tmp_path, monkeypatch):
    """Test that environment variables win over file values."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "renderer": {"min_update_interval_ms": 500},
        "lark": {"base_url": "https://file.test", "receive_id_type": "open_id"},
    }), encoding="utf-8")
    monkeypatch.setenv(ConfigManager.ENV_MIN_INTERVAL, "120")
    monkeypatch.setenv(ConfigManager.ENV_TOKEN, "t-env")
    monkeypatch.setenv(ConfigManager.ENV_DEBUG_PAYLOADS, "yes")

    config = ConfigManager(path)

    assert config.renderer.min_update_interval_ms == 120
    assert config.renderer.debug_payloads is True
    assert config.lark.base_url == "https://file.test"
    assert config.lark.receive_id_type == "open_id"
    assert config.lark.tenant_access_token == "t-env"


@allure.feature("Configuration")
@allure.story("Invalid configuration")
@allure.severity(allure.severity_level.CRITICAL)
@pytest.mark.parametrize("content", [
    "{not json",
    "[1, 2]",
    '{"renderer": {"unknown_field": 1}}',
])
def test_invalid_file_raises_config_error(tmp_path, content):
    """Test that unusable config files raise ConfigError."""
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        ConfigManager(path)


@allure.feature("Configuration")
@allure.story("Invalid configuration")
@allure.severity(allure.severity_level.NORMAL)
def test_non_integer_interval_env_raises(tmp_path, monkeypatch):
    """Test that a malformed interval variable is reported."""
    monkeypatch.setenv(ConfigManager.ENV_MIN_INTERVAL, "fast")
    with pytest.raises(ConfigError, match="integer"):
        ConfigManager(tmp_path / "config.json")


@allure.feature("Configuration")
@allure.story("Save never writes secrets")
@allure.severity(allure.severity_level.CRITICAL)
def test_save_and_load_again(tmp_path, monkeypatch):
    """Test that saved files omit the token and a new manager restores values."""
    path = tmp_path / "nested" / "config.json"
    monkeypatch.setenv(ConfigManager.ENV_TOKEN, "t-secret")
    config = ConfigManager(path)
    config.update_renderer(min_update_interval_ms=200, not_a_field=1)
    config.update_lark(timeout_seconds=3.0)
    config.save()

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["lark"]["tenant_access_token"] is None
    assert saved["renderer"]["min_update_interval_ms"] == 200
    assert config.to_dict(include_secrets=True)["lark"]["tenant_access_token"] == "t-secret"

    loaded = ConfigManager(path)
    assert loaded.renderer.min_update_interval_ms == 200
    assert loaded.lark.timeout_seconds == 3.0
    assert loaded.lark.tenant_access_token == "t-secret"


@allure.feature("Configuration")
@allure.story("Interval conversion")
@allure.severity(allure.severity_level.MINOR)
@settings(max_examples=50)
@given(interval_ms=st.integers(min_value=-1000, max_value=100000))
def test_min_update_interval_is_non_negative_seconds(interval_ms: int):
    """
    For any configured interval, the interval in seconds SHALL be the
    millisecond value divided by 1000, clamped at zero.
    """
    seconds = RendererConfig(min_update_interval_ms=interval_ms).min_update_interval
    assert seconds == max(interval_ms, 0) / 1000
