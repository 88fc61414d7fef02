"""
Tests for the larkcard command line interface.
"""

import json

import allure
import pytest

from larkcard import main as cli
from larkcard.config import ConfigManager


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the global configuration at an empty temporary file."""
    for name in (ConfigManager.ENV_TOKEN, ConfigManager.ENV_BASE_URL,
                 ConfigManager.ENV_MIN_INTERVAL, ConfigManager.ENV_DEBUG_PAYLOADS):
        monkeypatch.delenv(name, raising=False)
    manager = ConfigManager(tmp_path / "config.json")
    monkeypatch.setattr("larkcard.config._config_manager", manager)
    return manager


def write_payloads(path, lines):
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


@allure.feature("CLI")
@allure.story("Argument parsing")
@allure.severity(allure.severity_level.NORMAL)
def test_parse_replay_arguments(tmp_path):
    """Test the replay sub-command options."""
    args = cli.parse_args([
        "replay", str(tmp_path / "run.jsonl"),
        "--chat-id", "oc_1", "--reply-to", "om_1", "--interval-ms", "0", "--publish", "--verbose",
    ])
    assert args.command == "replay"
    assert args.chat_id == "oc_1"
    assert args.reply_to == "om_1"
    assert args.interval_ms == 0
    assert args.publish and args.verbose
    assert not args.debug_payloads


@allure.feature("CLI")
@allure.story("Version flag")
@allure.severity(allure.severity_level.MINOR)
def test_version_flag(capsys):
    """Test that --version prints the application version."""
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])
    assert exc_info.value.code == 0
    assert "larkcard 0.3.0" in capsys.readouterr().out


@allure.feature("CLI")
@allure.story("Reading payload files")
@allure.severity(allure.severity_level.NORMAL)
def test_iter_payloads_skips_blank_and_invalid_lines(tmp_path):
    """Test that blank and malformed lines are skipped."""
    path = write_payloads(tmp_path / "run.jsonl", ['{"text": "a"}', "", "not json", '{"text": "b"}'])
    assert list(cli.iter_payloads(path)) == [{"text": "a"}, {"text": "b"}]


@allure.feature("CLI")
@allure.story("Console replay")
@allure.severity(allure.severity_level.CRITICAL)
def test_replay_previews_cards(tmp_path, isolated_config, capsys):
    """Test a full console replay ending in the completed card."""
    path = write_payloads(tmp_path / "run.jsonl", [
        json.dumps({"events": [{"stream": "assistant", "data": {"text": "Hello"}}]}),
        json.dumps({"events": [{"stream": "assistant", "data": {"text": "Hello world"}}]}),
    ])

    assert cli.main(["replay", str(path), "--interval-ms", "0"]) == 0

    out = capsys.readouterr().out
    assert "preview-1" in out
    assert "全部完成" in out
    assert isolated_config.renderer.min_update_interval_ms == 0


@allure.feature("CLI")
@allure.story("Publish requirements")
@allure.severity(allure.severity_level.NORMAL)
def test_publish_without_token_fails(tmp_path, isolated_config):
    """Test that --publish refuses to run without a token."""
    path = write_payloads(tmp_path / "run.jsonl", ['{"text": "a"}'])
    assert cli.main(["replay", str(path), "--publish", "--chat-id", "oc_1"]) == 2
    assert cli.main(["replay", str(path), "--publish"]) == 2


@allure.feature("CLI")
@allure.story("Missing file")
@allure.severity(allure.severity_level.MINOR)
def test_missing_file_exits_with_error(tmp_path, isolated_config):
    """Test that an unreadable replay file is reported."""
    assert cli.main(["replay", str(tmp_path / "missing.jsonl")]) == 2


@allure.feature("CLI")
@allure.story("Settings")
@allure.severity(allure.severity_level.NORMAL)
def test_parse_setting_value():
    """Test that booleans and numbers are recognized, anything else kept."""
    assert cli.parse_setting_value("on") is True
    assert cli.parse_setting_value("False") is False
    assert cli.parse_setting_value("200") == 200
    assert cli.parse_setting_value("2.5") == 2.5
    assert cli.parse_setting_value("https://open.larksuite.com/open-apis") == "https://open.larksuite.com/open-apis"


@allure.feature("CLI")
@allure.story("Settings")
@allure.severity(allure.severity_level.CRITICAL)
def test_config_sets_and_saves_without_token(isolated_config, capsys):
    """Test that changing a setting writes the config file but never the token."""
    isolated_config.update_lark(tenant_access_token="t-secret")

    assert cli.main(["config", "base_url", "https://open.larksuite.com/open-apis"]) == 0
    assert cli.main(["config", "min_update_interval_ms", "200"]) == 0

    saved = json.loads(isolated_config.path.read_text(encoding="utf-8"))
    assert saved["lark"]["base_url"] == "https://open.larksuite.com/open-apis"
    assert saved["lark"]["tenant_access_token"] is None
    assert saved["renderer"]["min_update_interval_ms"] == 200
    assert "Set min_update_interval_ms to 200" in capsys.readouterr().out


@allure.feature("CLI")
@allure.story("Settings")
@allure.severity(allure.severity_level.NORMAL)
def test_config_shows_settings(isolated_config, capsys):
    """Test listing all settings and a single one."""
    assert cli.main(["config"]) == 0
    out = capsys.readouterr().out
    assert '"min_update_interval_ms": 350' in out
    assert "tenant_access_token" in out

    assert cli.main(["config", "receive_id_type"]) == 0
    assert "receive_id_type: chat_id" in capsys.readouterr().out
    assert not isolated_config.path.exists()


@allure.feature("CLI")
@allure.story("Settings")
@allure.severity(allure.severity_level.NORMAL)
def test_config_rejects_unknown_and_secret_keys(isolated_config):
    """Test that unknown settings and the token cannot be set."""
    assert cli.main(["config", "theme", "dark"]) == 2
    assert cli.main(["config", "tenant_access_token", "t-1"]) == 2
    assert not isolated_config.path.exists()
