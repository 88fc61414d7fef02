"""
Configuration management for larkcard.
Handles loading configuration from a JSON file and environment variables.
"""
import json
import os
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Optional

from .constants import (
    CONFIG_FILE,
    DEFAULT_LARK_BASE_URL,
    DEFAULT_MIN_UPDATE_INTERVAL_MS,
    DEFAULT_PAYLOAD_SAMPLE_CHARS,
    DEFAULT_RECEIVE_ID_TYPE,
    DEFAULT_REQUEST_TIMEOUT,
)
from .errors import ConfigError


@dataclass
class RendererConfig:
    """Card renderer configuration."""
    min_update_interval_ms: int = DEFAULT_MIN_UPDATE_INTERVAL_MS
    debug_payloads: bool = False
    payload_sample_chars: int = DEFAULT_PAYLOAD_SAMPLE_CHARS

    @property
    def min_update_interval(self) -> float:
        """Minimum spacing between card edits, in seconds."""
        return max(self.min_update_interval_ms, 0) / 1000


@dataclass
class LarkConfig:
    """Feishu/Lark Open API configuration."""
    base_url: str = DEFAULT_LARK_BASE_URL
    tenant_access_token: Optional[str] = None
    receive_id_type: str = DEFAULT_RECEIVE_ID_TYPE
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class AppConfig:
    """Main application configuration."""
    renderer: RendererConfig = field(default_factory=RendererConfig)
    lark: LarkConfig = field(default_factory=LarkConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """
    Loads configuration from a JSON file and environment variables.

    Environment variables take precedence over config file values. The config
    file is optional and is never written implicitly.
    """

    ENV_TOKEN = "LARKCARD_TENANT_ACCESS_TOKEN"
    ENV_BASE_URL = "LARKCARD_BASE_URL"
    ENV_MIN_INTERVAL = "LARKCARD_MIN_UPDATE_INTERVAL_MS"
    ENV_DEBUG_PAYLOADS = "LARKCARD_DEBUG_PAYLOADS"

    def __init__(self, path: Optional[Path] = None) -> None:
        """
        Initialize the manager and load configuration.

        Args:
            path: Config file to read. Defaults to ~/.larkcard/config.json.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        self._path = Path(path) if path is not None else CONFIG_FILE
        self._config = AppConfig()
        self._load_config()
        self._load_env_vars()

    @property
    def path(self) -> Path:
        """Get the config file path."""
        return self._path

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self._config

    @property
    def renderer(self) -> RendererConfig:
        """Get renderer configuration."""
        return self._config.renderer

    @property
    def lark(self) -> LarkConfig:
        """Get Lark API configuration."""
        return self._config.lark

    def _load_config(self) -> None:
        """Load configuration from the JSON file, if present."""
        if not self._path.exists():
            return

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config file {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self._path} must contain a JSON object")

        try:
            if 'renderer' in data:
                self._config.renderer = RendererConfig(**data['renderer'])
            if 'lark' in data:
                self._config.lark = LarkConfig(**data['lark'])
        except TypeError as e:
            raise ConfigError(f"Invalid config in {self._path}: {e}") from e

    def _load_env_vars(self) -> None:
        """Overlay values from environment variables."""
        token = os.environ.get(self.ENV_TOKEN)
        if token:
            self._config.lark.tenant_access_token = token

        base_url = os.environ.get(self.ENV_BASE_URL)
        if base_url:
            self._config.lark.base_url = base_url

        interval = os.environ.get(self.ENV_MIN_INTERVAL)
        if interval:
            try:
                self._config.renderer.min_update_interval_ms = int(interval)
            except ValueError as e:
                raise ConfigError(f"{self.ENV_MIN_INTERVAL} must be an integer, got {interval!r}") from e

        debug = os.environ.get(self.ENV_DEBUG_PAYLOADS)
        if debug is not None:
            self._config.renderer.debug_payloads = _parse_bool(debug)

    def update_renderer(self, **kwargs: Any) -> None:
        """Update renderer configuration in memory."""
        known = {f.name for f in fields(RendererConfig)}
        for key, value in kwargs.items():
            if key in known:
                setattr(self._config.renderer, key, value)

    def update_lark(self, **kwargs: Any) -> None:
        """Update Lark API configuration in memory."""
        known = {f.name for f in fields(LarkConfig)}
        for key, value in kwargs.items():
            if key in known:
                setattr(self._config.lark, key, value)

    def to_dict(self, include_secrets: bool = False) -> dict:
        """
        Get the configuration as a plain dict.

        Args:
            include_secrets: Whether to keep the tenant access token

        Returns:
            Dict with 'renderer' and 'lark' sections
        """
        data = {
            'renderer': asdict(self._config.renderer),
            'lark': asdict(self._config.lark),
        }
        if not include_secrets:
            data['lark']['tenant_access_token'] = None
        return data

    def save(self) -> None:
        """Write the configuration to the config file, without secrets."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)


_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
