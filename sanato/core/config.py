#!/usr/bin/env python3
"""Server configuration for Sanato.

This module provides the persisted, process-wide server configuration:
- Config: frozen record of network, storage and token settings
- ConfigProvider: parses the config file and creates it on first run
- YAML or JSON on disk, chosen by file suffix
- Atomic writes

The file is created once per deployment. After that the on-disk value is
authoritative; ConfigProvider never merges into or overwrites it.

Example:
    >>> provider = ConfigProvider("./config.json")
    >>> cfg = provider.parse()
    >>> cfg.port
    8000
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from sanato.core.constants import (
    DEFAULT_TOKEN_CIPHER_SUITE,
    DEFAULT_WEB_DIR,
    DEFAULT_WEB_URL,
    ConfigKey,
)
from sanato.core.errors import (
    ConfigExistsError,
    ConfigNotFoundError,
    ConfigParseError,
    ParseError,
)
from sanato.core.file_ops import read_text, write_atomic
from sanato.core.validators import clean_path, validate_cipher_suite, validate_port

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class Config:
    """Server configuration, read-only once startup completes."""

    port: int
    root_data_dir: str
    root_temp_dir: str
    token_secret: str
    token_cipher_suite: str = DEFAULT_TOKEN_CIPHER_SUITE
    web_url: str = DEFAULT_WEB_URL
    web_dir: str = DEFAULT_WEB_DIR

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the on-disk key names."""
        return {
            ConfigKey.PORT: self.port,
            ConfigKey.ROOT_DATA_DIR: self.root_data_dir,
            ConfigKey.ROOT_TEMP_DIR: self.root_temp_dir,
            ConfigKey.TOKEN_SECRET: self.token_secret,
            ConfigKey.TOKEN_CIPHER_SUITE: self.token_cipher_suite,
            ConfigKey.WEB_URL: self.web_url,
            ConfigKey.WEB_DIR: self.web_dir,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from on-disk key names.

        Args:
            data: Decoded config mapping

        Returns:
            Validated Config

        Raises:
            ConfigParseError: If a required key is missing or a value is invalid
        """
        missing = [key for key in ConfigKey.REQUIRED if key not in data]
        if missing:
            raise ConfigParseError(f"Missing config keys: {', '.join(missing)}")

        try:
            port = validate_port(data[ConfigKey.PORT])
            cipher_suite = validate_cipher_suite(
                str(data.get(ConfigKey.TOKEN_CIPHER_SUITE) or DEFAULT_TOKEN_CIPHER_SUITE)
            )
        except ParseError as e:
            raise ConfigParseError(e.message)

        token_secret = data[ConfigKey.TOKEN_SECRET]
        if not isinstance(token_secret, str) or not token_secret:
            raise ConfigParseError("tokenSecret must be a non-empty string")

        strings = {}
        for key in (ConfigKey.ROOT_DATA_DIR, ConfigKey.ROOT_TEMP_DIR):
            value = data[key]
            if not isinstance(value, str) or not value:
                raise ConfigParseError(f"{key} must be a non-empty string")
            strings[key] = value

        return cls(
            port=port,
            root_data_dir=strings[ConfigKey.ROOT_DATA_DIR],
            root_temp_dir=strings[ConfigKey.ROOT_TEMP_DIR],
            token_secret=token_secret,
            token_cipher_suite=cipher_suite,
            web_url=str(data.get(ConfigKey.WEB_URL) or DEFAULT_WEB_URL),
            web_dir=str(data.get(ConfigKey.WEB_DIR) or DEFAULT_WEB_DIR),
        )


class ConfigProvider:
    """Loads and persists the singleton server configuration.

    Modules receive the provider and read the parsed Config through
    ``get()``; nothing mutates it after startup.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize config provider.

        Args:
            path: Location of the config file
        """
        self.path = Path(path)
        self._config: Optional[Config] = None

    def exists(self) -> bool:
        """Check whether the config file is present."""
        return self.path.exists()

    def parse(self) -> Config:
        """Parse the config file.

        Returns:
            Validated Config

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigParseError: If the content is malformed or incomplete
            StoreIOError: If the file exists but cannot be read
        """
        try:
            text = read_text(self.path)
        except FileNotFoundError:
            raise ConfigNotFoundError(f"Config file not found: {self.path}")

        try:
            data = self._deserialize(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigParseError(f"Parse error in {self.path}: {e}")

        if not isinstance(data, dict):
            raise ConfigParseError(f"Invalid config format in {self.path}: expected a mapping")

        self._config = Config.from_dict(data)
        return self._config

    def create_new_config(self, config: Config) -> None:
        """Persist a freshly created configuration.

        Paths are cleaned before they are written.

        Args:
            config: Configuration to persist

        Raises:
            ConfigExistsError: If a config file already exists
            StoreIOError: If writing fails
        """
        if self.exists():
            raise ConfigExistsError(f"Refusing to overwrite existing config: {self.path}")

        data = config.to_dict()
        for key in (ConfigKey.ROOT_DATA_DIR, ConfigKey.ROOT_TEMP_DIR, ConfigKey.WEB_DIR):
            data[key] = clean_path(data[key])

        write_atomic(self.path, self._serialize(data))
        self._config = Config.from_dict(data)

    def get(self) -> Config:
        """Return the configuration loaded or created by this provider.

        Raises:
            ConfigNotFoundError: If neither parse() nor create_new_config() succeeded
        """
        if self._config is None:
            raise ConfigNotFoundError(f"Config not loaded: {self.path}")
        return self._config

    def _is_yaml(self) -> bool:
        return self.path.suffix.lower() in YAML_SUFFIXES

    def _deserialize(self, text: str) -> Any:
        if self._is_yaml():
            return yaml.safe_load(text)
        return json.loads(text)

    def _serialize(self, data: Dict[str, Any]) -> str:
        if self._is_yaml():
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        return json.dumps(data, indent=2) + "\n"
