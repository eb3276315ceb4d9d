"""
Manages loading, validation, and saving of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ircwatch.exceptions import ConfigurationError
from ircwatch.models.config import StoreConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, overrides: dict[str, Any] | None = None) -> StoreConfig:
        """
        Loads configuration from the INI file, applies overrides, and validates it.

        Args:
            overrides: Values that take precedence over the file, e.g. from the
            environment of the embedding application.

        Returns:
            A validated StoreConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
            config_from_file = self._get_config_as_dict()
        except (configparser.Error, ValueError) as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        # Relative paths in the file are relative to the file, not the cwd.
        config_dir = self.config_file_path.parent
        for key in ("database_path", "fetch_dir"):
            if config_from_file.get(key):
                path = Path(config_from_file[key]).expanduser()
                config_from_file[key] = str(path if path.is_absolute() else config_dir / path)

        if overrides:
            config_from_file.update(overrides)

        try:
            return StoreConfig(**config_from_file)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save. Keys that are not given are
            written with their model defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = StoreConfig.model_construct()
        for key in sorted(StoreConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            if value is not None:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e
        log.debug(f"Saved configuration to '{self.config_file_path}'.")

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        values: dict[str, Any] = {
            "pool_size": section.getint("pool_size", 5),
            "busy_timeout": section.getfloat("busy_timeout", 30.0),
            "fetch_timeout": section.getfloat("fetch_timeout", 10.0),
            "fetch_max_attempts": section.getint("fetch_max_attempts", 1),
            "fetch_base_delay": section.getfloat("fetch_base_delay", 1.5),
        }
        for key in ("database_path", "fetch_dir"):
            if key in section:
                values[key] = section.get(key)
        return values
