"""Configuration management for Keyden.

This module handles loading configuration from multiple sources with the following priority:
1. CLI arguments (handled by caller)
2. Environment variables (KEYDEN_TICK_INTERVAL, KEYDEN_PLACEHOLDER, KEYDEN_LOG_LEVEL)
3. TOML configuration file
4. Default values

Configuration files are loaded from:
- keyden.toml in current working directory
- ~/.keyden/config.toml

Example config.toml:

    [scheduler]
    tick_interval = 1.0

    [display]
    placeholder = "------"

    [logging]
    level = "INFO"
"""

import os
import tomllib
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_TICK_INTERVAL = 1.0
DEFAULT_PLACEHOLDER = "------"
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

CONFIG_DIR = Path.home() / ".keyden"


class Config:
    """Configuration manager for Keyden."""

    def __init__(self):
        """Initialize configuration with defaults."""
        self.tick_interval: float = DEFAULT_TICK_INTERVAL
        self.placeholder: str = DEFAULT_PLACEHOLDER
        self.log_level: str = DEFAULT_LOG_LEVEL
        self._config_data: dict = {}

    def load(self) -> None:
        """Load configuration from all sources.

        Priority order:
        1. Environment variables
        2. TOML configuration file
        3. Default values
        """
        config_file = self._find_config_file()
        if config_file:
            self._load_config_file(config_file)

        self._apply_env_overrides()

    def _find_config_file(self) -> Optional[Path]:
        """Find the configuration file.

        Searches in order:
        1. keyden.toml in current working directory
        2. ~/.keyden/config.toml

        Returns:
            Path to config file if found, None otherwise.
        """
        cwd_config = Path.cwd() / "keyden.toml"
        if cwd_config.exists():
            logger.info(f"Loading config from {cwd_config}")
            return cwd_config

        home_config = CONFIG_DIR / "config.toml"
        if home_config.exists():
            logger.info(f"Loading config from {home_config}")
            return home_config

        logger.debug("No config file found, using defaults")
        return None

    def _load_config_file(self, config_file: Path) -> None:
        """Load configuration from TOML file.

        Args:
            config_file: Path to the TOML configuration file.
        """
        try:
            with open(config_file, "rb") as f:
                self._config_data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(
                f"Failed to load config file {config_file}: {e}. Using defaults."
            )
            return

        scheduler = self._config_data.get("scheduler", {})
        if "tick_interval" in scheduler:
            self._set_tick_interval(scheduler["tick_interval"], source=str(config_file))

        display = self._config_data.get("display", {})
        if "placeholder" in display:
            self._set_placeholder(display["placeholder"], source=str(config_file))

        logging_section = self._config_data.get("logging", {})
        if "level" in logging_section:
            self._set_log_level(logging_section["level"], source=str(config_file))

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides.

        Environment variables take precedence over config file settings
        but are overridden by CLI arguments (handled by caller).
        """
        interval = os.getenv("KEYDEN_TICK_INTERVAL")
        if interval:
            self._set_tick_interval(interval, source="env")

        placeholder = os.getenv("KEYDEN_PLACEHOLDER")
        if placeholder:
            self._set_placeholder(placeholder, source="env")

        level = os.getenv("KEYDEN_LOG_LEVEL")
        if level:
            self._set_log_level(level, source="env")

    def _set_tick_interval(self, value, source: str) -> None:
        try:
            interval = float(value)
        except (TypeError, ValueError):
            interval = 0.0
        if interval <= 0:
            logger.warning(
                f"Invalid tick_interval '{value}' from {source}. "
                f"Keeping {self.tick_interval}."
            )
            return
        self.tick_interval = interval
        logger.debug(f"Loaded tick_interval from {source}: {interval}")

    def _set_placeholder(self, value, source: str) -> None:
        if not isinstance(value, str) or not value:
            logger.warning(f"Invalid placeholder '{value}' from {source}. Ignoring.")
            return
        self.placeholder = value
        logger.debug(f"Loaded placeholder from {source}: {value}")

    def _set_log_level(self, value, source: str) -> None:
        level = str(value).upper()
        if level not in VALID_LOG_LEVELS:
            logger.warning(
                f"Invalid log level '{value}' from {source}. "
                f"Valid values are: {', '.join(sorted(VALID_LOG_LEVELS))}."
            )
            return
        self.log_level = level


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads configuration on first call.

    Returns:
        Global Config instance.
    """
    global _config
    if _config is None:
        _config = Config()
        _config.load()
    return _config


def reload_config() -> Config:
    """Reload configuration from sources.

    Useful for testing or runtime reconfiguration.

    Returns:
        Reloaded Config instance.
    """
    global _config
    _config = Config()
    _config.load()
    return _config
