"""
Config Manager

Loads the YAML configuration and turns it into an AppConfig.
Falls back to the packaged factory defaults when the main file is unusable.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Union

from nyancat.exceptions import ConfigError
from nyancat.models.config import AppConfig
from nyancat.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

PACKAGE_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


class ConfigManager:
    """
    Main configuration manager

    Loads config.yaml (or a user supplied path) with yaml.safe_load and builds
    the typed AppConfig. Any failure - missing file, YAML syntax error, value
    of the wrong type - is logged and the factory defaults are used instead.

    Example:
        manager = ConfigManager("/etc/nyancat.yaml")
        config = manager.load()

        config.telnet.port          # 23
        config.animation.tick_interval  # 0.1
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults_path: Optional[Union[str, Path]] = None
    ):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to the main config file (default: packaged config.yaml)
            defaults_path: Path to factory defaults fallback
        """
        self.config_path = Path(config_path) if config_path else PACKAGE_CONFIG_DIR / "config.yaml"
        self.factory_defaults_path = (
            Path(defaults_path) if defaults_path else PACKAGE_CONFIG_DIR / "factory_defaults.yaml"
        )
        self.data: Dict[str, Any] = {}
        self.config: AppConfig = AppConfig()
        self.used_fallback = False

    def load(self) -> AppConfig:
        """
        Load YAML configuration

        Process:
        1. Load the main config file
        2. Validate it into an AppConfig
        3. Fallback to factory defaults on any failure

        Returns:
            Loaded AppConfig
        """
        try:
            self.data = self._read_yaml(self.config_path)
            self.config = self._build(self.data)
            self.used_fallback = False
            log.info("Configuration loaded", path=str(self.config_path))

        except (OSError, yaml.YAMLError, ConfigError) as ex:
            log.error("Failed to load configuration", path=str(self.config_path),
                      error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            self.data = self._read_yaml(self.factory_defaults_path)
            self.config = self._build(self.data)
            self.used_fallback = True

        return self.config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data or {}

    def _build(self, data: Dict[str, Any]) -> AppConfig:
        config, warnings = AppConfig.from_dict(data)
        for warning in warnings:
            log.warn(f"{warning} ignored")
        return config
