"""
Config Manager

Loads the YAML configuration, falls back to factory defaults when the file
is missing or broken, and merges command line overrides. Configuration
problems never abort the program: they are logged and defaults are used.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from models.config import AppConfig
from models.enums import LogCategory
from utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)


class ConfigManager:
    """
    Main configuration manager

    Example:
        manager = ConfigManager()
        config = manager.load()
        config = manager.apply_overrides(options)

        config.connection.port      # 2000
        config.supervisor.poll_interval
    """

    def __init__(self, config_path: Optional[str] = None, defaults_path: str = "config/factory_defaults.yaml"):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to the YAML config (defaults to config/traffic_manager.yaml under src/)
            defaults_path: Path to factory defaults fallback (relative to src/)
        """
        src_dir = Path(__file__).parent.parent
        self.config_path = Path(config_path) if config_path else src_dir / "config" / "traffic_manager.yaml"
        self.factory_defaults_path = src_dir / defaults_path
        self.data: Dict[str, Any] = {}
        self.config = AppConfig()

    def load(self) -> AppConfig:
        """
        Load YAML configuration

        Process:
        1. Load the config file
        2. Fallback to factory defaults on read/parse failure
        3. Validate into AppConfig; invalid values fall back to built-in defaults

        Returns:
            Validated AppConfig
        """
        try:
            self.data = self._read_yaml(self.config_path)
            log.info(f"Loaded configuration from {self.config_path.name}", sections=str(list(self.data.keys())))
        except Exception as ex:
            log.error("Failed to load configuration", path=str(self.config_path), error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")
            try:
                self.data = self._read_yaml(self.factory_defaults_path)
            except Exception as defaults_ex:
                log.error("Factory defaults unreadable, using built-in defaults", error=str(defaults_ex))
                self.data = {}

        try:
            self.config = AppConfig.model_validate(self.data)
        except ValidationError as ex:
            log.warn(
                "Invalid configuration values, using built-in defaults",
                errors=ex.error_count(),
                first=ex.errors()[0]["msg"],
            )
            self.config = AppConfig()

        return self.config

    def apply_overrides(self, options) -> AppConfig:
        """
        Merge CommandLineOptions into the loaded configuration.

        Only options that were given (not None) override. An override that
        fails validation is dropped with a warning.
        """
        overrides = {
            ("traffic", "target_count"): options.target_count,
            ("traffic", "seed"): options.seed,
            ("connection", "host"): options.host,
            ("connection", "port"): options.port,
            ("logging", "level"): options.log_level,
        }

        data = self.config.model_dump()
        for (section, key), value in overrides.items():
            if value is None:
                continue
            candidate = {**data, section: {**data[section], key: value}}
            try:
                AppConfig.model_validate(candidate)
            except ValidationError:
                log.warn(f"Ignoring invalid override {section}.{key}, choosing defaults", value=value)
                continue
            data = candidate

        self.config = AppConfig.model_validate(data)
        return self.config

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Top level of {path.name} must be a mapping")
        return data
