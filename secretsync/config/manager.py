"""Configuration management for SecretSync."""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .settings import OperatorConfig
from .validator import ConfigValidationError, ConfigValidator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SECRETSYNC_CONFIG"
DEFAULT_CONFIG_FILE = "secretsync.yaml"


class ConfigManager:
    """Loads the operator configuration once and keeps it read-only."""

    def __init__(self, path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            path: Optional explicit configuration file. Falls back to the
                SECRETSYNC_CONFIG environment variable, then to
                ./secretsync.yaml in the current directory.
        """
        self.explicit = path is not None or bool(os.environ.get(CONFIG_ENV_VAR))
        self.path = path or os.environ.get(CONFIG_ENV_VAR) or os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
        self.validator = ConfigValidator()
        self._config_cache: Dict[str, OperatorConfig] = {}

    def load_raw_config(self) -> Dict[str, Any]:
        """
        Read the configuration file without validating it.

        Returns:
            Dict[str, Any]: Parsed YAML mapping (empty when no file is present)

        Raises:
            FileNotFoundError: If an explicitly requested file does not exist
            ConfigValidationError: If the file is not valid YAML
        """
        if not os.path.exists(self.path):
            if self.explicit:
                raise FileNotFoundError(f"Configuration file not found: {self.path}")
            logger.info("No configuration file at %s, using built-in defaults", self.path)
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError([f"Invalid YAML in {self.path}: {e}"]) from e

        return config or {}

    def load_config(self, validate: bool = True) -> OperatorConfig:
        """
        Load the operator configuration.

        Args:
            validate: Whether to validate the configuration

        Returns:
            OperatorConfig: Immutable configuration

        Raises:
            ConfigValidationError: If validation fails
            FileNotFoundError: If an explicit config file doesn't exist
        """
        if self.path in self._config_cache:
            return self._config_cache[self.path]

        raw = self.load_raw_config()

        if validate:
            errors = self.validator.validate_operator_config(raw)
            if errors:
                raise ConfigValidationError(errors)

        config = OperatorConfig.from_dict(raw)
        windows = config.maintenance_windows
        if windows.enabled:
            logger.info("Maintenance windows enabled: %d window(s)", len(windows.windows))
            for window in windows.windows:
                logger.debug("Maintenance window %s", window.describe())

        self._config_cache[self.path] = config
        return config

    def clear_cache(self) -> None:
        """Clear configuration cache."""
        self._config_cache.clear()
