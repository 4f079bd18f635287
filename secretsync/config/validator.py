"""Configuration validation for SecretSync."""

from typing import Any, Dict, List

import jsonschema
import yaml

from ..utils.errors import ConfigurationError, create_error_suggestions
from .maintenance import MaintenanceWindowsConfig
from .schemas import OPERATOR_CONFIG_SCHEMA
from .settings import StringOptions, parse_duration


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"Configuration validation failed: {'; '.join(errors)}",
            suggestions=create_error_suggestions("configuration_invalid"),
        )


class ConfigValidator:
    """Validates SecretSync operator configuration."""

    def validate_operator_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate operator configuration.

        Args:
            config: Configuration dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(config, dict):
            return ["Configuration must be a mapping"]

        validator = jsonschema.Draft7Validator(OPERATOR_CONFIG_SCHEMA)
        for error in sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path]):
            location = ".".join(str(part) for part in error.path)
            if location:
                errors.append(f"Schema validation failed at {location}: {error.message}")
            else:
                errors.append(f"Schema validation failed: {error.message}")

        # Semantic checks only make sense on a structurally valid document
        if errors:
            return errors

        if "defaults" in config:
            errors.extend(self._validate_string_options(config["defaults"].get("string")))

        if "rotation" in config and "minInterval" in config["rotation"]:
            errors.extend(self._validate_min_interval(config["rotation"]["minInterval"]))

        if "maintenanceWindows" in config:
            windows = MaintenanceWindowsConfig.from_dict(config["maintenanceWindows"])
            errors.extend(f"maintenanceWindows: {e}" for e in windows.validation_errors())

        return errors

    def validate_config_file(self, file_path: str) -> List[str]:
        """
        Validate configuration file.

        Args:
            file_path: Path to configuration file

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        try:
            with open(file_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError:
            return [f"Configuration file not found: {file_path}"]
        except yaml.YAMLError as e:
            return [f"YAML parsing error: {e}"]
        except OSError as e:
            return [f"Error reading configuration file: {e}"]

        if config is None:
            return []

        return self.validate_operator_config(config)

    def _validate_string_options(self, options: Any) -> List[str]:
        """Validate that the string charset flags leave something to sample from."""
        if options is None:
            return []

        if not StringOptions.from_dict(options).charset:
            return ["defaults.string: at least one character class must be enabled"]

        return []

    def _validate_min_interval(self, value: str) -> List[str]:
        """Validate the minimum rotation interval."""
        try:
            interval = parse_duration(value)
        except ValueError as e:
            return [f"rotation.minInterval: {e}"]

        if interval.total_seconds() < 0:
            return [f"rotation.minInterval must not be negative, got '{value}'"]

        return []
