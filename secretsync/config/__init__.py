"""Configuration management for SecretSync."""

from .maintenance import MaintenanceWindow, MaintenanceWindowsConfig
from .manager import ConfigManager
from .schemas import OPERATOR_CONFIG_SCHEMA
from .settings import OperatorConfig, parse_duration
from .validator import ConfigValidationError, ConfigValidator

__all__ = [
    'ConfigManager',
    'ConfigValidationError',
    'ConfigValidator',
    'MaintenanceWindow',
    'MaintenanceWindowsConfig',
    'OPERATOR_CONFIG_SCHEMA',
    'OperatorConfig',
    'parse_duration',
]
