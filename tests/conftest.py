"""Pytest configuration and shared fixtures."""

import logging
import shutil
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from secretsync.config.maintenance import MaintenanceWindow, MaintenanceWindowsConfig
from secretsync.config.settings import OperatorConfig, RotationConfig
from secretsync.secrets.models import ManagedSecret
from secretsync.secrets.resolver import (
    ANNOTATION_AUTOGENERATE,
    ANNOTATION_GENERATED_AT,
    ANNOTATION_ROTATE,
)
from secretsync.utils.clock import FixedClock

UTC = timezone.utc


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolate_filesystem(temp_directory, monkeypatch):
    """Isolate filesystem operations to temporary directory."""
    monkeypatch.chdir(temp_directory)
    monkeypatch.delenv("SECRETSYNC_CONFIG", raising=False)
    return temp_directory


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers that CLI invocations attach to the root logger."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


@pytest.fixture
def weekend_window():
    """Saturday and Sunday, 03:00-05:00 Berlin time."""
    return MaintenanceWindow(
        name="weekend-night",
        days=("saturday", "sunday"),
        start_time="03:00",
        end_time="05:00",
        timezone="Europe/Berlin",
    )


@pytest.fixture
def weekend_windows(weekend_window):
    """Enabled maintenance windows with a single weekend window."""
    return MaintenanceWindowsConfig(enabled=True, windows=(weekend_window,))


@pytest.fixture
def operator_config():
    """Operator configuration with windows disabled."""
    return OperatorConfig(rotation=RotationConfig(min_interval=timedelta(minutes=5)))


@pytest.fixture
def windowed_config(weekend_windows):
    """Operator configuration with the weekend window enabled."""
    return OperatorConfig(
        rotation=RotationConfig(min_interval=timedelta(minutes=5)),
        maintenance_windows=weekend_windows,
    )


@pytest.fixture
def monday_noon():
    """Monday 2026-02-09 12:00 UTC, outside every weekend window."""
    return datetime(2026, 2, 9, 12, 0, tzinfo=UTC)


@pytest.fixture
def fixed_clock(monday_noon):
    """Clock frozen at Monday noon."""
    return FixedClock(monday_noon)


@pytest.fixture
def rotating_secret(monday_noon):
    """Secret whose password was generated two hours ago and rotates hourly."""
    generated_at = monday_noon - timedelta(hours=2)
    return ManagedSecret(
        name="app-credentials",
        namespace="default",
        data={"password": b"old-password-value"},
        annotations={
            ANNOTATION_AUTOGENERATE: "password",
            ANNOTATION_ROTATE: "1h",
            ANNOTATION_GENERATED_AT: generated_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        },
        resource_version="1",
    )


@pytest.fixture
def sample_config():
    """Sample operator configuration file contents."""
    return {
        "defaults": {
            "type": "string",
            "length": 24,
            "string": {
                "uppercase": True,
                "lowercase": True,
                "numbers": True,
                "specialChars": False,
            },
        },
        "rotation": {
            "minInterval": "10m",
            "createEvents": True,
        },
        "maintenanceWindows": {
            "enabled": True,
            "windows": [
                {
                    "name": "weekend-night",
                    "days": ["saturday", "sunday"],
                    "startTime": "03:00",
                    "endTime": "05:00",
                    "timezone": "Europe/Berlin",
                }
            ],
        },
    }
