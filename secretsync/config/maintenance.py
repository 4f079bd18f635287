"""Recurring weekly maintenance windows that gate secret rotation."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, FrozenSet, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..utils.errors import ConfigurationError, create_error_suggestions

# Day names map onto datetime.weekday() numbers (Monday == 0)
VALID_DAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def parse_day(day: str) -> int:
    """
    Parse an English day name into a weekday number.

    Args:
        day: Day name, case-insensitive, surrounding whitespace ignored

    Returns:
        int: Weekday number as used by ``datetime.weekday()``

    Raises:
        ValueError: If the name is not a weekday
    """
    normalized = day.strip().lower()
    if normalized in VALID_DAYS:
        return VALID_DAYS[normalized]
    raise ValueError(
        f"invalid day: '{day}', must be one of: sunday, monday, tuesday, "
        "wednesday, thursday, friday, saturday"
    )


def parse_time(value: str) -> Tuple[int, int]:
    """
    Parse a time of day in HH:MM format.

    Args:
        value: Time string such as "03:00"

    Returns:
        Tuple[int, int]: Hour and minute

    Raises:
        ValueError: If the string is not a valid HH:MM time
    """
    if not value:
        raise ValueError("time cannot be empty")

    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"invalid time format '{value}', expected HH:MM")

    try:
        hour = int(parts[0])
    except ValueError:
        raise ValueError(f"invalid hour in '{value}'") from None

    try:
        minute = int(parts[1])
    except ValueError:
        raise ValueError(f"invalid minute in '{value}'") from None

    if hour < 0 or hour > 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")

    if minute < 0 or minute > 59:
        raise ValueError(f"minute must be between 0 and 59, got {minute}")

    return hour, minute


def _aware(t: datetime) -> datetime:
    # Naive instants are taken to be UTC
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t


@dataclass(frozen=True)
class MaintenanceWindow:
    """A recurring weekly time range, in a fixed timezone, during which rotation may happen."""

    days: Tuple[str, ...]
    start_time: str
    end_time: str
    timezone: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaintenanceWindow":
        """Build a window from its configuration-file mapping."""
        return cls(
            name=data.get("name", "") or "",
            days=tuple(data.get("days", []) or []),
            start_time=data.get("startTime", "") or "",
            end_time=data.get("endTime", "") or "",
            timezone=data.get("timezone", "") or "",
        )

    def validate(self) -> None:
        """
        Check that the window is well formed.

        Raises:
            ConfigurationError: Describing the first problem found
        """
        if not self.days:
            raise ConfigurationError("at least one day must be specified")

        for day in self.days:
            try:
                parse_day(day)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e

        try:
            start_hour, start_minute = parse_time(self.start_time)
        except ValueError as e:
            raise ConfigurationError(f"invalid startTime: {e}") from e

        try:
            end_hour, end_minute = parse_time(self.end_time)
        except ValueError as e:
            raise ConfigurationError(f"invalid endTime: {e}") from e

        # Windows never span midnight
        if end_hour * 60 + end_minute <= start_hour * 60 + start_minute:
            raise ConfigurationError(
                f"endTime ({self.end_time}) must be after startTime ({self.start_time})"
            )

        if not self.timezone:
            raise ConfigurationError("timezone must be specified")

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"invalid timezone '{self.timezone}': {e}") from e

    @property
    def weekdays(self) -> FrozenSet[int]:
        result = set()
        for day in self.days:
            try:
                result.add(parse_day(day))
            except ValueError:
                continue
        return frozenset(result)

    @property
    def start_minute(self) -> int:
        hour, minute = parse_time(self.start_time)
        return hour * 60 + minute

    @property
    def end_minute(self) -> int:
        hour, minute = parse_time(self.end_time)
        return hour * 60 + minute

    def _zone(self) -> Optional[ZoneInfo]:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return None

    def is_in_window(self, t: datetime) -> bool:
        """
        Check whether ``t`` falls inside this window.

        The start boundary is inclusive, the end boundary exclusive.
        """
        zone = self._zone()
        if zone is None:
            return False

        local = _aware(t).astimezone(zone)
        if local.weekday() not in self.weekdays:
            return False

        current = local.hour * 60 + local.minute
        return self.start_minute <= current < self.end_minute

    def next_start(self, t: datetime) -> Optional[datetime]:
        """
        Calculate the next start of this window at or after ``t``.

        While ``t`` is inside the window, today's start is returned, meaning
        there is nothing to wait for.

        Returns:
            Optional[datetime]: Start instant in the window's timezone, or None
            when the window has no usable days or timezone
        """
        zone = self._zone()
        weekdays = self.weekdays
        if zone is None or not weekdays:
            return None

        local = _aware(t).astimezone(zone)
        start_hour, start_minute = divmod(self.start_minute, 60)
        current = local.hour * 60 + local.minute

        if local.weekday() in weekdays and current < self.end_minute:
            return datetime(local.year, local.month, local.day, start_hour, start_minute, tzinfo=zone)

        for days_ahead in range(1, 8):
            future = local.date() + timedelta(days=days_ahead)
            if future.weekday() in weekdays:
                return datetime(future.year, future.month, future.day, start_hour, start_minute, tzinfo=zone)

        return None

    def describe(self) -> str:
        label = self.name or "unnamed"
        return f"{label} ({', '.join(self.days)} {self.start_time}-{self.end_time} {self.timezone})"


@dataclass(frozen=True)
class MaintenanceWindowsConfig:
    """The set of maintenance windows, loaded once at startup."""

    enabled: bool = False
    windows: Tuple[MaintenanceWindow, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MaintenanceWindowsConfig":
        data = data or {}
        return cls(
            enabled=bool(data.get("enabled", False)),
            windows=tuple(MaintenanceWindow.from_dict(w) for w in data.get("windows", []) or []),
        )

    def validation_errors(self) -> list:
        """
        Collect every problem with the configured windows.

        Returns:
            list: Error messages, empty when the configuration is valid
        """
        errors = []

        if self.enabled and not self.windows:
            errors.append("at least one maintenance window must be defined when enabled")

        for index, window in enumerate(self.windows):
            try:
                window.validate()
            except ConfigurationError as e:
                if window.name:
                    errors.append(f"window '{window.name}': {e.message}")
                else:
                    errors.append(f"window[{index}]: {e.message}")

        return errors

    def validate(self) -> None:
        """
        Validate the maintenance windows configuration.

        Raises:
            ConfigurationError: If any window is malformed, or if the feature
            is enabled without windows
        """
        errors = self.validation_errors()
        if errors:
            raise ConfigurationError(
                errors[0],
                details="; ".join(errors[1:]) or None,
                suggestions=create_error_suggestions("window_invalid"),
            )

    def is_in_any_window(self, t: datetime) -> bool:
        """Check whether rotation is allowed at ``t``. Always true when disabled."""
        if not self.enabled:
            return True

        return any(window.is_in_window(t) for window in self.windows)

    def get_active_window(self, t: datetime) -> Optional[MaintenanceWindow]:
        """Return the first window containing ``t``, in configuration order."""
        if not self.enabled:
            return None

        for window in self.windows:
            if window.is_in_window(t):
                return window

        return None

    def next_window_start(self, t: datetime) -> Optional[datetime]:
        """Return the earliest next start across all windows, or None when disabled."""
        if not self.enabled or not self.windows:
            return None

        earliest = None
        for window in self.windows:
            candidate = window.next_start(t)
            if candidate is None:
                continue
            if earliest is None or candidate.astimezone(timezone.utc) < earliest.astimezone(timezone.utc):
                earliest = candidate

        return earliest

    def duration_until_next_window(self, t: datetime) -> timedelta:
        """Return how long to wait from ``t`` until rotation is allowed."""
        if not self.enabled:
            return timedelta(0)

        if self.is_in_any_window(t):
            return timedelta(0)

        next_start = self.next_window_start(t)
        if next_start is None:
            return timedelta(0)

        # Same-zone datetime subtraction ignores DST offsets, so go through UTC
        return next_start.astimezone(timezone.utc) - _aware(t).astimezone(timezone.utc)
