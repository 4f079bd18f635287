"""Operator settings and the duration grammar used by configuration and annotations."""

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional

from .maintenance import MaintenanceWindowsConfig

TYPE_STRING = "string"
TYPE_BYTES = "bytes"
TYPE_RSA = "rsa"
TYPE_ECDSA = "ecdsa"
TYPE_ED25519 = "ed25519"

VALUE_TYPES = (TYPE_STRING, TYPE_BYTES)
KEYPAIR_TYPES = (TYPE_RSA, TYPE_ECDSA, TYPE_ED25519)
SUPPORTED_TYPES = VALUE_TYPES + KEYPAIR_TYPES

SUPPORTED_CURVES = ("P-256", "P-384", "P-521")

DEFAULT_TYPE = TYPE_STRING
DEFAULT_LENGTH = 32
DEFAULT_CURVE = "P-256"
DEFAULT_RSA_BITS = 2048
DEFAULT_SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
DEFAULT_MIN_INTERVAL = "5m"

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}

_DURATION_TERM = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h|d)")


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as "90m", "1h30m" or "7d".

    The grammar is a signed sequence of decimal numbers with a unit suffix
    (ns, us, ms, s, m, h) plus ``d`` for 24 hours.

    Args:
        text: Duration string

    Returns:
        timedelta: Parsed duration

    Raises:
        ValueError: If the string is not a valid duration
    """
    original = text
    if text is None:
        raise ValueError("invalid duration: None")

    text = text.strip()
    sign = 1
    if text[:1] in ("+", "-"):
        if text[0] == "-":
            sign = -1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration '{original}'")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_TERM.match(text, position)
        if not match:
            raise ValueError(f"invalid duration '{original}'")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    try:
        return timedelta(seconds=sign * total)
    except OverflowError:
        raise ValueError(f"invalid duration '{original}'") from None


def format_duration(value: timedelta) -> str:
    """Render a duration compactly, e.g. ``1d2h3m4s``."""
    total = int(value.total_seconds())
    if total == 0:
        return "0s"

    prefix = "-" if total < 0 else ""
    total = abs(total)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    return prefix + "".join(parts)


@dataclass(frozen=True)
class StringOptions:
    """Character classes that make up the charset for generated strings."""

    uppercase: bool = True
    lowercase: bool = True
    numbers: bool = True
    special_chars: bool = False
    allowed_special_chars: str = DEFAULT_SPECIAL_CHARS

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StringOptions":
        data = data or {}
        return cls(
            uppercase=data.get("uppercase", True),
            lowercase=data.get("lowercase", True),
            numbers=data.get("numbers", True),
            special_chars=data.get("specialChars", False),
            allowed_special_chars=data.get("allowedSpecialChars", DEFAULT_SPECIAL_CHARS),
        )

    @property
    def charset(self) -> str:
        charset = ""
        if self.lowercase:
            charset += "abcdefghijklmnopqrstuvwxyz"
        if self.uppercase:
            charset += "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        if self.numbers:
            charset += "0123456789"
        if self.special_chars:
            charset += self.allowed_special_chars
        return charset


@dataclass(frozen=True)
class DefaultsConfig:
    """Global fallbacks for the annotation cascade."""

    type: str = DEFAULT_TYPE
    length: int = DEFAULT_LENGTH
    curve: str = DEFAULT_CURVE
    rsa_bits: int = DEFAULT_RSA_BITS
    string: StringOptions = field(default_factory=StringOptions)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DefaultsConfig":
        data = data or {}
        return cls(
            type=data.get("type", DEFAULT_TYPE),
            length=data.get("length", DEFAULT_LENGTH),
            curve=data.get("curve", DEFAULT_CURVE),
            rsa_bits=data.get("rsaBits", DEFAULT_RSA_BITS),
            string=StringOptions.from_dict(data.get("string")),
        )


@dataclass(frozen=True)
class RotationConfig:
    """Process-wide rotation policy."""

    min_interval: timedelta = field(default_factory=lambda: parse_duration(DEFAULT_MIN_INTERVAL))
    create_events: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RotationConfig":
        data = data or {}
        return cls(
            min_interval=parse_duration(str(data.get("minInterval", DEFAULT_MIN_INTERVAL))),
            create_events=bool(data.get("createEvents", False)),
        )


@dataclass(frozen=True)
class OperatorConfig:
    """Complete, validated operator configuration. Read-only after startup."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)
    maintenance_windows: MaintenanceWindowsConfig = field(default_factory=MaintenanceWindowsConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "OperatorConfig":
        """
        Build configuration from a parsed YAML mapping.

        The mapping is expected to have passed ``ConfigValidator`` already.
        """
        data = data or {}
        return cls(
            defaults=DefaultsConfig.from_dict(data.get("defaults")),
            rotation=RotationConfig.from_dict(data.get("rotation")),
            maintenance_windows=MaintenanceWindowsConfig.from_dict(data.get("maintenanceWindows")),
        )
