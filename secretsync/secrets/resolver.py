"""Annotation cascade: per-field override, then secret-wide value, then global default."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Mapping, Optional

from ..config.settings import TYPE_RSA, DefaultsConfig, parse_duration

ANNOTATION_PREFIX = "iso.gtrfc.com/"

ANNOTATION_AUTOGENERATE = ANNOTATION_PREFIX + "autogenerate"
ANNOTATION_TYPE = ANNOTATION_PREFIX + "type"
ANNOTATION_LENGTH = ANNOTATION_PREFIX + "length"
ANNOTATION_CURVE = ANNOTATION_PREFIX + "curve"
ANNOTATION_ROTATE = ANNOTATION_PREFIX + "rotate"
ANNOTATION_GENERATED_AT = ANNOTATION_PREFIX + "generated-at"

PUBLIC_KEY_SUFFIX = ".pub"

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class FieldSpec:
    """Effective generation settings for one field, rebuilt every cycle."""

    name: str
    type: str
    length: int
    curve: str
    rotation_interval: Optional[timedelta] = None

    @property
    def rotates(self) -> bool:
        return self.rotation_interval is not None


def parse_fields(value: Optional[str]) -> List[str]:
    """Split the autogenerate annotation into field names, keeping order."""
    fields = []
    for item in (value or "").split(","):
        item = item.strip()
        if item and item not in fields:
            fields.append(item)
    return fields


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp.

    Raises:
        ValueError: If the value is not RFC3339
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp '{value}' has no UTC offset")
    return parsed


def format_timestamp(value: datetime) -> str:
    """Render an instant as RFC3339 UTC with second precision."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ConfigResolver:
    """Resolves a field's effective settings from annotations and global defaults."""

    def __init__(self, defaults: DefaultsConfig):
        self.defaults = defaults

    def _lookup(self, annotations: Mapping[str, str], key: str, field: str) -> List[str]:
        # Candidates in priority order; empty values never count
        values = []
        for candidate in (f"{key}.{field}", key):
            value = annotations.get(candidate)
            if value:
                values.append(value)
        return values

    def field_type(self, annotations: Mapping[str, str], field: str) -> str:
        for value in self._lookup(annotations, ANNOTATION_TYPE, field):
            return value
        return self.defaults.type

    def field_length(self, annotations: Mapping[str, str], field: str, gen_type: Optional[str] = None) -> int:
        """Resolve length (bit size for RSA). Non-positive or non-integer values fall through."""
        for value in self._lookup(annotations, ANNOTATION_LENGTH, field):
            if not _INTEGER.fullmatch(value):
                continue
            length = int(value)
            if length > 0:
                return length

        if gen_type == TYPE_RSA:
            return self.defaults.rsa_bits
        return self.defaults.length

    def field_curve(self, annotations: Mapping[str, str], field: str) -> str:
        for value in self._lookup(annotations, ANNOTATION_CURVE, field):
            return value
        return self.defaults.curve

    def field_rotation_interval(self, annotations: Mapping[str, str], field: str) -> Optional[timedelta]:
        """
        Resolve the rotation interval.

        Unparseable values fall through to the next level; a parseable zero or
        negative value means the field never rotates.
        """
        for value in self._lookup(annotations, ANNOTATION_ROTATE, field):
            try:
                interval = parse_duration(value)
            except ValueError:
                continue
            return interval if interval > timedelta(0) else None
        return None

    def resolve(self, annotations: Mapping[str, str], field: str) -> FieldSpec:
        gen_type = self.field_type(annotations, field)
        return FieldSpec(
            name=field,
            type=gen_type,
            length=self.field_length(annotations, field, gen_type),
            curve=self.field_curve(annotations, field),
            rotation_interval=self.field_rotation_interval(annotations, field),
        )

    def generated_at(self, annotations: Mapping[str, str]) -> Optional[datetime]:
        """Return the shared generated-at timestamp, or None when absent or unparseable."""
        value = annotations.get(ANNOTATION_GENERATED_AT)
        if not value:
            return None
        try:
            return parse_timestamp(value)
        except ValueError:
            return None
