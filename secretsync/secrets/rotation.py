"""Per-field decision: generate, rotate, defer, refuse or skip."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..config.maintenance import MaintenanceWindowsConfig
from ..config.settings import format_duration
from .resolver import FieldSpec

logger = logging.getLogger(__name__)


class RotationAction(Enum):
    """What the engine does with a field this cycle."""

    GENERATE = "generate"
    ROTATE = "rotate"
    DEFER = "defer"
    REFUSE = "refuse"
    SKIP = "skip"

    @property
    def writes(self) -> bool:
        return self in (RotationAction.GENERATE, RotationAction.ROTATE)


@dataclass
class FieldDecision:
    """Outcome of evaluating one field against the clock and the rotation policy."""

    spec: FieldSpec
    action: RotationAction
    reason: str = ""
    age: Optional[timedelta] = None
    failed: bool = False

    @property
    def field(self) -> str:
        return self.spec.name


class RotationDecisionEngine:
    """Decides per field whether new material is needed now."""

    def __init__(self, min_interval: timedelta, windows: MaintenanceWindowsConfig):
        """
        Initialize the decision engine.

        Args:
            min_interval: Shortest rotation interval that will be honoured
            windows: Maintenance windows gating rotation (not first generation)
        """
        self.min_interval = min_interval
        self.windows = windows

    def decide(
        self,
        spec: FieldSpec,
        has_value: bool,
        generated_at: Optional[datetime],
        now: datetime,
    ) -> FieldDecision:
        """
        Decide what to do with a single field.

        Args:
            spec: Resolved field settings
            has_value: Whether the secret already holds data for the field
            generated_at: Shared timestamp of the last generate-or-rotate write
            now: Current time

        Returns:
            FieldDecision: The action and the reason for it
        """
        # Initial population is never deferred or refused
        if not has_value:
            return FieldDecision(spec, RotationAction.GENERATE, "field has no value")

        interval = spec.rotation_interval
        if interval is None:
            return FieldDecision(spec, RotationAction.SKIP, "no rotation configured")

        if generated_at is None:
            return FieldDecision(spec, RotationAction.SKIP, "no generated-at timestamp")

        if interval < self.min_interval:
            return FieldDecision(
                spec,
                RotationAction.REFUSE,
                f"Rotation interval {format_duration(interval)} for field {spec.name!r} "
                f"is below minimum {format_duration(self.min_interval)}",
            )

        age = now - generated_at
        if age < interval:
            return FieldDecision(spec, RotationAction.SKIP, "rotation not due", age=age)

        if not self.windows.is_in_any_window(now):
            wait = self.windows.duration_until_next_window(now)
            logger.info(
                "Rotation of field %s deferred until next maintenance window (in %s)",
                spec.name,
                format_duration(wait),
            )
            return FieldDecision(spec, RotationAction.DEFER, "outside maintenance window", age=age)

        active = self.windows.get_active_window(now)
        if active is not None:
            logger.debug("Field %s rotating inside maintenance window %s", spec.name, active.describe())

        logger.info(
            "Field %s needs rotation (age %s, interval %s)",
            spec.name,
            format_duration(age),
            format_duration(interval),
        )
        return FieldDecision(spec, RotationAction.ROTATE, "rotation due", age=age)
