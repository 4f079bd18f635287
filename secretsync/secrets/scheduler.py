"""Folds per-field timers into the single delay after which a secret must be looked at again."""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..config.maintenance import MaintenanceWindowsConfig
from .rotation import FieldDecision, RotationAction


def requeue_candidates(
    decisions: Iterable[FieldDecision],
    now: datetime,
    windows: MaintenanceWindowsConfig,
    wrote: bool,
) -> List[timedelta]:
    """
    Collect each field's wait until its next required action.

    After a write the shared generated-at is reset to ``now``, so every
    rotating field restarts its full interval. Refused and failed fields are
    left out; rescheduling them would only repeat the failure.
    """
    candidates = []

    for decision in decisions:
        interval = decision.spec.rotation_interval
        if interval is None or decision.failed or decision.action == RotationAction.REFUSE:
            continue

        if wrote:
            candidates.append(interval)
        elif decision.action == RotationAction.DEFER:
            candidates.append(windows.duration_until_next_window(now))
        elif decision.age is not None:
            candidates.append(max(interval - decision.age, timedelta(0)))

    return candidates


def compute_requeue_after(
    decisions: Iterable[FieldDecision],
    now: datetime,
    windows: MaintenanceWindowsConfig,
    wrote: bool,
) -> Optional[timedelta]:
    """
    Return the minimal delay before the next reconciliation.

    Returns:
        Optional[timedelta]: Smallest candidate, or None when no field rotates
    """
    candidates = requeue_candidates(decisions, now, windows, wrote)
    if not candidates:
        return None
    return min(candidates)
