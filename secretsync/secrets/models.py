"""Data exchanged between the engine and its collaborators."""

import copy
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional

from .rotation import FieldDecision

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

REASON_GENERATION_SUCCEEDED = "GenerationSucceeded"
REASON_GENERATION_FAILED = "GenerationFailed"
REASON_ROTATION_SUCCEEDED = "RotationSucceeded"
REASON_ROTATION_FAILED = "RotationFailed"


@dataclass
class ManagedSecret:
    """A named, namespaced map of field payloads plus string annotations."""

    name: str
    namespace: str = "default"
    data: Dict[str, bytes] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    resource_version: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def copy(self) -> "ManagedSecret":
        return copy.deepcopy(self)


@dataclass(frozen=True)
class Event:
    """A notification for the event sink."""

    type: str
    reason: str
    message: str

    @property
    def is_warning(self) -> bool:
        return self.type == EVENT_TYPE_WARNING


@dataclass
class ReconcileResult:
    """Everything one evaluation produced."""

    secret: Optional[ManagedSecret] = None
    changed: bool = False
    rotated: bool = False
    requeue_after: Optional[timedelta] = None
    events: List[Event] = field(default_factory=list)
    decisions: List[FieldDecision] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def warnings(self) -> List[Event]:
        return [event for event in self.events if event.is_warning]
