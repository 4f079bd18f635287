"""Secret generation, rotation and reconciliation."""

from .engine import SecretEngine
from .generator import SecretGenerator
from .models import Event, ManagedSecret, ReconcileResult
from .reconciler import EventLog, LoggingEventRecorder, SecretReconciler
from .resolver import ConfigResolver, FieldSpec
from .rotation import FieldDecision, RotationAction, RotationDecisionEngine
from .scheduler import compute_requeue_after
from .store import InMemorySecretStore, ManifestSecretStore, SecretStore

__all__ = [
    "ConfigResolver",
    "Event",
    "EventLog",
    "FieldDecision",
    "FieldSpec",
    "InMemorySecretStore",
    "LoggingEventRecorder",
    "ManagedSecret",
    "ManifestSecretStore",
    "ReconcileResult",
    "RotationAction",
    "RotationDecisionEngine",
    "SecretEngine",
    "SecretGenerator",
    "SecretReconciler",
    "SecretStore",
    "compute_requeue_after",
]
