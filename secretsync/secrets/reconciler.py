"""Wires the engine to a store, a clock and an event sink."""

import logging
from typing import List, Optional

from ..utils.clock import Clock, SystemClock
from .engine import SecretEngine
from .models import Event, ManagedSecret, ReconcileResult
from .store import SecretStore

logger = logging.getLogger(__name__)


class EventRecorder:
    """Receives events about a managed secret."""

    def record(self, secret: ManagedSecret, event: Event) -> None:
        raise NotImplementedError


class EventLog(EventRecorder):
    """Keeps events in memory, in the order they were recorded."""

    def __init__(self):
        self.events: List[Event] = []

    def record(self, secret: ManagedSecret, event: Event) -> None:
        self.events.append(event)

    def reasons(self) -> List[str]:
        return [event.reason for event in self.events]


class LoggingEventRecorder(EventRecorder):
    """Writes events to the log: warnings at WARNING, the rest at INFO."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logging.getLogger("secretsync.events")

    def record(self, secret: ManagedSecret, event: Event) -> None:
        level = logging.WARNING if event.is_warning else logging.INFO
        self.log.log(level, "%s %s: %s", secret.key, event.reason, event.message)


class SecretReconciler:
    """Reconciles one secret per call: read, evaluate, record, write back."""

    def __init__(
        self,
        store: SecretStore,
        engine: SecretEngine,
        clock: Optional[Clock] = None,
        recorder: Optional[EventRecorder] = None,
    ):
        self.store = store
        self.engine = engine
        self.clock = clock or SystemClock()
        self.recorder = recorder or LoggingEventRecorder()

    def reconcile(self, namespace: str, name: str, dry_run: bool = False) -> ReconcileResult:
        """
        Run one reconciliation of ``namespace/name``.

        Args:
            namespace: Secret namespace
            name: Secret name
            dry_run: Evaluate without writing back or recording success events

        Returns:
            ReconcileResult: Outcome of the cycle

        Raises:
            GenerationError: If a first-time generation failed (nothing written)
            StoreError: If the secret cannot be read or written, including
                ConflictError when it changed concurrently
        """
        secret = self.store.get(namespace, name)
        return self.reconcile_secret(secret, dry_run=dry_run)

    def reconcile_secret(self, secret: ManagedSecret, dry_run: bool = False) -> ReconcileResult:
        """Reconcile an already loaded secret."""
        result = self.engine.evaluate(secret, self.clock.now())

        for event in result.warnings:
            self.recorder.record(secret, event)

        if result.error is not None:
            raise result.error

        if result.changed and not dry_run:
            try:
                result.secret = self.store.update(result.secret)
            except Exception:
                logger.error("Failed to update secret %s", secret.key)
                raise

        if not dry_run:
            for event in result.events:
                if not event.is_warning:
                    self.recorder.record(result.secret or secret, event)

        return result
