"""Evaluate one managed secret against its annotations and the clock."""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from ..config.settings import TYPE_ECDSA, TYPE_ED25519, TYPE_RSA, OperatorConfig, format_duration
from ..utils.errors import GenerationError, create_error_suggestions
from .generator import SecretGenerator
from .models import (
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    REASON_GENERATION_FAILED,
    REASON_GENERATION_SUCCEEDED,
    REASON_ROTATION_FAILED,
    REASON_ROTATION_SUCCEEDED,
    Event,
    ManagedSecret,
    ReconcileResult,
)
from .resolver import (
    ANNOTATION_AUTOGENERATE,
    ANNOTATION_GENERATED_AT,
    PUBLIC_KEY_SUFFIX,
    ConfigResolver,
    FieldSpec,
    format_timestamp,
    parse_fields,
)
from .rotation import RotationAction, RotationDecisionEngine
from .scheduler import compute_requeue_after

logger = logging.getLogger(__name__)


class SecretEngine:
    """
    Stateless evaluate-and-mutate step for a single secret.

    The input secret is never modified. When at least one field gets new
    material the returned result carries a mutated copy with a fresh
    generated-at annotation; otherwise ``result.secret`` is None.
    """

    def __init__(self, config: OperatorConfig, generator: Optional[SecretGenerator] = None):
        self.config = config
        self.resolver = ConfigResolver(config.defaults)
        self.decisions = RotationDecisionEngine(config.rotation.min_interval, config.maintenance_windows)
        self.generator = generator or SecretGenerator(charset=config.defaults.string.charset)

    def evaluate(self, secret: ManagedSecret, now: datetime) -> ReconcileResult:
        """
        Run one reconciliation cycle in memory.

        Args:
            secret: Current state of the managed secret
            now: Current time from the injected clock

        Returns:
            ReconcileResult: Mutated copy (if any), requeue delay and events
        """
        if now.tzinfo is None:
            # Naive instants are taken to be UTC, as the window evaluator does
            now = now.replace(tzinfo=timezone.utc)

        annotations = secret.annotations or {}
        fields = parse_fields(annotations.get(ANNOTATION_AUTOGENERATE))
        if not fields:
            logger.debug("Secret %s has no fields to generate", secret.key)
            return ReconcileResult()

        logger.info("Reconciling secret %s (%d field(s))", secret.key, len(fields))

        working = secret.copy()
        if working.data is None:
            working.data = {}
        if working.annotations is None:
            working.annotations = {}

        result = ReconcileResult()
        generated_at = self.resolver.generated_at(working.annotations)

        for field in fields:
            spec = self.resolver.resolve(working.annotations, field)
            decision = self.decisions.decide(spec, field in working.data, generated_at, now)
            result.decisions.append(decision)

            if decision.action == RotationAction.REFUSE:
                logger.warning(decision.reason)
                result.events.append(Event(EVENT_TYPE_WARNING, REASON_ROTATION_FAILED, decision.reason))
                continue

            if not decision.action.writes:
                logger.debug("Field %s: %s (%s)", field, decision.action.value, decision.reason)
                continue

            try:
                values = self._generate(spec)
            except GenerationError as e:
                decision.failed = True
                message = f"Failed to generate value for field {field!r}: {e.message}"
                logger.error("%s (type %s)", message, spec.type)

                if decision.action == RotationAction.GENERATE:
                    # No partial write: the whole cycle is abandoned
                    result.events.append(Event(EVENT_TYPE_WARNING, REASON_GENERATION_FAILED, message))
                    if not e.suggestions:
                        e.suggestions = create_error_suggestions("generation_failed", field=field)
                    result.changed = False
                    result.rotated = False
                    result.error = e
                    return result

                result.events.append(Event(EVENT_TYPE_WARNING, REASON_ROTATION_FAILED, message))
                continue

            working.data.update(values)
            result.changed = True
            if decision.action == RotationAction.ROTATE:
                result.rotated = True
                logger.info("Rotated value for field %s (type %s)", field, spec.type)
            else:
                logger.info("Generated value for field %s (type %s)", field, spec.type)

        if result.changed:
            working.annotations[ANNOTATION_GENERATED_AT] = format_timestamp(now)
            result.secret = working

            if result.rotated:
                if self.config.rotation.create_events:
                    result.events.append(
                        Event(
                            EVENT_TYPE_NORMAL,
                            REASON_ROTATION_SUCCEEDED,
                            "Successfully rotated values for secret fields",
                        )
                    )
            else:
                result.events.append(
                    Event(
                        EVENT_TYPE_NORMAL,
                        REASON_GENERATION_SUCCEEDED,
                        "Successfully generated values for secret fields",
                    )
                )

        result.requeue_after = compute_requeue_after(
            result.decisions, now, self.config.maintenance_windows, wrote=result.changed
        )
        if result.requeue_after is not None:
            logger.info("Scheduling next reconciliation of %s in %s", secret.key, format_duration(result.requeue_after))

        return result

    def _generate(self, spec: FieldSpec) -> Dict[str, bytes]:
        """Produce the data entries for one field. Keypairs yield two entries."""
        if spec.type == TYPE_RSA:
            private_pem, public_pem = self.generator.generate_rsa_keypair(spec.length)
        elif spec.type == TYPE_ECDSA:
            private_pem, public_pem = self.generator.generate_ecdsa_keypair(spec.curve)
        elif spec.type == TYPE_ED25519:
            private_pem, public_pem = self.generator.generate_ed25519_keypair()
        else:
            return {spec.name: self.generator.generate(spec.type, spec.length)}

        return {
            spec.name: private_pem.encode("ascii"),
            spec.name + PUBLIC_KEY_SUFFIX: public_pem.encode("ascii"),
        }
