"""Persistence collaborators for managed secrets, with optimistic concurrency."""

import base64
import copy
import logging
import os
from typing import Any, Dict, Tuple

import yaml

from ..utils.errors import ConflictError, StoreError, create_error_suggestions
from .models import ManagedSecret

logger = logging.getLogger(__name__)


class SecretStore:
    """Reads and writes managed secrets. Writes fail if the secret changed since it was read."""

    def get(self, namespace: str, name: str) -> ManagedSecret:
        raise NotImplementedError

    def update(self, secret: ManagedSecret) -> ManagedSecret:
        raise NotImplementedError


def _conflict(secret: ManagedSecret, expected: str, actual: str) -> ConflictError:
    return ConflictError(
        f"Secret {secret.key} was modified concurrently",
        details=f"expected resourceVersion {expected}, found {actual}",
        suggestions=create_error_suggestions("conflict"),
    )


def _next_version(version: Any) -> str:
    try:
        return str(int(version) + 1)
    except (TypeError, ValueError):
        return "1"


class InMemorySecretStore(SecretStore):
    """Dictionary-backed store."""

    def __init__(self):
        self._secrets: Dict[Tuple[str, str], ManagedSecret] = {}

    def add(self, secret: ManagedSecret) -> ManagedSecret:
        stored = copy.deepcopy(secret)
        stored.resource_version = stored.resource_version or "1"
        self._secrets[(stored.namespace, stored.name)] = stored
        return copy.deepcopy(stored)

    def get(self, namespace: str, name: str) -> ManagedSecret:
        try:
            return copy.deepcopy(self._secrets[(namespace, name)])
        except KeyError:
            raise StoreError(f"Secret {namespace}/{name} not found") from None

    def update(self, secret: ManagedSecret) -> ManagedSecret:
        current = self._secrets.get((secret.namespace, secret.name))
        if current is None:
            raise StoreError(f"Secret {secret.key} not found")
        if current.resource_version != secret.resource_version:
            raise _conflict(secret, str(secret.resource_version), str(current.resource_version))

        stored = copy.deepcopy(secret)
        stored.resource_version = _next_version(current.resource_version)
        self._secrets[(stored.namespace, stored.name)] = stored
        return copy.deepcopy(stored)


class ManifestSecretStore(SecretStore):
    """
    Store backed by a Kubernetes-style ``v1/Secret`` YAML manifest on disk.

    ``data`` values are base64 encoded and ``metadata.resourceVersion`` is
    bumped on every write. Other top-level keys and metadata are preserved.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_manifest(self) -> Dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                manifest = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise StoreError(f"Secret manifest not found: {self.path}") from None
        except yaml.YAMLError as e:
            raise StoreError(f"Invalid YAML in {self.path}: {e}") from e

        if manifest.get("kind", "Secret") != "Secret":
            raise StoreError(f"{self.path} is not a Secret manifest (kind: {manifest.get('kind')})")

        return manifest

    @staticmethod
    def secret_from_manifest(manifest: Dict[str, Any]) -> ManagedSecret:
        metadata = manifest.get("metadata") or {}
        data = {}
        for key, value in (manifest.get("data") or {}).items():
            data[key] = base64.b64decode(value)
        # stringData is plain text, as in the Kubernetes API
        for key, value in (manifest.get("stringData") or {}).items():
            data[key] = str(value).encode("utf-8")

        version = metadata.get("resourceVersion")
        return ManagedSecret(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", "default"),
            data=data,
            annotations=dict(metadata.get("annotations") or {}),
            resource_version=str(version) if version is not None else None,
        )

    def get(self, namespace: str, name: str) -> ManagedSecret:
        secret = self.secret_from_manifest(self._read_manifest())
        if (secret.namespace, secret.name) != (namespace, name):
            raise StoreError(f"Secret {namespace}/{name} not found in {self.path}")
        return secret

    def load(self) -> ManagedSecret:
        """Read whichever secret the manifest holds."""
        return self.secret_from_manifest(self._read_manifest())

    def update(self, secret: ManagedSecret) -> ManagedSecret:
        manifest = self._read_manifest()
        current = self.secret_from_manifest(manifest)
        if current.resource_version != secret.resource_version:
            raise _conflict(secret, str(secret.resource_version), str(current.resource_version))

        metadata = manifest.setdefault("metadata", {})
        metadata["name"] = secret.name
        metadata["namespace"] = secret.namespace
        metadata["annotations"] = dict(secret.annotations)
        metadata["resourceVersion"] = _next_version(current.resource_version)
        manifest.setdefault("apiVersion", "v1")
        manifest.setdefault("kind", "Secret")
        manifest.pop("stringData", None)
        manifest["data"] = {
            key: base64.b64encode(value).decode("ascii") for key, value in sorted(secret.data.items())
        }

        try:
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(manifest, f, default_flow_style=False, sort_keys=False)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Failed to write secret manifest {self.path}: {e}") from e

        logger.debug("Wrote %s to %s", secret.key, self.path)
        stored = copy.deepcopy(secret)
        stored.resource_version = metadata["resourceVersion"]
        return stored
