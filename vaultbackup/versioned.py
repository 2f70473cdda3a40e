"""
vaultbackup/versioned.py - Capture and replay the full version history of KV v2 secrets.

KV v2 has no "create version N" call: the only way to reach version N is N
sequential writes. Reproducing "version 7 destroyed, version 8 live" on an
empty destination therefore means writing eight versions (a throwaway empty
payload for every version whose content is gone) and destroying version 7
afterwards. Replay order is a correctness requirement.

Version-creating writes are not idempotent. Nothing here retries: a blind
retry would create one version too many and shift every later version number.
A key that fails half way stays partially restored.
"""
from dataclasses import dataclass, field
from typing import Any

from vaultbackup.context import EngineContext
from vaultbackup.errors import DecodeError


@dataclass
class VersionState:
    destroyed: bool = False
    deletion_time: str = ""

    @property
    def is_gone(self) -> bool:
        """Vault refuses to serve the payload of destroyed or deleted versions."""
        return self.destroyed or bool(self.deletion_time)


@dataclass
class SecretMetadata:
    """The metadata endpoint of one KV v2 secret."""

    max_versions: int = 0
    cas_required: bool = False
    delete_version_after: str = "0s"
    custom_metadata: dict[str, str] | None = None
    current_version: int = 0
    versions: dict[int, VersionState] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretMetadata":
        versions = {
            int(number): VersionState(
                destroyed=bool(state.get("destroyed", False)),
                deletion_time=state.get("deletion_time") or "",
            )
            for number, state in (data.get("versions") or {}).items()
        }
        return cls(
            max_versions=int(data.get("max_versions") or 0),
            cas_required=bool(data.get("cas_required", False)),
            delete_version_after=data.get("delete_version_after") or "0s",
            custom_metadata=data.get("custom_metadata"),
            current_version=int(data.get("current_version") or 0),
            versions=versions,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.settings(),
            "custom_metadata": self.custom_metadata,
            "current_version": self.current_version,
            "versions": {
                str(number): {"destroyed": state.destroyed, "deletion_time": state.deletion_time}
                for number, state in sorted(self.versions.items())
            },
        }

    def settings(self) -> dict[str, Any]:
        """The writable part of the metadata."""
        return {
            "max_versions": self.max_versions,
            "cas_required": self.cas_required,
            "delete_version_after": self.delete_version_after,
            "custom_metadata": self.custom_metadata or {},
        }


@dataclass
class VersionedSecret:
    """
    Backup record of one KV v2 secret.

    data holds a payload for every live version and an empty placeholder for
    every destroyed or deleted one. Versions missing from both data and
    metadata.versions (pruned by max_versions) are recreated empty and
    destroyed on replay.
    """

    metadata: SecretMetadata
    data: dict[int, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any, source: str = "") -> "VersionedSecret":
        try:
            return cls(
                metadata=SecretMetadata.from_dict(raw["metadata"]),
                data={int(number): payload or {} for number, payload in (raw.get("data") or {}).items()},
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"{source}: not a versioned secret record: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "data": {str(number): payload for number, payload in sorted(self.data.items())},
        }

    def pending_destroy(self) -> list[int]:
        """Versions that must end up destroyed once replay has recreated them."""
        versions = self.metadata.versions
        return [
            i for i in range(1, self.metadata.current_version + 1)
            if i not in versions or versions[i].is_gone
        ]


class VersionedSecretReconstructor:
    """Reads and rebuilds KV v2 version histories below one mount."""

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx

    def _path(self, endpoint: str, key: str) -> str:
        return self.ctx.remote_path(endpoint, key)

    def read_metadata(self, key: str) -> SecretMetadata:
        return SecretMetadata.from_dict(self.ctx.store.read_secret(self._path("metadata", key)))

    def read_version(self, key: str, version: int) -> dict[str, Any]:
        response = self.ctx.store.read_secret(self._path("data", key), version=version)
        return response.get("data") or {}

    def capture(self, key: str) -> VersionedSecret:
        metadata = self.read_metadata(key)
        data: dict[int, dict[str, Any]] = {}
        for version in sorted(metadata.versions):
            if metadata.versions[version].is_gone:
                data[version] = {}
                continue
            data[version] = self.read_version(key, version)
        self.ctx.log.debug(
            f"Captured {key}: {len(data)} version(s), current {metadata.current_version}"
        )
        return VersionedSecret(metadata=metadata, data=data)

    def replay(self, key: str, record: VersionedSecret) -> None:
        """
        Recreate record on an empty destination.

        Writes versions 1..current_version in order, writes the metadata right
        after version 1 exists, then destroys every version whose content was
        gone at backup time in a single call.

        The metadata write turns cas_required on, so later writes of such a
        secret carry the check-and-set version Vault expects.
        """
        store = self.ctx.store
        data_path = self._path("data", key)
        for i in range(1, record.metadata.current_version + 1):
            payload: dict[str, Any] = {"data": record.data.get(i) or {}}
            if i > 1 and record.metadata.cas_required:
                payload["options"] = {"cas": i - 1}
            store.write_secret(data_path, payload)
            if i == 1:
                store.write_secret(self._path("metadata", key), record.metadata.settings())

        pending = record.pending_destroy()
        if pending:
            self.ctx.log.debug(f"Destroy {key} versions {pending}")
            store.destroy_versions(self._path("destroy", key), pending)
