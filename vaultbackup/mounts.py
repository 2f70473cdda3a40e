"""
vaultbackup/mounts.py - Secrets engine mounts and their engine types.

A mount is identified by its path (the logical API root) and its UUID (the raw
keyspace root, logical/<uuid>/...). Both stay fixed for the whole run.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EngineType(str, Enum):
    AD = "ad"
    AWS = "aws"
    DATABASE = "database"
    PKI = "pki"
    SSH = "ssh"
    KV = "kv"
    KV2 = "kv2"
    TOTP = "totp"
    TRANSIT = "transit"


# Mount types that are part of Vault itself or not worth backing up.
SKIPPED_TYPES = {"system", "cubbyhole", "identity", "consul", "generic"}


@dataclass(frozen=True)
class SecretEngine:
    """One mounted secrets engine as reported by sys/mounts."""

    path: str
    type: str
    uuid: str
    options: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def raw_prefix(self) -> str:
        return f"logical/{self.uuid}"

    @property
    def engine_type(self) -> EngineType | None:
        """Map the mount type to an EngineType, or None when unsupported."""
        if self.type == "kv":
            version = str((self.options or {}).get("version", "1"))
            return EngineType.KV2 if version == "2" else EngineType.KV
        try:
            return EngineType(self.type)
        except ValueError:
            return None

    def directory_name(self) -> str:
        """Name of the local directory holding this mount's backup."""
        engine_type = self.engine_type
        suffix = engine_type.value if engine_type else self.type
        return f"{self.path}.{suffix}"


def backup_candidates(engines: list[SecretEngine]) -> dict[str, SecretEngine]:
    """Index mounted engines by path, dropping the internal mount types."""
    return {e.path: e for e in engines if e.type not in SKIPPED_TYPES}
