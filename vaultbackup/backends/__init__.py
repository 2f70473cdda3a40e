"""
vaultbackup/backends/__init__.py - Abstract base class for remote secret stores.

VaultBackend implements this interface against a live Vault server; the test
suite implements it in memory. Engines and walkers only ever talk to this
interface, never to hvac directly.
"""
from abc import ABC, abstractmethod
from typing import Any

from vaultbackup.mounts import SecretEngine


class SecretStore(ABC):
    """Abstract interface for the remote secrets service."""

    @abstractmethod
    def list_children(self, path: str) -> list[str]:
        """
        List the immediate children of a logical path.

        Args:
            path: Logical path (e.g., "secret/metadata/app")

        Returns:
            Child names; directories end with "/".

        Raises:
            NotFoundError: the path is empty or does not exist.
        """
        ...

    @abstractmethod
    def read_secret(self, path: str, version: int | None = None) -> dict[str, Any]:
        """
        Read the data stored at a logical path.

        Args:
            path: Logical path (e.g., "ssh/roles/admin" or "secret/data/app/db")
            version: Version number for version-qualified reads (KV v2 data paths)

        Returns:
            The "data" block of the response.
        """
        ...

    @abstractmethod
    def write_secret(self, path: str, data: dict[str, Any]) -> None:
        """
        Write data to a logical path.

        On a KV v2 data path every call creates a new version.
        """
        ...

    @abstractmethod
    def destroy_versions(self, path: str, versions: list[int]) -> None:
        """
        Permanently destroy versions of a KV v2 secret.

        Args:
            path: Destroy endpoint of the secret (e.g., "secret/destroy/app/db")
            versions: Version numbers to destroy
        """
        ...

    @abstractmethod
    def list_raw_keys(self, prefix: str) -> list[str]:
        """List storage keys below a raw keyspace prefix (logical/<uuid>/...)."""
        ...

    @abstractmethod
    def read_raw_key(self, path: str) -> str:
        """
        Read a value straight from the storage backend.

        Raises:
            EmptyValueError: the key exists but holds no content.
        """
        ...

    @abstractmethod
    def write_raw_key(self, path: str, value: str, encoding: str = "base64") -> None:
        """Write a value straight to the storage backend."""
        ...

    @abstractmethod
    def list_mounted_engines(self) -> list[SecretEngine]:
        """Return every mounted secrets engine."""
        ...
