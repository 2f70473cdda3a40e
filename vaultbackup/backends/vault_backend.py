"""
vaultbackup/backends/vault_backend.py - HashiCorp Vault backend using hvac.

Authentication: token (VAULT_TOKEN) or AppRole (VAULT_ROLE_ID + VAULT_SECRET_ID)
Namespace: VAULT_NAMESPACE or the --namespace flag
TLS: VAULT_CACERT, VAULT_SKIP_VERIFY

Paths are passed through untouched, so KV v2 callers address data/, metadata/
and destroy/ endpoints themselves. Raw keyspace access needs a root token and
raw_storage_endpoint enabled on the server.
"""
import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

import hvac
import requests
from hvac import exceptions as hvac_exceptions

from vaultbackup.backends import SecretStore
from vaultbackup.errors import EmptyValueError, NotFoundError, RemoteError
from vaultbackup.mounts import SecretEngine

log = logging.getLogger(__name__)

# Vault answers a raw read of a never-written key with this storage error.
EMPTY_VALUE_MARKER = "being decompressed is empty"


@contextmanager
def translate_errors(path: str) -> Iterator[None]:
    """Map hvac and transport exceptions onto the vaultbackup taxonomy."""
    try:
        yield
    except hvac_exceptions.InvalidPath as e:
        raise NotFoundError(f"{path}: not found") from e
    except hvac_exceptions.VaultError as e:
        if EMPTY_VALUE_MARKER in str(e):
            raise EmptyValueError(f"{path}: value is empty") from e
        raise RemoteError(f"{path}: {e}") from e
    except requests.RequestException as e:
        raise RemoteError(f"{path}: {e}") from e


class VaultBackend(SecretStore):
    """
    Vault secrets backend.

    Reads connection settings from the environment:
      VAULT_ADDR, VAULT_TOKEN or VAULT_ROLE_ID/VAULT_SECRET_ID, VAULT_NAMESPACE
    """

    def __init__(
        self,
        namespace: str | None = None,
        client: "hvac.Client | None" = None,
    ) -> None:
        self.vault_addr = os.environ.get("VAULT_ADDR", "http://localhost:8200")
        self.token = os.environ.get("VAULT_TOKEN")
        self.role_id = os.environ.get("VAULT_ROLE_ID")
        self.secret_id = os.environ.get("VAULT_SECRET_ID")
        self.namespace = namespace or os.environ.get("VAULT_NAMESPACE")
        self._client = client

    def _verify(self) -> bool | str:
        if os.environ.get("VAULT_SKIP_VERIFY", "").lower() in ("1", "true", "yes"):
            return False
        return os.environ.get("VAULT_CACERT") or True

    def _get_client(self) -> "hvac.Client":
        """Return an authenticated Vault client, authenticating on first use."""
        if self._client is None:
            client = hvac.Client(
                url=self.vault_addr,
                namespace=self.namespace,
                verify=self._verify(),
                session=requests.Session(),
            )
            if self.role_id and self.secret_id:
                with translate_errors("auth/approle/login"):
                    client.auth.approle.login(
                        role_id=self.role_id,
                        secret_id=self.secret_id,
                    )
            elif self.token:
                client.token = self.token
            else:
                raise RemoteError(
                    "No Vault credentials: set VAULT_TOKEN or VAULT_ROLE_ID/VAULT_SECRET_ID"
                )
            self._client = client
            log.debug(f"Connected to {self.vault_addr} (namespace: {self.namespace or '-'})")
        return self._client

    def list_children(self, path: str) -> list[str]:
        client = self._get_client()
        with translate_errors(path):
            response = client.list(path)
        keys = (response or {}).get("data", {}).get("keys")
        if not keys:
            raise NotFoundError(f"{path}: nothing to list")
        return list(keys)

    def read_secret(self, path: str, version: int | None = None) -> dict[str, Any]:
        client = self._get_client()
        with translate_errors(path):
            if version is None:
                response = client.read(path)
            else:
                response = client.adapter.get(f"/v1/{path}", params={"version": version})
        if response is None:
            raise NotFoundError(f"{path}: not found")
        return response.get("data") or {}

    def write_secret(self, path: str, data: dict[str, Any]) -> None:
        client = self._get_client()
        with translate_errors(path):
            client.write_data(path, data=data)

    def destroy_versions(self, path: str, versions: list[int]) -> None:
        self.write_secret(path, {"versions": versions})

    # hvac has no sys/raw API category; the generic list/read calls reach it.
    def list_raw_keys(self, prefix: str) -> list[str]:
        return self.list_children(f"sys/raw/{prefix}")

    def read_raw_key(self, path: str) -> str:
        client = self._get_client()
        raw_path = f"sys/raw/{path}"
        with translate_errors(raw_path):
            response = client.read(raw_path)
        if response is None:
            raise NotFoundError(f"{raw_path}: not found")
        # Older servers return the value at the top level instead of under "data".
        value = (response.get("data") or response).get("value")
        if value is None:
            raise EmptyValueError(f"sys/raw/{path}: value is empty")
        return value

    def write_raw_key(self, path: str, value: str, encoding: str = "base64") -> None:
        self.write_secret(f"sys/raw/{path}", {"value": value, "encoding": encoding})

    def list_mounted_engines(self) -> list[SecretEngine]:
        client = self._get_client()
        with translate_errors("sys/mounts"):
            response = client.sys.list_mounted_secrets_engines()
        mounts = response.get("data") or response
        engines = []
        for key, value in mounts.items():
            if not isinstance(value, dict) or "type" not in value:
                continue
            engines.append(SecretEngine(
                path=key.rstrip("/"),
                type=value["type"],
                uuid=value.get("uuid", ""),
                options=value.get("options") or {},
            ))
        return engines
