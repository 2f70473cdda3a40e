"""
Shared pytest fixtures for the vaultbackup test suite.

FakeVault implements SecretStore in memory with enough Vault behaviour to
exercise the engines:
  - plain logical paths (KV v1, roles, config endpoints)
  - KV v2 mounts with data/, metadata/ and destroy/ endpoints, sequential
    version numbers and destroyed/deleted versions
  - the raw keyspace (sys/raw)
Every call is appended to FakeVault.calls so tests can assert on ordering.
"""
import base64
import copy
from pathlib import Path
from typing import Any

import pytest

from vaultbackup.backends import SecretStore
from vaultbackup.context import EngineContext, Options
from vaultbackup.errors import EmptyValueError, NotFoundError, RemoteError
from vaultbackup.mounts import EngineType, SecretEngine


class FakeVersion:
    def __init__(self, data: dict[str, Any]) -> None:
        self.data: dict[str, Any] | None = data
        self.destroyed = False
        self.deletion_time = ""


class FakeSecret:
    def __init__(self) -> None:
        self.versions: list[FakeVersion] = []
        self.settings: dict[str, Any] = {
            "max_versions": 0,
            "cas_required": False,
            "delete_version_after": "0s",
            "custom_metadata": None,
        }

    @property
    def current_version(self) -> int:
        return len(self.versions)

    def version(self, number: int) -> FakeVersion:
        return self.versions[number - 1]


def children(keys: list[str], prefix: str) -> list[str]:
    prefix = prefix.strip("/")
    entries: list[str] = []
    for key in keys:
        if prefix:
            if not key.startswith(prefix + "/"):
                continue
            rest = key[len(prefix) + 1:]
        else:
            rest = key
        head, sep, _ = rest.partition("/")
        entry = head + "/" if sep else head
        if entry not in entries:
            entries.append(entry)
    if not entries:
        raise NotFoundError(f"{prefix}: nothing to list")
    return entries


class FakeVault(SecretStore):

    def __init__(self, kv2_mounts: tuple[str, ...] = ("secret",), mounts: list[SecretEngine] | None = None) -> None:
        self.kv2_mounts = set(kv2_mounts)
        self.secrets: dict[str, dict[str, Any]] = {}
        self.kv2: dict[str, FakeSecret] = {}
        self.raw: dict[str, str] = {}
        self.empty: set[str] = set()
        self.mounts = list(mounts or [])
        self.calls: list[tuple] = []

    # -- helpers for tests ---------------------------------------------------

    def seed_versions(
        self,
        mount: str,
        key: str,
        payloads: list[dict[str, Any]],
        destroyed: tuple[int, ...] = (),
        deleted: tuple[int, ...] = (),
        **settings: Any,
    ) -> FakeSecret:
        secret = self.kv2.setdefault(f"{mount}/{key}", FakeSecret())
        secret.versions = [FakeVersion(copy.deepcopy(p)) for p in payloads]
        for number in destroyed:
            secret.version(number).destroyed = True
            secret.version(number).data = None
        for number in deleted:
            secret.version(number).deletion_time = "2024-05-01T10:00:00Z"
        secret.settings.update(settings)
        return secret

    def calls_of(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]

    def _route(self, path: str) -> tuple[str, str, str] | None:
        for mount in self.kv2_mounts:
            for endpoint in ("data", "metadata", "destroy"):
                prefix = f"{mount}/{endpoint}"
                if path == prefix or path.startswith(prefix + "/"):
                    return mount, endpoint, path[len(prefix):].strip("/")
        return None

    def _secret(self, mount: str, key: str) -> FakeSecret:
        try:
            return self.kv2[f"{mount}/{key}"]
        except KeyError:
            raise NotFoundError(f"{mount}/{key}: not found") from None

    # -- SecretStore ---------------------------------------------------------

    def list_children(self, path: str) -> list[str]:
        self.calls.append(("list", path))
        route = self._route(path)
        if route is not None:
            mount, _, rest = route
            keys = [k[len(mount) + 1:] for k in self.kv2 if k.startswith(mount + "/")]
            return children(keys, rest)
        return children(list(self.secrets), path)

    def read_secret(self, path: str, version: int | None = None) -> dict[str, Any]:
        self.calls.append(("read", path, version))
        if path in self.empty:
            raise EmptyValueError(path)
        route = self._route(path)
        if route is None:
            if path not in self.secrets:
                raise NotFoundError(path)
            return copy.deepcopy(self.secrets[path])

        mount, endpoint, key = route
        secret = self._secret(mount, key)
        if endpoint == "metadata":
            return {
                **copy.deepcopy(secret.settings),
                "current_version": secret.current_version,
                "versions": {
                    str(i): {
                        "created_time": "2024-01-01T00:00:00Z",
                        "destroyed": v.destroyed,
                        "deletion_time": v.deletion_time,
                    }
                    for i, v in enumerate(secret.versions, start=1)
                },
            }
        number = version or secret.current_version
        if not 1 <= number <= secret.current_version:
            raise NotFoundError(f"{path}: no version {number}")
        entry = secret.version(number)
        if entry.destroyed or entry.deletion_time:
            raise NotFoundError(f"{path}: version {number} is gone")
        return {"data": copy.deepcopy(entry.data), "metadata": {"version": number}}

    def write_secret(self, path: str, data: dict[str, Any]) -> None:
        self.calls.append(("write", path, copy.deepcopy(data)))
        route = self._route(path)
        if route is None:
            self.secrets[path] = copy.deepcopy(data)
            return

        mount, endpoint, key = route
        if endpoint == "data":
            secret = self.kv2.setdefault(f"{mount}/{key}", FakeSecret())
            if secret.settings["cas_required"]:
                cas = (data.get("options") or {}).get("cas")
                if cas != secret.current_version:
                    raise RemoteError(f"{path}: check-and-set parameter required")
            secret.versions.append(FakeVersion(copy.deepcopy(data.get("data") or {})))
        elif endpoint == "metadata":
            secret = self.kv2.get(f"{mount}/{key}")
            if secret is None or not secret.versions:
                raise RemoteError(f"{path}: metadata written before any version exists")
            secret.settings.update(copy.deepcopy(data))
        else:
            raise RemoteError(f"{path}: use destroy_versions")

    def destroy_versions(self, path: str, versions: list[int]) -> None:
        self.calls.append(("destroy", path, list(versions)))
        route = self._route(path)
        if route is None or route[1] != "destroy":
            raise RemoteError(f"{path}: not a destroy endpoint")
        secret = self._secret(route[0], route[2])
        for number in versions:
            entry = secret.version(number)
            entry.destroyed = True
            entry.data = None

    def list_raw_keys(self, prefix: str) -> list[str]:
        self.calls.append(("list_raw", prefix))
        return children(list(self.raw), prefix)

    def read_raw_key(self, path: str) -> str:
        self.calls.append(("read_raw", path))
        if path in self.empty:
            raise EmptyValueError(path)
        if path not in self.raw:
            raise NotFoundError(path)
        return self.raw[path]

    def write_raw_key(self, path: str, value: str, encoding: str = "base64") -> None:
        self.calls.append(("write_raw", path, value, encoding))
        if encoding == "base64":
            value = base64.b64decode(value).decode("utf-8")
        self.raw[path] = value

    def list_mounted_engines(self) -> list[SecretEngine]:
        return list(self.mounts)


KV2_MOUNT = SecretEngine("secret", "kv", "uuid-kv2", {"version": "2"})
KV_MOUNT = SecretEngine("kv", "kv", "uuid-kv1", {"version": "1"})


@pytest.fixture
def vault() -> FakeVault:
    return FakeVault(mounts=[KV2_MOUNT, KV_MOUNT])


@pytest.fixture
def make_ctx(tmp_path: Path):
    """Build an EngineContext for a mount, in backup or restore mode."""

    def factory(
        store: SecretStore,
        engine: SecretEngine = KV2_MOUNT,
        engine_type: EngineType | None = None,
        restore: bool = False,
        raw: bool = False,
        directory: Path | None = None,
    ) -> EngineContext:
        engine_type = engine_type or engine.engine_type
        directory = directory or tmp_path / f"{engine.path}.{engine_type.value}"
        if restore:
            options = Options(restore_path=str(directory), raw_accessible=raw)
        else:
            options = Options(backup_path=str(directory), raw_accessible=raw)
        return EngineContext(store, engine, options, engine_type)

    return factory
