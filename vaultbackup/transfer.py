"""
vaultbackup/transfer.py - Single-key transfer between the remote store and local files.

Two file formats, never mixed:
  LogicalTransfer  logical API path <mount>/<key>, file holds base64(JSON(data))
  RawTransfer      raw keyspace logical/<uuid>/<key>, file holds base64(raw value)
                   and is written back verbatim on restore

Both share the same tree traversal; they differ only in addressing, the
listing call and the encoding applied to each value.
"""
from abc import ABC, abstractmethod
from typing import Any

from vaultbackup.codec import decode_bytes, decode_mapping, encode_bytes, encode_json
from vaultbackup.context import EngineContext, join_path
from vaultbackup.errors import EmptyValueError, NotFoundError
from vaultbackup.walker import walk_local, walk_remote


class TreeTransfer(ABC):
    """Walk a remote or local subtree and move each leaf key with backup_key/restore_key."""

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx

    @property
    @abstractmethod
    def prefix(self) -> str:
        """Remote path every key is relative to."""
        ...

    @abstractmethod
    def list_children(self, path: str) -> list[str]:
        ...

    @abstractmethod
    def backup_key(self, key: str) -> bool:
        """Copy one remote key to its local file. Returns False when there was nothing to copy."""
        ...

    @abstractmethod
    def restore_key(self, key: str) -> None:
        """Copy one local file back to its remote key."""
        ...

    def backup_tree(self, start: str = "") -> int:
        keys = walk_remote(self.list_children, self.prefix, start)
        self.ctx.log.debug(f"Backing up {len(keys)} key(s) below {join_path(self.prefix, start)}")
        return sum(1 for key in keys if self.backup_key(key))

    def restore_tree(self, start: str = "") -> int:
        try:
            keys = walk_local(self.ctx.files, start)
        except NotFoundError:
            self.ctx.log.warning(f"Nothing to restore: {start or '.'} does not exist")
            return 0
        for key in keys:
            self.restore_key(key)
        return len(keys)


class LogicalTransfer(TreeTransfer):
    """Keys read and written through the engine's logical API."""

    @property
    def prefix(self) -> str:
        return self.ctx.engine.path

    def list_children(self, path: str) -> list[str]:
        return self.ctx.store.list_children(path)

    def backup_key(self, key: str) -> bool:
        path = self.ctx.remote_path(key)
        self.ctx.log.debug(f"Read {path}")
        try:
            data = self.ctx.store.read_secret(path)
        except EmptyValueError:
            self.ctx.log.debug(f"Skip {path}: no content")
            return False
        self.write_payload(key, data)
        return True

    def restore_key(self, key: str) -> None:
        payload = self.read_payload(key)
        path = self.ctx.remote_path(key)
        self.ctx.log.debug(f"Write {path}")
        self.ctx.store.write_secret(path, payload)

    def write_payload(self, rel: str, data: dict[str, Any]) -> None:
        self.ctx.files.write(rel, encode_json(data).encode("ascii"))

    def read_payload(self, rel: str) -> dict[str, Any]:
        return decode_mapping(self.ctx.files.read(rel), rel)

    def read_optional_payload(self, rel: str) -> dict[str, Any] | None:
        """read_payload, or None when the file was never backed up."""
        try:
            return self.read_payload(rel)
        except NotFoundError:
            return None


class RawTransfer(TreeTransfer):
    """Keys read and written straight from the storage backend (logical/<uuid>/...)."""

    @property
    def prefix(self) -> str:
        return self.ctx.engine.raw_prefix

    def list_children(self, path: str) -> list[str]:
        return self.ctx.store.list_raw_keys(path)

    def backup_key(self, key: str) -> bool:
        path = join_path(self.prefix, key)
        self.ctx.log.debug(f"Read raw {path}")
        try:
            value = self.ctx.store.read_raw_key(path)
        except EmptyValueError:
            self.ctx.log.debug(f"Skip raw {path}: no content")
            return False
        self.ctx.files.write(key, encode_bytes(value.encode("utf-8")).encode("ascii"))
        return True

    def restore_key(self, key: str) -> None:
        content = self.ctx.files.read(key).decode("ascii", errors="replace").strip()
        decode_bytes(content, key)
        path = join_path(self.prefix, key)
        self.ctx.log.debug(f"Write raw {path}")
        self.ctx.store.write_raw_key(path, content, encoding="base64")
