"""
vaultbackup/context.py - Run options and the per-engine handle passed to every operation.

There is no module-level configuration: the CLI builds an Options object, the
engine factory narrows it to one mount, and every walker, transfer unit and
reconstructor receives the resulting EngineContext explicitly.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, MutableMapping

from vaultbackup.backends import SecretStore
from vaultbackup.errors import ValidationError
from vaultbackup.local_store import LocalStore
from vaultbackup.mounts import EngineType, SecretEngine

RAW_SUFFIX = "-r"


@dataclass
class Options:
    """
    Options for one backup or restore run.

    backup_path is the directory all engines are written below; the factory
    narrows it to backup/<mount>.<type>/. restore_path is the engine directory
    itself (backup/<mount>.<type>/).
    """

    backup_path: str | None = None
    restore_path: str | None = None
    raw_accessible: bool = False
    compress: bool = False

    @property
    def is_backup(self) -> bool:
        return bool(self.backup_path)


class EngineLogAdapter(logging.LoggerAdapter):
    """Prefix every record with the engine it belongs to."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['engine']}] {msg}", kwargs


def join_path(*parts: str) -> str:
    """Join key path fragments with "/", dropping empty parts and stray slashes."""
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def restore_type_of(restore_path: str | Path) -> str:
    """Return the engine type encoded in a backup directory name (<mount>.<type>[-r])."""
    name = Path(restore_path).name
    if "." not in name:
        return ""
    suffix = name.rpartition(".")[2]
    if suffix.endswith(RAW_SUFFIX):
        suffix = suffix[: -len(RAW_SUFFIX)]
    return suffix


def validate_restore_path(restore_path: str | Path, engine_type: EngineType) -> None:
    """
    Refuse to restore a backup directory into an engine of another type.

    Raises:
        ValidationError: the directory suffix does not name engine_type.
    """
    found = restore_type_of(restore_path)
    if found != engine_type.value:
        raise ValidationError(
            f"Restore path {restore_path} holds a '{found or '?'}' backup, "
            f"engine type is '{engine_type.value}'"
        )


class EngineContext:
    """Everything one engine strategy needs: store, mount, options, files and logger."""

    def __init__(
        self,
        store: SecretStore,
        engine: SecretEngine,
        options: Options,
        engine_type: EngineType,
        log: logging.LoggerAdapter | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.options = options
        self.engine_type = engine_type
        root = options.backup_path if options.is_backup else options.restore_path
        if not root:
            raise ValidationError("Either a backup path or a restore path is required")
        self.files = LocalStore(root)
        self.log = log or EngineLogAdapter(
            logging.getLogger("vaultbackup.engines"),
            {"engine": f"{engine.path}.{engine_type.value}"},
        )

    def remote_path(self, *parts: str) -> str:
        """Logical API path below this mount."""
        return join_path(self.engine.path, *parts)
