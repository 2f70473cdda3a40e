"""
vaultbackup/engines/__init__.py - Abstract base class for engine strategies and their factory.

Every engine type implements backup() and restore(). The shared machinery
(logical and raw transfer units, walkers, chunk writer) is handed in through
the EngineContext rather than inherited, so each strategy only says which
subtrees it moves and how config fields are remapped.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path

from vaultbackup.backends import SecretStore
from vaultbackup.context import EngineContext, Options, validate_restore_path
from vaultbackup.errors import ValidationError
from vaultbackup.mounts import EngineType, SecretEngine
from vaultbackup.transfer import LogicalTransfer, RawTransfer

log = logging.getLogger(__name__)

# These engines can be fully rebuilt through their logical API.
LOGICAL_ONLY = {EngineType.KV2, EngineType.TRANSIT}


class Engine(ABC):
    """Backup/restore strategy for one mounted secrets engine."""

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx
        self.logical = LogicalTransfer(ctx)
        self.raw = RawTransfer(ctx)

    @property
    def log(self) -> logging.LoggerAdapter:
        return self.ctx.log

    @property
    def raw_accessible(self) -> bool:
        return self.ctx.options.raw_accessible

    @abstractmethod
    def backup(self) -> None:
        """Copy the engine's state to ctx.files."""
        ...

    @abstractmethod
    def restore(self) -> None:
        """Write the state held in ctx.files back to the engine."""
        ...


def _engine_class(engine_type: EngineType) -> type[Engine]:
    if engine_type == EngineType.KV:
        from vaultbackup.engines.kv import KVEngine
        return KVEngine
    elif engine_type == EngineType.KV2:
        from vaultbackup.engines.kv2 import KV2Engine
        return KV2Engine
    elif engine_type == EngineType.PKI:
        from vaultbackup.engines.pki import PKIEngine
        return PKIEngine
    elif engine_type == EngineType.SSH:
        from vaultbackup.engines.ssh import SSHEngine
        return SSHEngine
    elif engine_type == EngineType.AD:
        from vaultbackup.engines.ad import ADEngine
        return ADEngine
    elif engine_type == EngineType.DATABASE:
        from vaultbackup.engines.database import DatabaseEngine
        return DatabaseEngine
    elif engine_type == EngineType.AWS:
        from vaultbackup.engines.aws import AWSEngine
        return AWSEngine
    elif engine_type == EngineType.TOTP:
        from vaultbackup.engines.totp import TOTPEngine
        return TOTPEngine
    elif engine_type == EngineType.TRANSIT:
        from vaultbackup.engines.transit import TransitEngine
        return TransitEngine
    raise ValidationError(f"Unknown engine type: {engine_type}")


def new_secret_engine(
    store: SecretStore,
    engine: SecretEngine,
    options: Options,
    engine_type: EngineType | None = None,
) -> Engine:
    """
    Build the strategy for one mount.

    Backup mode narrows options.backup_path to <backup_path>/<mount>.<type>
    and creates it. Restore mode checks that options.restore_path holds a
    backup of the same engine type before anything is read.

    Raises:
        ValidationError: unsupported engine type or mismatching restore path.
    """
    engine_type = engine_type or engine.engine_type
    if engine_type is None:
        raise ValidationError(f"Engine '{engine.path}' has unsupported type '{engine.type}'")

    if options.is_backup:
        target = Path(options.backup_path) / f"{engine.path}.{engine_type.value}"
        target.mkdir(parents=True, exist_ok=True)
        options = replace(options, backup_path=str(target))
        if options.compress:
            log.warning("Compression is not implemented; writing an uncompressed backup")
    elif options.restore_path:
        validate_restore_path(options.restore_path, engine_type)
    else:
        raise ValidationError("Either a backup path or a restore path is required")

    if engine_type in LOGICAL_ONLY and options.raw_accessible:
        options = replace(options, raw_accessible=False)

    ctx = EngineContext(store, engine, options, engine_type)
    return _engine_class(engine_type)(ctx)
