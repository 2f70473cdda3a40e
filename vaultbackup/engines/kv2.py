"""
vaultbackup/engines/kv2.py - KV version 2: every secret with its complete version history.

Keys are discovered below <mount>/metadata/, each secret is captured as a
VersionedSecret and written to chunk files. Restore replays each record on
the destination one version at a time (see vaultbackup.versioned).
"""
from vaultbackup.chunks import ChunkWriter, read_chunks
from vaultbackup.context import EngineContext
from vaultbackup.engines import Engine
from vaultbackup.versioned import VersionedSecret, VersionedSecretReconstructor
from vaultbackup.walker import walk_remote


class KV2Engine(Engine):

    def __init__(self, ctx: EngineContext) -> None:
        super().__init__(ctx)
        self.versions = VersionedSecretReconstructor(ctx)

    def backup(self) -> None:
        self.log.info(f"Start backup KV v2 {self.ctx.engine.path}")
        keys = walk_remote(self.ctx.store.list_children, self.ctx.remote_path("metadata"))
        with ChunkWriter(self.ctx.files) as writer:
            for key in keys:
                self.log.debug(f"Backup secret {key}")
                writer.add(key, self.versions.capture(key).to_dict())
        self.log.info(f"Backed up {writer.total} secret(s) into {writer.seq} chunk file(s)")

    def restore(self) -> None:
        self.log.info(f"Start restore KV v2 {self.ctx.engine.path}")
        count = 0
        for key, raw in read_chunks(self.ctx.files):
            record = VersionedSecret.from_dict(raw, key)
            self.log.debug(f"Restore secret {key} ({record.metadata.current_version} version(s))")
            self.versions.replay(key, record)
            count += 1
        self.log.info(f"Restored {count} secret(s)")
