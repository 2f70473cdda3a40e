"""
vaultbackup/engines/kv.py - KV version 1: a flat keyspace stored in chunk files.
"""
from vaultbackup.chunks import ChunkWriter, read_chunks
from vaultbackup.engines import Engine
from vaultbackup.errors import DecodeError, EmptyValueError
from vaultbackup.walker import walk_remote


class KVEngine(Engine):

    def backup(self) -> None:
        self.log.info(f"Start backup KV {self.ctx.engine.path}")
        store = self.ctx.store
        keys = walk_remote(store.list_children, self.ctx.engine.path)
        with ChunkWriter(self.ctx.files) as writer:
            for key in keys:
                try:
                    data = store.read_secret(self.ctx.remote_path(key))
                except EmptyValueError:
                    self.log.debug(f"Skip {key}: no content")
                    continue
                writer.add(key, data)
        self.log.info(f"Backed up {writer.total} key(s) into {writer.seq} chunk file(s)")

    def restore(self) -> None:
        self.log.info(f"Start restore KV {self.ctx.engine.path}")
        count = 0
        for key, value in read_chunks(self.ctx.files):
            if not isinstance(value, dict):
                raise DecodeError(f"{key}: expected a JSON object")
            self.ctx.store.write_secret(self.ctx.remote_path(key), value)
            count += 1
        self.log.info(f"Restored {count} key(s)")
