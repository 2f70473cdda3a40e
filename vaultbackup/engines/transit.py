"""
vaultbackup/engines/transit.py - Transit: encryption keys via the backup/restore endpoints.

Backing up a key permanently marks it exportable with plaintext backups
allowed; Vault offers no other way to get the key material out.
"""
import posixpath

from vaultbackup.engines import Engine
from vaultbackup.errors import NotFoundError
from vaultbackup.walker import walk_local, walk_remote

EXPORT_SETTINGS = {
    "allow_plaintext_backup": True,
    "exportable": True,
}


class TransitEngine(Engine):

    def backup(self) -> None:
        self.log.info(f"Start backup Transit {self.ctx.engine.path}")
        store = self.ctx.store
        for rel in walk_remote(store.list_children, self.ctx.engine.path, "keys"):
            name = posixpath.basename(rel)
            self.log.debug(f"Enable export for key {name}")
            store.write_secret(self.ctx.remote_path(rel, "config"), EXPORT_SETTINGS)

            data = store.read_secret(self.ctx.remote_path("backup", name))
            self.logical.write_payload(rel, data)

    def restore(self) -> None:
        self.log.info(f"Start restore Transit {self.ctx.engine.path}")
        try:
            paths = walk_local(self.ctx.files, "keys")
        except NotFoundError:
            self.log.warning("No keys directory found, nothing to restore")
            return

        for rel in paths:
            payload = self.logical.read_payload(rel)
            path = self.ctx.remote_path("restore", posixpath.basename(rel))
            self.log.debug(f"Write {path}")
            self.ctx.store.write_secret(path, payload)
