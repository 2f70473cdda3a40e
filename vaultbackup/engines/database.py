"""
vaultbackup/engines/database.py - Database: connection configs and roles.

Connection configs come from raw storage, where plugin settings live in a
nested connection_details block. The config endpoint expects those settings
at the top level next to the generic fields.
"""
from vaultbackup.engines import Engine
from vaultbackup.engines.mapping import MERGE, remap_fields
from vaultbackup.errors import NotFoundError
from vaultbackup.walker import walk_local

CONFIG_FIELDS = [
    ("allowed_roles", "allowed_roles"),
    ("password_policy", "password_policy"),
    ("plugin_name", "plugin_name"),
    ("plugin_version", "plugin_version"),
    ("root_rotation_statements", "root_rotation_statements"),
    ("verify_connection", "verify_connection"),
    ("connection_details", MERGE),
]


class DatabaseEngine(Engine):

    def backup(self) -> None:
        self.log.info(f"Start backup Database {self.ctx.engine.path}")
        # Connection configs hold credentials the API never returns.
        if self.raw_accessible:
            self.log.debug("Backup config")
            self.raw.backup_tree("config")
        self.log.debug("Backup roles")
        self.logical.backup_tree("roles")

    def restore(self) -> None:
        try:
            paths = walk_local(self.ctx.files, "config")
        except NotFoundError:
            self.log.warning("No config directory found, skip restore Database configuration")
            paths = []

        for rel in paths:
            self.log.debug(f"Restore configuration {rel}")
            payload = remap_fields(self.logical.read_payload(rel), CONFIG_FIELDS)
            self.ctx.store.write_secret(self.ctx.remote_path(rel), payload)

        self.log.debug("Start restore roles")
        self.logical.restore_tree("roles")
