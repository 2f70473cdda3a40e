"""
vaultbackup/engines/aws.py - AWS: root credentials, lease settings and roles.
"""
from vaultbackup.engines import Engine

# Config entries written back as-is, in this order.
CONFIG_FILES = ("config/root", "config/lease")


class AWSEngine(Engine):

    def backup(self) -> None:
        self.log.info(f"Start backup AWS {self.ctx.engine.path}")
        if self.raw_accessible:
            self.log.debug("Backup configuration")
            self.raw.backup_tree("config")

        self.log.debug("Backup lease time")
        self.logical.backup_key("config/lease")

        self.log.debug("Backup roles")
        self.logical.backup_tree("roles")

    def restore(self) -> None:
        for rel in CONFIG_FILES:
            payload = self.logical.read_optional_payload(rel)
            if payload is None:
                self.log.warning(f"{rel} not found, skip restore")
                continue
            self.log.debug(f"Restore {rel}")
            self.ctx.store.write_secret(self.ctx.remote_path(rel), payload)

        self.log.debug("Start restore roles")
        self.logical.restore_tree("roles")
