"""
vaultbackup/engines/ad.py - Active Directory: config and roles.

Raw storage keeps the config as two blocks (password policy and directory
connection); the config endpoint takes them as one flat mapping.
"""
from vaultbackup.engines import Engine
from vaultbackup.engines.mapping import MERGE, remap_fields

CONFIG_FIELDS = [
    ("PasswordConf", MERGE),
    ("ADConf", MERGE),
]


class ADEngine(Engine):

    def backup(self) -> None:
        self.log.info(f"Start backup AD {self.ctx.engine.path}")
        if self.raw_accessible:
            self.log.debug("Backup config")
            self.raw.backup_key("config")
        self.log.debug("Backup roles")
        self.logical.backup_tree("roles")

    def restore(self) -> None:
        config = self.logical.read_optional_payload("config")
        if config is None:
            self.log.warning("No config file found, skip restore AD configuration")
        else:
            self.log.info("Restore AD configuration")
            self.ctx.store.write_secret(
                self.ctx.remote_path("config"), remap_fields(config, CONFIG_FIELDS)
            )

        self.log.debug("Start restore roles")
        self.logical.restore_tree("roles")
