"""
vaultbackup/engines/ssh.py - SSH: CA key pair and roles.

The CA key pair is only readable from raw storage, where it is kept as two
entries. Restore reassembles them into a single config/ca write.
"""
from vaultbackup.engines import Engine
from vaultbackup.engines.mapping import remap_fields

CA_KEY_FILES = {
    "public": "config/ca_public_key",
    "private": "config/ca_private_key",
}

CA_FIELDS = [
    ("public.key", "public_key"),
    ("private.key", "private_key"),
]


class SSHEngine(Engine):

    def backup(self) -> None:
        self.log.info(f"Start backup SSH {self.ctx.engine.path}")
        if self.raw_accessible:
            self.log.debug("Backup config")
            self.raw.backup_tree("config")
        self.log.debug("Backup roles")
        self.logical.backup_tree("roles")

    def restore(self) -> None:
        keys = {name: self.logical.read_optional_payload(rel) for name, rel in CA_KEY_FILES.items()}
        if None in keys.values():
            self.log.warning("Skip restore SSH config, CA key pair is missing")
        else:
            self.log.info("Start restore SSH config")
            payload = remap_fields(keys, CA_FIELDS)
            payload["generate_signing_key"] = False
            self.ctx.store.write_secret(self.ctx.remote_path("config/ca"), payload)

        self.log.info("Start restore SSH roles")
        self.logical.restore_tree("roles")
