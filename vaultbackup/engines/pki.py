"""
vaultbackup/engines/pki.py - PKI: the whole raw keyspace of the mount.

Issued certificates, CA chains and CRL state are not reachable through the
logical API, so PKI is only backed up with raw storage access (--raw).
"""
from vaultbackup.engines import Engine


class PKIEngine(Engine):

    def backup(self) -> None:
        if not self.raw_accessible:
            self.log.warning(
                f"PKI backup needs raw storage access (--raw), skipping; "
                f"{self.ctx.files.root} stays empty"
            )
            return
        self.log.info(f"Start backup PKI {self.ctx.engine.path}")
        count = self.raw.backup_tree()
        self.log.info(f"Backed up {count} raw key(s)")

    def restore(self) -> None:
        if not self.raw_accessible:
            self.log.warning("PKI restore needs raw storage access (--raw), skipping")
            return
        self.log.info(f"Start restore PKI {self.ctx.engine.path}")
        count = self.raw.restore_tree()
        self.log.info(f"Restored {count} raw key(s)")
