"""
vaultbackup/engines/totp.py - TOTP: generated and imported keys.

The logical API never returns key material, so keys are backed up from raw
storage and restored by importing them through keys/<name>.
"""
import posixpath
from typing import Any

from vaultbackup.engines import Engine
from vaultbackup.engines.mapping import remap_fields
from vaultbackup.errors import NotFoundError
from vaultbackup.walker import walk_local

KEY_FIELDS = [
    ("exported", "exported"),
    ("url", "url"),
    ("key", "key"),
    ("issuer", "issuer"),
    ("account_name", "account_name"),
    ("period", "period"),
    ("algorithm", "algorithm"),
    ("digits", "digits"),
    ("skew", "skew"),
    ("qr_size", "qr_size"),
]

# Storage keeps the hash algorithm as an enum; the API takes its name.
ALGORITHMS = {0: "SHA1", 1: "SHA256", 2: "SHA512"}


def key_payload(entry: dict[str, Any]) -> dict[str, Any]:
    payload = remap_fields(entry, KEY_FIELDS)
    algorithm = payload.get("algorithm")
    if isinstance(algorithm, (int, float)) and int(algorithm) in ALGORITHMS:
        payload["algorithm"] = ALGORITHMS[int(algorithm)]
    return payload


class TOTPEngine(Engine):

    def backup(self) -> None:
        if not self.raw_accessible:
            self.log.warning("TOTP backup is not supported in normal mode, use --raw")
            return
        self.log.info(f"Start backup TOTP {self.ctx.engine.path}")
        self.raw.backup_tree("key")

    def restore(self) -> None:
        self.log.info(f"Start restore TOTP {self.ctx.engine.path}")
        try:
            paths = walk_local(self.ctx.files, "key")
        except NotFoundError:
            self.log.warning("No key directory found, nothing to restore")
            return

        for rel in paths:
            self.log.debug(f"Restore TOTP key {rel}")
            payload = key_payload(self.logical.read_payload(rel))
            self.ctx.store.write_secret(
                self.ctx.remote_path("keys", posixpath.basename(rel)), payload
            )
