"""
vaultbackup - Backup and restore HashiCorp Vault secrets engines to local files.

Each mounted engine is written to <dest>/<mount>.<engine type>/ either as one
base64 file per key or as numbered file<seq>.json chunks. KV v2 secrets keep
their full version history, including destroyed and deleted versions.
"""

__version__ = "0.3.0"
