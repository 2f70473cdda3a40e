"""
vaultbackup/errors.py - Error taxonomy shared by the store, walkers and engines.

Only the backend and the local decoders translate foreign exceptions into these;
everything above them lets the errors propagate unchanged to the CLI driver.
"""


class VaultBackupError(Exception):
    """Base class for every error raised by vaultbackup."""


class NotFoundError(VaultBackupError):
    """A remote path is empty or absent, or a local file/directory does not exist."""


class EmptyValueError(VaultBackupError):
    """The remote store holds the key but reports that it has no content."""


class RemoteError(VaultBackupError):
    """Any other failure talking to the remote store."""


class DecodeError(VaultBackupError):
    """A local backup file is not valid base64 or JSON."""


class ValidationError(VaultBackupError):
    """The run was configured inconsistently; raised before any data moves."""
