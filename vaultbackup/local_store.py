"""
vaultbackup/local_store.py - Local file store addressed by relative key path.

All paths handed to LocalStore are relative to its root and use "/" separators,
the same key paths the remote store uses below a mount.
"""
import logging
from pathlib import Path

from vaultbackup.errors import NotFoundError

log = logging.getLogger(__name__)


class LocalStore:
    """Reads and writes backup files below a single root directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"LocalStore({str(self.root)!r})"

    def _resolve(self, rel: str) -> Path:
        rel = rel.strip("/")
        return self.root / rel if rel else self.root

    def exists(self, rel: str) -> bool:
        return self._resolve(rel).exists()

    def is_dir(self, rel: str) -> bool:
        return self._resolve(rel).is_dir()

    def read(self, rel: str) -> bytes:
        path = self._resolve(rel)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"Local file not found: {path}") from e

    def write(self, rel: str, content: bytes) -> Path:
        """Write content to rel, creating parent directories as needed."""
        path = self._resolve(rel)
        path.parent.mkdir(parents=True, exist_ok=True)
        log.debug(f"Write local file {path}")
        path.write_bytes(content)
        return path

    def make_dir(self, rel: str = "") -> Path:
        path = self._resolve(rel)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def list_dir(self, rel: str = "") -> list[tuple[str, bool]]:
        """
        List the immediate children of a directory.

        Returns:
            (name, is_directory) pairs sorted by name.

        Raises:
            NotFoundError: the directory does not exist.
        """
        path = self._resolve(rel)
        if not path.is_dir():
            raise NotFoundError(f"Local directory not found: {path}")
        return [(child.name, child.is_dir()) for child in sorted(path.iterdir())]
