"""
vaultbackup/chunks.py - Batch many small keys into numbered JSON files.

Flat keyspaces can hold tens of thousands of keys, so instead of one file per
key the writer packs up to CHUNK_SIZE entries into file<seq>.json:

    {"app/db": "<base64(JSON(value))>", "app/cache": "...", ...}

One pass produces ceil(keys / CHUNK_SIZE) files that together hold every key
exactly once.
"""
import json
import logging
import re
from types import TracebackType
from typing import Any, Iterator

from vaultbackup.codec import decode_json, encode_json, load_json
from vaultbackup.errors import DecodeError
from vaultbackup.local_store import LocalStore

log = logging.getLogger(__name__)

CHUNK_SIZE = 100
CHUNK_FILE = re.compile(r"^file(\d+)\.json$")


def chunk_name(seq: int) -> str:
    return f"file{seq}.json"


class ChunkWriter:
    """Accumulates encoded key/value pairs and flushes them in numbered chunk files."""

    def __init__(self, files: LocalStore, size: int = CHUNK_SIZE) -> None:
        self.files = files
        self.size = size
        self.seq = 0
        self.total = 0
        self._batch: dict[str, str] = {}

    def add(self, key: str, value: Any) -> None:
        self._batch[key] = encode_json(value)
        self.total += 1
        if len(self._batch) >= self.size:
            self.flush()

    def flush(self) -> None:
        """Write the pending batch as the next chunk file. Empty batches write nothing."""
        if not self._batch:
            return
        name = chunk_name(self.seq)
        log.debug(f"Write chunk {name} ({len(self._batch)} entries)")
        self.files.write(name, json.dumps(self._batch).encode("utf-8"))
        self.seq += 1
        self._batch = {}

    def close(self) -> int:
        """Flush the final partial batch and return the number of chunk files written."""
        self.flush()
        return self.seq

    def __enter__(self) -> "ChunkWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()


def chunk_files(files: LocalStore) -> list[str]:
    """Chunk file names in the root of files, ordered by sequence number."""
    numbered = []
    for name, is_dir in files.list_dir():
        match = CHUNK_FILE.match(name)
        if match and not is_dir:
            numbered.append((int(match.group(1)), name))
    return [name for _, name in sorted(numbered)]


def read_chunks(files: LocalStore) -> Iterator[tuple[str, Any]]:
    """
    Yield (key, value) for every entry of every chunk file.

    Raises:
        NotFoundError: the backup directory does not exist.
        DecodeError: a chunk file or one of its entries is malformed.
    """
    for name in chunk_files(files):
        entries = load_json(files.read(name), name)
        if not isinstance(entries, dict):
            raise DecodeError(f"{name}: expected a JSON object")
        log.debug(f"Read chunk {name} ({len(entries)} entries)")
        for key, blob in entries.items():
            yield key, decode_json(blob, f"{name}:{key}")
