"""
vaultbackup/walker.py - Recursive key listing over the remote store and the local backup tree.

walk_remote takes the listing function as a parameter so the same traversal
serves the logical API (SecretStore.list_children) and the raw keyspace
(SecretStore.list_raw_keys).
"""
import logging
from typing import Callable

from vaultbackup.context import join_path
from vaultbackup.errors import NotFoundError
from vaultbackup.local_store import LocalStore

log = logging.getLogger(__name__)


def walk_remote(
    list_children: Callable[[str], list[str]],
    prefix: str,
    start: str = "",
) -> list[str]:
    """
    Return every leaf key below prefix/start, relative to prefix.

    Keys come back in listing order. An empty or absent path yields [] so that
    engines without data under a subpath still back up cleanly; any other
    error propagates.
    """
    path = join_path(prefix, start)
    log.debug(f"List remote path {path}")
    try:
        entries = list_children(path)
    except NotFoundError:
        log.debug(f"Path is empty: {path}")
        return []

    keys: list[str] = []
    for entry in entries:
        if entry.endswith("/"):
            keys.extend(walk_remote(list_children, prefix, join_path(start, entry)))
            continue
        keys.append(join_path(start, entry))
    return keys


def walk_local(files: LocalStore, start: str = "") -> list[str]:
    """
    Return every file below start in a local backup directory, relative to its root.

    Raises:
        NotFoundError: start does not exist; callers may treat this as
            "nothing to restore" for that subtree.
    """
    log.debug(f"List local path {files.root}/{start}")
    keys: list[str] = []
    for name, is_dir in files.list_dir(start):
        child = join_path(start, name)
        if is_dir:
            keys.extend(walk_local(files, child))
            continue
        keys.append(child)
    return keys
