"""
vaultbackup/engines/mapping.py - Declarative field remapping for engine config restores.

Several engines store their configuration in a different shape than the API
that writes it back. Each engine describes the difference as a table of
(dotted source path, destination field) pairs:

    DATABASE_CONFIG_FIELDS = [
        ("plugin_name", "plugin_name"),
        ("connection_details", "*"),    # merge every field of the sub-mapping
    ]
"""
from typing import Any, Sequence

MERGE = "*"

FieldTable = Sequence[tuple[str, str]]

_MISSING = object()


def lookup(source: dict[str, Any], dotted: str) -> Any:
    value: Any = source
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def remap_fields(source: dict[str, Any], table: FieldTable) -> dict[str, Any]:
    """
    Build a write payload from source following table.

    Source paths that are absent are skipped. Later entries win when two
    entries produce the same destination field.
    """
    payload: dict[str, Any] = {}
    for source_path, destination in table:
        value = lookup(source, source_path)
        if value is _MISSING:
            continue
        if destination == MERGE:
            if isinstance(value, dict):
                payload.update(value)
            continue
        payload[destination] = value
    return payload
