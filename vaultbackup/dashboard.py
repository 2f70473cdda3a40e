"""
vaultbackup/dashboard.py - Rich table of mounted secrets engines and how each is backed up.

Example output:
    ┌──────────────┬──────────┬─────────────┬─────────────────┬───────────┐
    │ Mount        │ Type     │ Backup as   │ Directory       │ Raw       │
    ├──────────────┼──────────┼─────────────┼─────────────────┼───────────┤
    │ secret       │ kv       │ kv2         │ secret.kv2      │ no        │
    │ pki          │ pki      │ pki         │ pki.pki         │ required  │
    └──────────────┴──────────┴─────────────┴─────────────────┴───────────┘
"""
from rich.console import Console
from rich.table import Table
from rich.text import Text

from vaultbackup.mounts import SKIPPED_TYPES, EngineType, SecretEngine

# Engines that back up nothing without --raw.
RAW_REQUIRED = {EngineType.PKI, EngineType.TOTP}
# Engines whose config is only captured with --raw.
RAW_OPTIONAL = {EngineType.SSH, EngineType.AD, EngineType.DATABASE, EngineType.AWS}


def raw_indicator(engine_type: EngineType | None) -> Text:
    if engine_type in RAW_REQUIRED:
        return Text("required", style="bold yellow")
    if engine_type in RAW_OPTIONAL:
        return Text("config only", style="yellow")
    return Text("no", style="dim")


def build_table(engines: list[SecretEngine]) -> Table:
    """Build a Rich table from the mounted engines."""
    table = Table(
        title="Vault secrets engines",
        show_header=True,
        header_style="bold cyan",
        border_style="blue",
    )
    table.add_column("Mount", min_width=12)
    table.add_column("Type", justify="center")
    table.add_column("Backup as", justify="center")
    table.add_column("Directory", style="dim")
    table.add_column("Raw", justify="center")

    for engine in sorted(engines, key=lambda e: e.path):
        if engine.type in SKIPPED_TYPES:
            continue
        engine_type = engine.engine_type
        if engine_type is None:
            table.add_row(engine.path, engine.type, Text("unsupported", style="red"), "-", "-")
            continue
        table.add_row(
            engine.path,
            engine.type,
            engine_type.value,
            engine.directory_name(),
            raw_indicator(engine_type),
        )
    return table


def print_engines(engines: list[SecretEngine], console: Console | None = None) -> None:
    (console or Console()).print(build_table(engines))
