#!/usr/bin/env python3
"""
vaultbackup/cli.py - Command line driver for backup and restore runs.

Usage:
    vault-backup backup                                   # Every mounted engine into ./backup
    vault-backup backup -p secret -d /srv/backup          # One engine
    vault-backup backup --raw                             # Include raw-only state (needs root token)
    vault-backup restore -p secret -s backup/secret.kv2   # One engine from its directory
    vault-backup restore -s backup                        # Every mounted engine that has a backup
    vault-backup list                                     # Show mounted engines

Environment variables:
    VAULT_ADDR (default: http://localhost:8200)
    VAULT_TOKEN, or VAULT_ROLE_ID + VAULT_SECRET_ID for AppRole
    VAULT_NAMESPACE, VAULT_CACERT, VAULT_SKIP_VERIFY

Engines are processed one at a time and the first error stops the run with
exit status 1. Do not point two runs at the same backup directory or mount.
"""
import argparse
import logging
import sys
from pathlib import Path

from vaultbackup import __version__
from vaultbackup.backends import SecretStore
from vaultbackup.context import RAW_SUFFIX, Options
from vaultbackup.engines import new_secret_engine
from vaultbackup.errors import ValidationError, VaultBackupError
from vaultbackup.mounts import SecretEngine, backup_candidates

log = logging.getLogger("vaultbackup")

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_backend(namespace: str | None = None) -> SecretStore:
    from vaultbackup.backends.vault_backend import VaultBackend
    return VaultBackend(namespace=namespace)


def select_engine(engines: dict[str, SecretEngine], path: str) -> SecretEngine:
    engine = engines.get(path.strip("/"))
    if engine is None:
        raise ValidationError(f"Engine with path '{path}' not found")
    return engine


def find_restore_source(source: Path, engine: SecretEngine) -> Path | None:
    """Locate <source>/<mount>.<type> (or its -r variant) for engine."""
    for name in (engine.directory_name(), engine.directory_name() + RAW_SUFFIX):
        candidate = source / name
        if candidate.is_dir():
            return candidate
    return None


def run_backup(args: argparse.Namespace, store: SecretStore) -> None:
    engines = backup_candidates(store.list_mounted_engines())
    if args.path:
        selected = [select_engine(engines, args.path)]
    else:
        selected = []
        for engine in engines.values():
            if engine.engine_type is None:
                log.warning(f"Skip engine '{engine.path}': unsupported type '{engine.type}'")
                continue
            selected.append(engine)

    for engine in selected:
        options = Options(
            backup_path=args.dest,
            raw_accessible=args.raw,
            compress=args.compress,
        )
        new_secret_engine(store, engine, options).backup()
    log.info(f"Backup complete: {len(selected)} engine(s) written to {args.dest}")


def run_restore(args: argparse.Namespace, store: SecretStore) -> None:
    engines = backup_candidates(store.list_mounted_engines())
    if args.path:
        plan = [(select_engine(engines, args.path), Path(args.source))]
    else:
        plan = []
        for engine in engines.values():
            if engine.engine_type is None:
                continue
            source = find_restore_source(Path(args.source), engine)
            if source is None:
                log.info(f"No backup found for engine '{engine.path}', skipping")
                continue
            plan.append((engine, source))

    for engine, source in plan:
        options = Options(
            restore_path=str(source),
            raw_accessible=args.raw,
        )
        new_secret_engine(store, engine, options).restore()
    log.info(f"Restore complete: {len(plan)} engine(s) restored from {args.source}")


def run_list(args: argparse.Namespace, store: SecretStore) -> None:
    from vaultbackup.dashboard import print_engines
    print_engines(store.list_mounted_engines())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault-backup",
        description="Backup and restore HashiCorp Vault secrets engines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vault-backup backup -p secret -d backup -n team-a
  vault-backup restore -p secret -s backup/secret.kv2
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    def common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("-n", "--namespace", help="Vault namespace")
        sub.add_argument(
            "-l", "--log-level",
            choices=LOG_LEVELS,
            default="info",
            type=str.lower,
            help="Log level (default: info)",
        )

    backup = commands.add_parser("backup", help="Run backup")
    backup.add_argument("-p", "--path", help="Secrets engine path to back up (default: all)")
    backup.add_argument("-d", "--dest", default="backup", help="Local directory to store backup (default: backup)")
    backup.add_argument("-c", "--compress", action="store_true", help="Compress backup (not implemented)")
    backup.add_argument("-r", "--raw", action="store_true", help="Use the sys/raw endpoint where needed")
    common(backup)
    backup.set_defaults(func=run_backup)

    restore = commands.add_parser("restore", help="Run restore")
    restore.add_argument("-p", "--path", help="Secrets engine path to restore to (default: all)")
    restore.add_argument(
        "-s", "--source",
        default="backup",
        help="Backup root, or the engine directory (<mount>.<type>) when --path is set (default: backup)",
    )
    restore.add_argument("-r", "--raw", action="store_true", help="Use the sys/raw endpoint where needed")
    common(restore)
    restore.set_defaults(func=run_restore)

    listing = commands.add_parser("list", help="List mounted secrets engines")
    common(listing)
    listing.set_defaults(func=run_list)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    try:
        store = get_backend(args.namespace)
        args.func(args, store)
    except VaultBackupError as e:
        log.error(f"{args.command} failed: {e}")
        sys.exit(1)
    except Exception as e:
        log.exception(f"Unexpected error during {args.command}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
