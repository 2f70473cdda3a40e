"""Tests for the command line driver and the engine table."""

import io

import pytest
from rich.console import Console

from conftest import KV2_MOUNT, KV_MOUNT, FakeVault
from vaultbackup import cli
from vaultbackup.context import Options
from vaultbackup.dashboard import build_table
from vaultbackup.mounts import SecretEngine

MOUNTS = [
    KV2_MOUNT,
    KV_MOUNT,
    SecretEngine("cubbyhole", "cubbyhole", "uuid-cubby"),
    SecretEngine("nomad", "nomad", "uuid-nomad"),
]


@pytest.fixture
def use_vault(monkeypatch):
    def install(vault: FakeVault) -> FakeVault:
        monkeypatch.setattr(cli, "get_backend", lambda namespace=None: vault)
        return vault

    return install


def seeded_vault() -> FakeVault:
    vault = FakeVault(mounts=MOUNTS)
    vault.seed_versions("secret", "app/db", [{"user": "a"}, {"user": "b"}], destroyed=(1,))
    vault.secrets["kv/team/token"] = {"value": "t0k3n"}
    return vault


class TestParser:

    def test_backup_defaults(self):
        args = cli.build_parser().parse_args(["backup"])
        assert args.dest == "backup"
        assert args.path is None
        assert (args.raw, args.compress) == (False, False)
        assert args.log_level == "info"

    def test_restore_defaults_and_case_insensitive_log_level(self):
        args = cli.build_parser().parse_args(["restore", "-p", "secret", "-l", "DEBUG", "-n", "team-a"])
        assert (args.source, args.path, args.log_level, args.namespace) == ("backup", "secret", "debug", "team-a")

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestRuns:

    def test_backup_then_restore_all_engines(self, tmp_path, use_vault):
        use_vault(seeded_vault())
        cli.main(["backup", "-d", str(tmp_path)])

        assert sorted(p.name for p in tmp_path.iterdir()) == ["kv.kv", "secret.kv2"]

        target = use_vault(FakeVault(mounts=MOUNTS))
        cli.main(["restore", "-s", str(tmp_path)])

        assert target.secrets == {"kv/team/token": {"value": "t0k3n"}}
        secret = target.kv2["secret/app/db"]
        assert secret.current_version == 2
        assert secret.version(1).destroyed
        assert secret.version(2).data == {"user": "b"}

    def test_backup_and_restore_single_engine(self, tmp_path, use_vault):
        use_vault(seeded_vault())
        cli.main(["backup", "-p", "kv", "-d", str(tmp_path)])
        assert [p.name for p in tmp_path.iterdir()] == ["kv.kv"]

        target = use_vault(FakeVault(mounts=MOUNTS))
        cli.main(["restore", "-p", "kv", "-s", str(tmp_path / "kv.kv")])
        assert target.secrets == {"kv/team/token": {"value": "t0k3n"}}

    def test_restore_all_skips_engines_without_backup(self, tmp_path, use_vault):
        (tmp_path / "kv.kv-r").mkdir()
        target = use_vault(FakeVault(mounts=MOUNTS))
        cli.main(["restore", "-s", str(tmp_path)])
        assert target.calls == []

    def test_flags_become_engine_options(self, tmp_path, use_vault, monkeypatch):
        built = []

        class Recorder:
            def backup(self):
                pass

        def record(store, engine, options):
            built.append(options)
            return Recorder()

        use_vault(seeded_vault())
        monkeypatch.setattr(cli, "new_secret_engine", record)
        cli.main(["backup", "-p", "kv", "-d", str(tmp_path), "-r", "-l", "debug"])

        assert built == [Options(backup_path=str(tmp_path), raw_accessible=True, compress=False)]

    def test_unknown_path_exits_with_error(self, tmp_path, use_vault):
        use_vault(seeded_vault())
        with pytest.raises(SystemExit) as exc:
            cli.main(["backup", "-p", "missing", "-d", str(tmp_path)])
        assert exc.value.code == 1

    def test_type_mismatch_exits_before_any_write(self, tmp_path, use_vault):
        target = use_vault(FakeVault(mounts=MOUNTS))
        (tmp_path / "secret.kv").mkdir()
        with pytest.raises(SystemExit) as exc:
            cli.main(["restore", "-p", "secret", "-s", str(tmp_path / "secret.kv")])
        assert exc.value.code == 1
        assert target.calls == []


class TestEngineTable:

    def render(self, engines) -> str:
        console = Console(file=io.StringIO(), width=140, color_system=None)
        console.print(build_table(engines))
        return console.file.getvalue()

    def test_rows_for_supported_and_unsupported_mounts(self):
        output = self.render(MOUNTS + [SecretEngine("pki", "pki", "uuid-pki")])
        assert "secret.kv2" in output
        assert "kv.kv" in output
        assert "required" in output
        assert "unsupported" in output
        assert "cubbyhole" not in output

    def test_list_command_prints_table(self, use_vault, capsys):
        use_vault(FakeVault(mounts=MOUNTS))
        cli.main(["list"])
        assert "secret" in capsys.readouterr().out
