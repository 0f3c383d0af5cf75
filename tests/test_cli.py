"""CLI integration tests for `modsort`."""

from __future__ import annotations

import json
import os
import zipfile
from pathlib import Path

from click.testing import CliRunner

from modsort.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory."""
    env = {key: value for key, value in os.environ.items() if not key.startswith("MODSORT__")}
    env["HOME"] = str(tmp_path / "home")
    return env


def _write_jar(mods: Path, mod_id: str, environment: str | None = None) -> Path:
    manifest: dict[str, str] = {"id": mod_id, "version": "1.0.0"}
    if environment is not None:
        manifest["environment"] = environment
    path = mods / f"{mod_id}.jar"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("fabric.mod.json", json.dumps(manifest))
    return path


def _populated_mods(tmp_path: Path) -> Path:
    mods = tmp_path / "mods"
    mods.mkdir()
    _write_jar(mods, "sodium", "client")
    _write_jar(mods, "ledger", "server")
    _write_jar(mods, "fabric-api", "*")
    _write_jar(mods, "mod-client-or-server", "client")
    return mods


def test_cli_help_displays_commands() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "sorts installed mods" in result.output
    for command in ("sort", "list", "config"):
        assert command in result.output


def test_cli_sort_json_reports_archives(tmp_path: Path) -> None:
    mods = _populated_mods(tmp_path)

    result = CliRunner().invoke(cli, ["sort", str(mods), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["total"] == 3
    categories = payload["categories"]
    assert [mod["id"] for mod in categories["client"]["mods"]] == ["sodium"]
    assert [mod["id"] for mod in categories["server"]["mods"]] == ["ledger"]
    assert [mod["id"] for mod in categories["both"]["mods"]] == ["fabric-api"]

    archives = sorted(path.name for path in (mods / "mod-client-or-server").iterdir())
    assert len(archives) == 3
    assert [name.split("-mods-")[0] for name in archives] == ["both", "client", "server"]
    stamps = {name.split("-mods-")[1] for name in archives}
    assert len(stamps) == 1


def test_cli_sort_summary_mode(tmp_path: Path) -> None:
    mods = _populated_mods(tmp_path)

    result = CliRunner().invoke(cli, ["sort", str(mods), "--summary"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "total=3" in result.output
    assert "client=1" in result.output


def test_cli_sort_missing_directory_json_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope"

    result = CliRunner().invoke(
        cli, ["sort", str(missing), "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "source_not_found"
    assert not missing.exists()


def test_cli_sort_rejects_conflicting_modes(tmp_path: Path) -> None:
    mods = _populated_mods(tmp_path)

    result = CliRunner().invoke(
        cli, ["sort", str(mods), "--quiet", "--summary"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "cannot both be enabled" in result.output
    assert not (mods / "mod-client-or-server").exists()


def test_cli_list_does_not_write(tmp_path: Path) -> None:
    mods = _populated_mods(tmp_path)

    result = CliRunner().invoke(cli, ["list", str(mods), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [mod["id"] for mod in payload["mods"]] == ["fabric-api", "ledger", "sodium"]
    assert [mod["category"] for mod in payload["mods"]] == ["both", "server", "client"]
    assert not (mods / "mod-client-or-server").exists()


def test_cli_config_set_persists_value(tmp_path: Path) -> None:
    env = _env_with_home(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "set", "sorting.items_noun", "addons"], env=env)
    assert result.exit_code == 0, result.output

    mods = _populated_mods(tmp_path)
    result = runner.invoke(cli, ["sort", str(mods), "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert "-addons-" in payload["categories"]["client"]["archive"]


def test_cli_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["config", "set", "archive.compression", "bzip2"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_cli_sort_missing_directory_reports_click_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope"

    result = CliRunner().invoke(cli, ["sort", str(missing)], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "Mods directory not found" in result.output
    assert "Traceback" not in result.output


def test_cli_sort_rejects_json_with_quiet(tmp_path: Path) -> None:
    mods = _populated_mods(tmp_path)

    result = CliRunner().invoke(
        cli, ["sort", str(mods), "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert "--json cannot be combined with --quiet" in result.output
    assert not (mods / "mod-client-or-server").exists()


def test_cli_sort_rejects_json_with_summary(tmp_path: Path) -> None:
    mods = _populated_mods(tmp_path)

    result = CliRunner().invoke(
        cli, ["sort", str(mods), "--json", "--summary"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert "--json cannot be combined with --summary" in result.output
    assert not (mods / "mod-client-or-server").exists()
