"""CLI integration tests."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from smartorg.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set and no smartorg overrides.
    """
    env = {key: value for key, value in os.environ.items() if not key.startswith("SMARTORG__")}
    env["HOME"] = str(tmp_path / "home")
    return env


def _state(tmp_path: Path) -> dict:
    path = tmp_path / "home" / ".smartorg" / "state.json"
    return json.loads(path.read_text(encoding="utf-8"))


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "prioritized rules" in result.output
    for command in ("run", "watch", "dirs", "rules", "history", "stats", "config"):
        assert command in result.output


def test_first_run_seeds_default_rules(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["rules", "list"], env=env)

    assert result.exit_code == 0
    assert [rule["name"] for rule in _state(tmp_path)["rules"]] == [
        "Documents",
        "Images",
        "Videos",
    ]
    assert (tmp_path / "home" / ".smartorg" / "config.yaml").exists()


def test_dirs_add_list_remove(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    inbox = tmp_path / "inbox"
    inbox.mkdir()

    added = runner.invoke(cli, ["dirs", "add", str(inbox)], env=env)
    again = runner.invoke(cli, ["dirs", "add", str(inbox)], env=env)
    listed = runner.invoke(cli, ["dirs", "list"], env=env)

    assert added.exit_code == 0 and "Watching" in added.output
    assert "already" in again.output
    assert _state(tmp_path)["watched_directories"] == [str(inbox)]
    assert "inbox" in listed.output

    removed = runner.invoke(cli, ["dirs", "remove", str(inbox)], env=env)
    assert removed.exit_code == 0
    assert _state(tmp_path)["watched_directories"] == []


def test_run_without_watched_directories_fails(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["run"], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "No watched directories" in result.output


def test_run_json_moves_images_with_seeded_rules(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    (inbox / "a.jpg").write_bytes(b"jpg")
    (inbox / "b.unknownext").write_text("?", encoding="utf-8")
    runner.invoke(cli, ["dirs", "add", str(inbox)], env=env)

    result = runner.invoke(cli, ["run", "--json"], env=env)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["counts"]["succeeded"] == 1
    assert payload["counts"]["failed"] == 0
    assert (tmp_path / "home" / "Documents" / "Organized" / "Images" / "a.jpg").exists()
    assert (inbox / "b.unknownext").exists()

    stats = runner.invoke(cli, ["stats"], env=env)
    assert "Files organized: 1" in stats.output
    assert "Errors: 0" in stats.output

    history = runner.invoke(cli, ["history", "--json"], env=env)
    records = json.loads(history.stdout)
    assert records[0]["file_name"] == "a.jpg"
    assert records[0]["kind"] == "move"


def test_watch_once_persists_state(tmp_path: Path) -> None:
    """Ensure `smartorg watch --once` organizes files and persists state.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    (inbox / "memo.pdf").write_text("watch me", encoding="utf-8")
    runner.invoke(cli, ["dirs", "add", str(inbox)], env=env)

    result = runner.invoke(cli, ["watch", "--once"], env=env)

    assert result.exit_code == 0
    assert "succeeded=1" in result.output
    state = _state(tmp_path)
    assert state["statistics"]["files_organized"] == 1
    assert state["history"][0]["file_name"] == "memo.pdf"


def test_rules_import_disable_and_remove(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text(
        "\n".join(
            [
                "rules:",
                "  - id: 0b6c3d52-7d2e-4a3b-9d8e-2f1a5c6b7e80",
                "    name: Big downloads",
                "    priority: 5",
                "    conditions:",
                "      - condition_type: fileSize",
                "        operator: greaterThan",
                "        value: '1000000'",
                "    actions:",
                "      - action_type: moveToFolder",
                "        parameters:",
                "          destinationPath: ~/Large",
            ]
        ),
        encoding="utf-8",
    )

    imported = runner.invoke(cli, ["rules", "import", str(rules_file)], env=env)
    assert imported.exit_code == 0
    assert "Big downloads" in imported.output

    disabled = runner.invoke(cli, ["rules", "disable", "0b6c3d52"], env=env)
    assert disabled.exit_code == 0
    stored = {rule["name"]: rule for rule in _state(tmp_path)["rules"]}
    assert stored["Big downloads"]["enabled"] is False
    assert stored["Big downloads"]["conditions"][0]["condition_type"] == "size"

    removed = runner.invoke(cli, ["rules", "remove", "0b6c3d52"], env=env)
    assert removed.exit_code == 0
    assert "Big downloads" not in {rule["name"] for rule in _state(tmp_path)["rules"]}


def test_rules_import_rejects_misconfigured_rule(tmp_path: Path) -> None:
    runner = CliRunner()
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text(
        "name: broken\nactions:\n  - action_type: renameFile\n", encoding="utf-8"
    )

    result = runner.invoke(cli, ["rules", "import", str(rules_file)], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "newName" in result.output


def test_config_view_reflects_environment(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["SMARTORG__ORGANIZER__MAX_WORKERS"] = "4"

    with_env = runner.invoke(cli, ["config", "view"], env=env)
    without_env = runner.invoke(cli, ["config", "view", "--no-env"], env=env)

    assert with_env.exit_code == 0
    assert "max_workers: 4" in with_env.output
    assert "max_workers: 1" in without_env.output


def test_blank_rule_id_is_rejected(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["rules", "disable", "  "], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "must not be empty" in result.output
    assert all(rule["enabled"] for rule in _state(tmp_path)["rules"])
