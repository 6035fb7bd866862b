"""Tests for the action executor."""

from __future__ import annotations

from pathlib import Path

import pytest

from smartorg.ingestion import FileInfo
from smartorg.organization import ActionExecutor, FileOperation, OperationKind, UnsupportedAction
from smartorg.organization import executor as executor_module
from smartorg.rules import ActionType, RuleAction


def _write(path: Path, text: str = "content") -> FileInfo:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return FileInfo.from_path(path)


def test_move_creates_missing_directories(tmp_path: Path) -> None:
    info = _write(tmp_path / "inbox" / "report.pdf")
    destination = tmp_path / "sorted" / "deep" / "docs"
    action = RuleAction(
        action_type=ActionType.MOVE_TO_FOLDER,
        parameters={"destinationPath": str(destination)},
    )

    result = ActionExecutor().execute(action, info)

    assert isinstance(result, FileOperation)
    assert result.success
    assert result.kind is OperationKind.MOVE
    assert result.destination_path == str(destination / "report.pdf")
    assert not (tmp_path / "inbox" / "report.pdf").exists()
    assert (destination / "report.pdf").read_text(encoding="utf-8") == "content"


def test_move_expands_home_directory(tmp_path: Path, home: Path) -> None:
    info = _write(tmp_path / "inbox" / "a.jpg")
    action = RuleAction(
        action_type=ActionType.MOVE_TO_FOLDER,
        parameters={"destinationPath": "~/Organized/Images"},
    )

    result = ActionExecutor().execute(action, info)

    assert result.success
    assert (home / "Organized" / "Images" / "a.jpg").exists()


def test_copy_keeps_source(tmp_path: Path) -> None:
    info = _write(tmp_path / "a.txt", "keep me")
    action = RuleAction(
        action_type=ActionType.COPY_TO_FOLDER,
        parameters={"destinationPath": str(tmp_path / "backup")},
    )

    result = ActionExecutor().execute(action, info)

    assert result.success
    assert result.kind is OperationKind.COPY
    assert (tmp_path / "a.txt").exists()
    assert (tmp_path / "backup" / "a.txt").read_text(encoding="utf-8") == "keep me"


def test_rename_stays_in_parent_directory(tmp_path: Path) -> None:
    info = _write(tmp_path / "IMG_0001.jpg")
    action = RuleAction(action_type=ActionType.RENAME_FILE, parameters={"newName": "beach.jpg"})

    result = ActionExecutor().execute(action, info)

    assert result.success
    assert result.kind is OperationKind.RENAME
    assert result.destination_path == str(tmp_path / "beach.jpg")
    assert (tmp_path / "beach.jpg").exists()
    assert not (tmp_path / "IMG_0001.jpg").exists()


def test_existing_destination_is_not_overwritten(tmp_path: Path) -> None:
    info = _write(tmp_path / "a.txt", "new")
    _write(tmp_path / "dest" / "a.txt", "old")
    action = RuleAction(
        action_type=ActionType.MOVE_TO_FOLDER,
        parameters={"destinationPath": str(tmp_path / "dest")},
    )

    result = ActionExecutor().execute(action, info)

    assert not result.success
    assert "already exists" in result.error_message
    assert (tmp_path / "dest" / "a.txt").read_text(encoding="utf-8") == "old"
    assert (tmp_path / "a.txt").exists()


def test_invalid_destination_yields_failed_record(tmp_path: Path) -> None:
    info = _write(tmp_path / "a.txt")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    action = RuleAction(
        action_type=ActionType.MOVE_TO_FOLDER,
        parameters={"destinationPath": str(blocker / "sub")},
    )

    result = ActionExecutor().execute(action, info)

    assert isinstance(result, FileOperation)
    assert result.success is False
    assert result.error_message
    assert result.kind is OperationKind.MOVE
    assert (tmp_path / "a.txt").exists()


def test_missing_parameter_is_a_failed_record(tmp_path: Path) -> None:
    info = _write(tmp_path / "a.txt")
    action = RuleAction(action_type=ActionType.RENAME_FILE)

    result = ActionExecutor().execute(action, info)

    assert result.success is False
    assert "newName" in result.error_message


def test_vanished_source_is_a_failed_record(tmp_path: Path) -> None:
    info = _write(tmp_path / "gone.txt")
    (tmp_path / "gone.txt").unlink()
    action = RuleAction(
        action_type=ActionType.COPY_TO_FOLDER,
        parameters={"destinationPath": str(tmp_path / "out")},
    )

    result = ActionExecutor().execute(action, info)

    assert result.success is False
    assert "no longer exists" in result.error_message


def test_trash_uses_recoverable_deletion(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    info = _write(tmp_path / "junk.tmp")
    trashed: list[str] = []
    monkeypatch.setattr(executor_module, "send2trash", trashed.append)

    result = ActionExecutor().execute(RuleAction(action_type=ActionType.TRASH), info)

    assert result.success
    assert result.kind is OperationKind.DELETE
    assert result.destination_path is None
    assert trashed == [str(tmp_path / "junk.tmp")]


def test_trash_failure_is_recorded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    info = _write(tmp_path / "locked.tmp")

    def _refuse(path: str) -> None:
        raise PermissionError(f"Permission denied: {path}")

    monkeypatch.setattr(executor_module, "send2trash", _refuse)

    result = ActionExecutor().execute(RuleAction(action_type=ActionType.TRASH), info)

    assert result.success is False
    assert result.kind is OperationKind.DELETE
    assert "Permission denied" in result.error_message


@pytest.mark.parametrize("action_type", [ActionType.CREATE_FOLDER, ActionType.ADD_TAG])
def test_placeholder_actions_are_unsupported(tmp_path: Path, action_type: ActionType) -> None:
    info = _write(tmp_path / "a.txt")
    before = sorted(path.name for path in tmp_path.iterdir())

    result = ActionExecutor().execute(
        RuleAction(
            action_type=action_type,
            parameters={"folderName": "x", "parentPath": str(tmp_path), "tagName": "red"},
        ),
        info,
    )

    assert isinstance(result, UnsupportedAction)
    assert result.action_type is action_type
    assert sorted(path.name for path in tmp_path.iterdir()) == before


@pytest.mark.parametrize(
    ("action_type", "parameters"),
    [
        (ActionType.MOVE_TO_FOLDER, {"destinationPath": "bad\x00dir"}),
        (ActionType.COPY_TO_FOLDER, {"destinationPath": "bad\x00dir"}),
        (ActionType.RENAME_FILE, {"newName": "x\x00y.txt"}),
    ],
)
def test_nul_byte_parameter_is_a_failed_record(
    tmp_path: Path, action_type: ActionType, parameters: dict[str, str]
) -> None:
    info = _write(tmp_path / "a.txt")

    result = ActionExecutor().execute(
        RuleAction(action_type=action_type, parameters=parameters), info
    )

    assert isinstance(result, FileOperation)
    assert result.success is False
    assert "NUL" in result.error_message
    assert (tmp_path / "a.txt").exists()


@pytest.mark.parametrize("new_name", ["../escaped.txt", "sub/renamed.txt", "..", "."])
def test_rename_cannot_leave_the_directory(tmp_path: Path, new_name: str) -> None:
    inbox = tmp_path / "inbox"
    (inbox / "sub").mkdir(parents=True)
    info = _write(inbox / "a.txt")

    result = ActionExecutor().execute(
        RuleAction(action_type=ActionType.RENAME_FILE, parameters={"newName": new_name}), info
    )

    assert result.success is False
    assert result.kind is OperationKind.RENAME
    assert "plain file name" in result.error_message
    assert (inbox / "a.txt").exists()
    assert not (tmp_path / "escaped.txt").exists()
    assert not (inbox / "sub" / "renamed.txt").exists()
