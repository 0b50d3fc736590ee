"""Tests for the sortie CLI."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from sortie import __version__
from sortie.cli import app, key_event_from_terminal


runner = CliRunner()


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def env(home):
    return {"SORTIE_HOME": str(home)}


@pytest.fixture
def video_dir(tmp_path):
    folder = tmp_path / "shoot"
    folder.mkdir()
    (folder / "b.mp4").write_bytes(b"x" * 2048)
    (folder / "a.mov").write_bytes(b"x" * 100)
    return folder


def invoke(args, env, keys=None):
    if keys is None:
        return runner.invoke(app, args, env=env)
    with patch("sortie.cli.typer.getchar", side_effect=keys):
        return runner.invoke(app, args, env=env)


class TestVersion:
    def test_version(self, env):
        result = invoke(["--version"], env)

        assert result.exit_code == 0
        assert f"sortie version {__version__}" in result.output


class TestScanCommand:
    """Tests for 'sortie scan'."""

    def test_scan_lists_clips(self, video_dir, env):
        result = invoke(["scan", str(video_dir)], env)

        assert result.exit_code == 0
        assert "a.mov" in result.output
        assert "b.mp4" in result.output
        assert "2.00 KB" in result.output

    def test_scan_empty(self, tmp_path, env):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = invoke(["scan", str(empty)], env)

        assert result.exit_code == 0
        assert "Nothing to review" in result.output

    def test_scan_missing(self, tmp_path, env):
        result = invoke(["scan", str(tmp_path / "missing")], env)

        assert result.exit_code == 1
        assert "Path is not a directory" in result.output


class TestConfigCommands:
    """Tests for 'sortie config'."""

    def test_show_defaults(self, env):
        result = invoke(["config", "show"], env)

        assert result.exit_code == 0
        assert "A-Roll" in result.output
        assert "B-Roll" in result.output
        assert "Delete" in result.output

    def test_set_move(self, env, home):
        result = invoke(["config", "set", "right", "move", "--target", "Keepers"], env)

        assert result.exit_code == 0
        assert "Keepers" in result.output
        data = json.loads((home / "organizer_config.json").read_text())
        assert data["swipe"]["right"] == {"type": "Move", "target": "Keepers"}

    def test_set_unknown_action(self, env, home):
        result = invoke(["config", "set", "up", "teleport"], env)

        assert result.exit_code == 1
        assert "Unknown action" in result.output
        assert not (home / "organizer_config.json").exists()

    def test_set_move_without_target(self, env):
        result = invoke(["config", "set", "left", "move"], env)

        assert result.exit_code == 1
        assert "target folder" in result.output

    def test_set_bad_direction(self, env):
        result = invoke(["config", "set", "sideways", "skip"], env)

        assert result.exit_code != 0

    def test_reset(self, env, home):
        invoke(["config", "set", "down", "skip"], env)

        result = invoke(["config", "reset"], env)

        assert result.exit_code == 0
        data = json.loads((home / "organizer_config.json").read_text())
        assert data["swipe"]["down"] == {"type": "Delete"}

    def test_show_broken_file(self, env, home):
        (home / "organizer_config.json").write_text("{oops")

        result = invoke(["config", "show"], env)

        assert result.exit_code == 1
        assert "Failed to parse config" in result.output


class TestShortcutsCommand:
    def test_shortcuts(self, env):
        result = invoke(["shortcuts"], env)

        assert result.exit_code == 0
        assert "Undo last decision" in result.output
        assert "Playback speed" in result.output


class TestReviewCommand:
    """Tests for the interactive 'sortie review' session."""

    def test_swipe_right_moves_file(self, video_dir, env):
        """Test a right arrow moves the first clip into A-Roll."""
        result = invoke(["review", str(video_dir)], env, keys=["\x1b[C", "q"])

        assert result.exit_code == 0
        assert (video_dir / "A-Roll" / "a.mov").exists()
        assert not (video_dir / "a.mov").exists()
        assert "Next: b.mp4" in result.output
        assert "1 sorted, 1 left" in result.output

    def test_undo_restores_file(self, video_dir, env):
        """Test undo after a delete brings the clip back from the trash."""
        result = invoke(["review", str(video_dir)], env, keys=["\x1b[B", "z", "q"])

        assert result.exit_code == 0
        assert (video_dir / "a.mov").exists()
        assert not (video_dir / "_Trash" / "a.mov").exists()
        assert "Restored a.mov" in result.output
        assert "0 sorted, 2 left" in result.output

    def test_all_caught_up(self, video_dir, env):
        result = invoke(["review", str(video_dir)], env, keys=["\x1b[A", "\x1b[A", "q"])

        assert result.exit_code == 0
        assert "All caught up" in result.output
        assert (video_dir / "a.mov").exists()

    def test_empty_folder(self, tmp_path, env):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = invoke(["review", str(empty)], env, keys=["q"])

        assert result.exit_code == 0
        assert "No videos found in this folder." in result.output


class TestTerminalKeys:
    """Tests for key_event_from_terminal."""

    @pytest.mark.parametrize(
        "raw,key",
        [
            ("\x1b[A", "ArrowUp"),
            ("\x1b[B", "ArrowDown"),
            ("\x1b[C", "ArrowRight"),
            ("\x1b[D", "ArrowLeft"),
            ("\xe0K", "ArrowLeft"),
            ("z", "z"),
            (" ", " "),
        ],
    )
    def test_mapping(self, raw, key):
        assert key_event_from_terminal(raw).key == key

    def test_ctrl_z(self):
        event = key_event_from_terminal("\x1a")

        assert event.key == "z"
        assert event.ctrl
