from pathlib import Path
from unittest.mock import patch

from zam.editor import edit_text


def fake_editor(new_content, returncode=0, seen=None):
    """Stand in for subprocess.run: rewrite the temp file like an editor would"""

    def run(args):
        path = Path(args[-1])
        if seen is not None:
            seen.append((args, path.read_text()))
        path.write_text(new_content)

        class Result:
            pass

        result = Result()
        result.returncode = returncode
        return result

    return run


class TestEditText:
    def test_returns_edited_content_stripped(self):
        seen = []
        with patch("zam.editor.subprocess.run", side_effect=fake_editor("git status -sb\n", seen=seen)):
            assert edit_text("git status", editor="nano", name="gs") == "git status -sb"

        args, initial = seen[0]
        assert args[0] == "nano"
        assert initial == "git status"
        assert Path(args[-1]).name.startswith("zam-edit-gs-")

    def test_editor_with_arguments(self):
        seen = []
        with patch("zam.editor.subprocess.run", side_effect=fake_editor("x", seen=seen)):
            edit_text("y", editor="code --wait")
        assert seen[0][0][:2] == ["code", "--wait"]

    def test_non_zero_exit_returns_none(self):
        with patch("zam.editor.subprocess.run", side_effect=fake_editor("changed", returncode=1)):
            assert edit_text("git status", editor="vi") is None

    def test_missing_editor_returns_none(self):
        with patch("zam.editor.subprocess.run", side_effect=FileNotFoundError("nope")):
            assert edit_text("git status", editor="no-such-editor") is None

    def test_temp_file_is_removed(self):
        seen = []
        with patch("zam.editor.subprocess.run", side_effect=fake_editor("x", seen=seen)):
            edit_text("y", editor="vi")
        assert not Path(seen[0][0][-1]).exists()

    def test_unsafe_name_is_sanitized(self):
        seen = []
        with patch("zam.editor.subprocess.run", side_effect=fake_editor("x", seen=seen)):
            edit_text("y", editor="vi", name="../evil name")
        tmp = Path(seen[0][0][-1])
        assert "/" not in tmp.name
        assert tmp.name.startswith("zam-edit-.._evil_name-")

    def test_falls_back_to_environment_editor(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "emacs")
        seen = []
        with patch("zam.editor.subprocess.run", side_effect=fake_editor("x", seen=seen)):
            edit_text("y")
        assert seen[0][0][0] == "emacs"
