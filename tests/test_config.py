import json
from pathlib import Path

from zam.config import Config, RunOptions, ZamPaths


class TestConfig:
    def test_defaults_when_file_missing(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.get("theme") == "default"
        assert config.get("max_backups") == 10
        assert config.get("fuzzy_threshold") == 70

    def test_load_merges_user_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"theme": "ocean", "max_backups": 3}))

        config = Config(path)

        assert config.get("theme") == "ocean"
        assert config.get("max_backups") == 3
        assert config.get("fuzzy_threshold") == 70

    def test_invalid_json_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken")
        assert Config(path).config == Config.DEFAULT_CONFIG

    def test_non_object_json_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[]")
        assert Config(path).config == Config.DEFAULT_CONFIG

    def test_set_persists(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = Config(path)

        config.set("theme", "forest")

        assert json.loads(path.read_text())["theme"] == "forest"
        assert Config(path).get("theme") == "forest"

    def test_get_default_for_unset_values(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.get("editor", "nano") == "nano"
        assert config.get("missing", 5) == 5

    def test_get_theme(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.get_theme() == Config.THEMES["default"]

        config.config["theme"] = "monochrome"
        assert config.get_theme()["highlight_color"] == "reverse"

        config.config["theme"] = "no-such-theme"
        assert config.get_theme() == Config.THEMES["default"]

    def test_get_editor(self, tmp_path, monkeypatch):
        config = Config(tmp_path / "config.json")
        monkeypatch.delenv("EDITOR", raising=False)
        assert config.get_editor() == "vi"

        monkeypatch.setenv("EDITOR", "nano")
        assert config.get_editor() == "nano"

        config.config["editor"] = "code --wait"
        assert config.get_editor() == "code --wait"

    def test_resolve_paths_defaults(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.resolve_paths(tmp_path) == ZamPaths.default(tmp_path)

    def test_resolve_paths_overrides(self, tmp_path):
        config = Config(tmp_path / "config.json")
        config.config["aliases_file"] = str(tmp_path / "aliases.zsh")

        paths = config.resolve_paths(tmp_path)

        assert paths.aliases_file == tmp_path / "aliases.zsh"
        assert paths.zshrc_file == tmp_path / ".zshrc"
        assert paths.metadata_file == tmp_path / ".zam" / "metadata.json"

    def test_get_int_falls_back_on_bad_values(self, tmp_path):
        config = Config(tmp_path / "config.json")

        for bad in ("abc", True, None, [3]):
            config.config["max_backups"] = bad
            assert config.get_int("max_backups") == 10

        config.config["fuzzy_threshold"] = "85"
        assert config.get_int("fuzzy_threshold") == 85

    def test_bad_saved_values_do_not_break_loading(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"max_backups": "abc", "theme": 7, "editor": 3, "aliases_file": 1}))

        config = Config(path)

        assert config.get_int("max_backups") == 10
        assert config.get_theme() == Config.THEMES["default"]
        assert config.resolve_paths(tmp_path) == ZamPaths.default(tmp_path)

    def test_validate_accepts_good_values(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.validate("theme", "ocean") is None
        assert config.validate("max_backups", 0) is None
        assert config.validate("fuzzy_threshold", 100) is None
        assert config.validate("editor", "nano") is None
        assert config.validate("editor", None) is None

    def test_validate_rejects_bad_values(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert "Unknown setting 'colour'" in config.validate("colour", "red")
        assert "Unknown theme 'nope'" in config.validate("theme", "nope")
        assert "whole number" in config.validate("max_backups", "abc")
        assert "whole number" in config.validate("max_backups", -1)
        assert "whole number" in config.validate("max_backups", True)
        assert "between 0 and 100" in config.validate("fuzzy_threshold", 101)
        assert "must be a string" in config.validate("aliases_file", 5)


def test_default_paths():
    paths = ZamPaths.default(Path("/home/u"))
    assert paths.aliases_file == Path("/home/u/.zsh_aliases_managed")
    assert paths.metadata_file == Path("/home/u/.zam/metadata.json")
    assert paths.backups_dir == Path("/home/u/.zam/backups")
    assert paths.zshrc_file == Path("/home/u/.zshrc")


def test_run_options_default_to_writing():
    assert RunOptions().dry_run is False
    assert RunOptions(dry_run=True).dry_run is True
