import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class RunOptions:
    """Per-invocation settings passed explicitly to every operation"""

    dry_run: bool = False


@dataclass(frozen=True)
class ZamPaths:
    """Locations of every file zam reads or writes"""

    zam_dir: Path
    backups_dir: Path
    metadata_file: Path
    aliases_file: Path
    zshrc_file: Path
    config_file: Path

    @classmethod
    def default(cls, home: Optional[Path] = None) -> "ZamPaths":
        home = home or Path.home()
        zam_dir = home / ".zam"
        return cls(
            zam_dir=zam_dir,
            backups_dir=zam_dir / "backups",
            metadata_file=zam_dir / "metadata.json",
            aliases_file=home / ".zsh_aliases_managed",
            zshrc_file=home / ".zshrc",
            config_file=zam_dir / "config.json",
        )


class Config:
    """Manage zam configuration and themes"""

    THEMES = {
        "default": {
            "name_color": "cyan",
            "command_color": "white",
            "tag_color": "dim",
            "highlight_color": "black on yellow",
            "header_color": "bold magenta",
        },
        "ocean": {
            "name_color": "bright_blue",
            "command_color": "cyan",
            "tag_color": "blue",
            "highlight_color": "black on bright_cyan",
            "header_color": "bold blue",
        },
        "forest": {
            "name_color": "bright_green",
            "command_color": "white",
            "tag_color": "green",
            "highlight_color": "black on bright_yellow",
            "header_color": "bold green",
        },
        "monochrome": {
            "name_color": "bright_white",
            "command_color": "white",
            "tag_color": "dim",
            "highlight_color": "reverse",
            "header_color": "bold",
        },
    }

    DEFAULT_CONFIG = {
        "theme": "default",
        "aliases_file": None,
        "zshrc_file": None,
        "editor": None,
        "max_backups": 10,
        "fuzzy_threshold": 70,
    }

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or ZamPaths.default().config_file
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file"""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    user_config = json.load(f)
                if isinstance(user_config, dict):
                    return {**self.DEFAULT_CONFIG, **user_config}
            except (OSError, json.JSONDecodeError):
                pass
        return self.DEFAULT_CONFIG.copy()

    def save(self) -> None:
        """Save configuration to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        value = self.config.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self.config[key] = value
        self.save()

    def get_int(self, key: str) -> int:
        """Integer setting, or its default when the stored value is not a number"""
        value = self.get(key)
        if isinstance(value, bool):
            return self.DEFAULT_CONFIG[key]
        try:
            return int(value)
        except (TypeError, ValueError):
            return self.DEFAULT_CONFIG[key]

    def validate(self, key: str, value: Any) -> Optional[str]:
        """Return an error message if value cannot be stored under key, else None"""
        if key not in self.DEFAULT_CONFIG:
            return f"Unknown setting '{key}'. Valid settings: {', '.join(sorted(self.DEFAULT_CONFIG))}"
        if key == "theme":
            if not isinstance(value, str) or value not in self.THEMES:
                return f"Unknown theme '{value}'. Available themes: {', '.join(self.THEMES)}"
        elif key in ("max_backups", "fuzzy_threshold"):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                return f"{key} must be a whole number of 0 or more"
            if key == "fuzzy_threshold" and value > 100:
                return "fuzzy_threshold must be between 0 and 100"
        elif value is not None and not isinstance(value, str):
            return f"{key} must be a string, or null to use the default"
        return None

    def get_theme(self) -> Dict[str, str]:
        """Get current theme colors"""
        theme_name = self.config.get("theme")
        if not isinstance(theme_name, str):
            return self.THEMES["default"]
        return self.THEMES.get(theme_name, self.THEMES["default"])

    def get_editor(self) -> str:
        """Configured editor, then $EDITOR, then vi"""
        editor = self.get("editor")
        if not isinstance(editor, str) or not editor:
            editor = None
        return editor or os.environ.get("EDITOR") or "vi"

    def resolve_paths(self, home: Optional[Path] = None) -> ZamPaths:
        """Default paths with the file overrides from config applied"""
        paths = ZamPaths.default(home)
        overrides = {}
        for key in ("aliases_file", "zshrc_file"):
            value = self.get(key)
            if isinstance(value, str) and value:
                overrides[key] = Path(value).expanduser()
        if not overrides:
            return paths
        return replace(paths, **overrides)
