from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from zam.codec import HEADER
from zam.config import RunOptions, ZamPaths
from zam.filesystem import FileSystem
from zam.storage import AliasStorage

HOME = Path("/home/tester")


class MemoryFileSystem(FileSystem):
    """In-memory files that record every mutating call"""

    def __init__(self, files: Optional[Dict[Path, str]] = None):
        self.files: Dict[Path, str] = dict(files or {})
        self.calls: List[Tuple[str, Path]] = []

    def exists(self, path: Path) -> bool:
        return path in self.files

    def read_text(self, path: Path) -> str:
        if path not in self.files:
            raise FileNotFoundError(str(path))
        return self.files[path]

    def write_text(self, path: Path, content: str) -> None:
        self.calls.append(("write", path))
        self.files[path] = content

    def append_text(self, path: Path, content: str) -> None:
        self.calls.append(("append", path))
        self.files[path] = self.files.get(path, "") + content

    def copy(self, source: Path, target: Path) -> None:
        self.calls.append(("copy", target))
        self.files[target] = self.read_text(source)

    def list_dir(self, path: Path) -> List[str]:
        return [p.name for p in self.files if p.parent == path]

    def remove(self, path: Path) -> None:
        self.calls.append(("remove", path))
        del self.files[path]


@pytest.fixture
def paths() -> ZamPaths:
    return ZamPaths.default(HOME)


@pytest.fixture
def fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def storage(fs, paths) -> AliasStorage:
    return AliasStorage(fs=fs, paths=paths)


@pytest.fixture
def dry_run() -> RunOptions:
    return RunOptions(dry_run=True)


@pytest.fixture
def managed_text() -> str:
    return f"{HEADER}\nalias gs='git status'\nalias ll='ls -la'\n"


@pytest.fixture
def populated(fs, paths, managed_text) -> MemoryFileSystem:
    """Two managed aliases, gs tagged git, plus a .zshrc already sourcing zam"""
    fs.files[paths.aliases_file] = managed_text
    fs.files[paths.metadata_file] = '{"gs": {"tags": ["git"], "created": "2025-01-01T00:00:00+00:00"}}'
    fs.files[paths.zshrc_file] = f'export EDITOR=vim\n[ -f "{paths.aliases_file}" ] && source "{paths.aliases_file}"\n'
    return fs
