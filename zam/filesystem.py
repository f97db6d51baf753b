import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List


# Backend Interface
class FileSystem(ABC):
    """Whole-file access to the plain files zam manages.

    Alias and metadata files are small, so everything is read and written
    in one piece.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        ...

    @abstractmethod
    def read_text(self, path: Path) -> str:
        ...

    @abstractmethod
    def write_text(self, path: Path, content: str) -> None:
        """Replace the whole file, creating parent directories as needed."""
        ...

    @abstractmethod
    def append_text(self, path: Path, content: str) -> None:
        ...

    @abstractmethod
    def copy(self, source: Path, target: Path) -> None:
        ...

    @abstractmethod
    def list_dir(self, path: Path) -> List[str]:
        """Return entry names, or an empty list when the directory is missing."""
        ...

    @abstractmethod
    def remove(self, path: Path) -> None:
        ...


# local disk backend
class LocalFileSystem(FileSystem):
    def exists(self, path: Path) -> bool:
        return path.exists()

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def append_text(self, path: Path, content: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(content)

    def copy(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)

    def list_dir(self, path: Path) -> List[str]:
        if not path.is_dir():
            return []
        return [entry.name for entry in path.iterdir()]

    def remove(self, path: Path) -> None:
        path.unlink()
