import json
from pathlib import Path
from typing import Dict, List, Optional

from zam.codec import parse_aliases, serialize_aliases
from zam.config import ZamPaths
from zam.filesystem import FileSystem, LocalFileSystem
from zam.models import Alias, AliasMetadata


class AliasRepository:
    """Load and save the managed alias file.

    Every save rewrites the whole file from the mapping, so the file on disk
    is always sorted and canonical. Uniqueness comes from the mapping itself;
    whether an existing name may be replaced is decided by the caller.
    """

    def __init__(self, fs: FileSystem, path: Path):
        self.fs = fs
        self.path = path

    def exists(self) -> bool:
        return self.fs.exists(self.path)

    def load(self) -> Dict[str, str]:
        """Read aliases; a missing file means no aliases yet"""
        if not self.fs.exists(self.path):
            return {}
        return parse_aliases(self.fs.read_text(self.path))

    def render(self, aliases: Dict[str, str]) -> str:
        return serialize_aliases(aliases)

    def save(self, aliases: Dict[str, str]) -> str:
        """Replace the file contents and return what was written"""
        content = self.render(aliases)
        self.fs.write_text(self.path, content)
        return content


class MetadataStore:
    """Per-alias tags and creation dates kept in a JSON side file"""

    def __init__(self, fs: FileSystem, path: Path):
        self.fs = fs
        self.path = path
        self.malformed = False

    @property
    def corrupted_path(self) -> Path:
        return self.path.with_suffix(".corrupted")

    def read_metadata(self) -> Dict[str, AliasMetadata]:
        """Load metadata, treating an unreadable JSON file as empty"""
        self.malformed = False
        if not self.fs.exists(self.path):
            return {}

        try:
            data = json.loads(self.fs.read_text(self.path))
        except ValueError:
            data = None
        if not isinstance(data, dict):
            self.malformed = True
            return {}

        return {
            name: AliasMetadata.from_dict(record)
            for name, record in data.items()
            if isinstance(record, dict)
        }

    def render(self, metadata: Dict[str, AliasMetadata]) -> str:
        data = {
            name: record.to_dict()
            for name, record in sorted(metadata.items())
            if not record.is_empty()
        }
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    def write_metadata(self, metadata: Dict[str, AliasMetadata]) -> str:
        """Write metadata, keeping a copy of a corrupted file aside first"""
        if self.malformed and self.fs.exists(self.path):
            self.fs.copy(self.path, self.corrupted_path)
            self.malformed = False
        content = self.render(metadata)
        self.fs.write_text(self.path, content)
        return content


def join_metadata(aliases: Dict[str, str], metadata: Dict[str, AliasMetadata]) -> List[Alias]:
    """Aliases with their tags and creation date, sorted by name"""
    return [Alias.from_entry(name, aliases[name], metadata.get(name)) for name in sorted(aliases)]


class AliasStorage:
    """Handle storage and retrieval of aliases and their metadata"""

    def __init__(self, fs: Optional[FileSystem] = None, paths: Optional[ZamPaths] = None, max_backups: int = 10):
        self.fs = fs or LocalFileSystem()
        self.paths = paths or ZamPaths.default()
        self.max_backups = max_backups
        self.aliases = AliasRepository(self.fs, self.paths.aliases_file)
        self.metadata = MetadataStore(self.fs, self.paths.metadata_file)

    def load(self) -> Dict[str, str]:
        return self.aliases.load()

    def save(self, aliases: Dict[str, str]) -> str:
        return self.aliases.save(aliases)

    def read_metadata(self) -> Dict[str, AliasMetadata]:
        return self.metadata.read_metadata()

    def write_metadata(self, metadata: Dict[str, AliasMetadata]) -> str:
        return self.metadata.write_metadata(metadata)

    def list_all(self) -> List[Alias]:
        """Get all aliases with their metadata, sorted by name"""
        return join_metadata(self.load(), self.read_metadata())
