"""Data models for aliases and their metadata"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Strip blanks and drop case-insensitive duplicates, first casing wins"""
    result: List[str] = []
    seen = set()
    for tag in tags:
        tag = tag.strip()
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        result.append(tag)
    return result


def split_tags(value: Optional[str]) -> List[str]:
    """Split comma-separated tag input, e.g. 'git, docker'"""
    if not value:
        return []
    return normalize_tags(value.split(","))


@dataclass
class AliasMetadata:
    """Tags and creation date kept alongside an alias.

    On disk a record may still carry the legacy single ``tag`` field.
    ``from_dict`` folds it into ``tags`` so every other operation works on
    the list form, and ``to_dict`` only ever writes ``tags``.
    """

    tags: List[str] = field(default_factory=list)
    created: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AliasMetadata":
        """Create a normalized record from its JSON form"""
        tags = data.get("tags")
        if not isinstance(tags, list) or not tags:
            legacy = data.get("tag")
            tags = [legacy] if isinstance(legacy, str) and legacy else []
        created = data.get("created")
        return cls(
            tags=normalize_tags(str(tag) for tag in tags),
            created=created if isinstance(created, str) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary for storage"""
        data: Dict[str, Any] = {}
        if self.tags:
            data["tags"] = list(self.tags)
        if self.created:
            data["created"] = self.created
        return data

    def get_tags(self) -> List[str]:
        return list(self.tags)

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive tag membership"""
        wanted = tag.strip().lower()
        return any(existing.lower() == wanted for existing in self.tags)

    def set_tags(self, tags: Iterable[str]) -> None:
        self.tags = normalize_tags(tags)

    def merge_add(self, tags: Iterable[str]) -> None:
        """Append new tags, keeping existing order and casing"""
        self.tags = normalize_tags(list(self.tags) + list(tags))

    def merge_remove(self, tags: Iterable[str]) -> None:
        doomed = {tag.strip().lower() for tag in tags}
        self.tags = [tag for tag in self.tags if tag.lower() not in doomed]

    def clear(self) -> None:
        self.tags = []

    def is_empty(self) -> bool:
        return not self.tags and not self.created

    def copy(self) -> "AliasMetadata":
        return AliasMetadata(tags=list(self.tags), created=self.created)


@dataclass
class Alias:
    """Represents a managed shell alias together with its metadata"""

    name: str
    command: str
    tags: List[str] = field(default_factory=list)
    created: Optional[str] = None

    @classmethod
    def from_entry(cls, name: str, command: str, metadata: Optional[AliasMetadata] = None) -> "Alias":
        if metadata is None:
            return cls(name=name, command=command)
        return cls(name=name, command=command, tags=metadata.get_tags(), created=metadata.created)

    def to_dict(self) -> dict:
        """Convert alias to dictionary for export"""
        return {
            "name": self.name,
            "command": self.command,
            "tags": self.tags,
            "created": self.created,
        }

    def __str__(self) -> str:
        """String representation for display"""
        return f"{self.name}='{self.command}'"
