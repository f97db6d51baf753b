"""Labeled results returned by every zam operation"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class Status(Enum):
    """How an operation ended"""

    OK = "ok"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    IO_FAILURE = "io_failure"


@dataclass
class Preview:
    """A write that dry-run mode reports instead of performing"""

    title: str
    content: str = ""


@dataclass
class Outcome:
    status: Status
    message: str
    notices: List[str] = field(default_factory=list)
    previews: List[Preview] = field(default_factory=list)
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status in (Status.OK, Status.UNCHANGED)

    @classmethod
    def success(cls, message: str, **kwargs) -> "Outcome":
        return cls(Status.OK, message, **kwargs)

    @classmethod
    def unchanged(cls, message: str, **kwargs) -> "Outcome":
        return cls(Status.UNCHANGED, message, **kwargs)

    @classmethod
    def not_found(cls, message: str, **kwargs) -> "Outcome":
        return cls(Status.NOT_FOUND, message, **kwargs)

    @classmethod
    def conflict(cls, message: str, **kwargs) -> "Outcome":
        return cls(Status.CONFLICT, message, **kwargs)
