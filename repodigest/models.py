"""Data shapes handed from the walker to the serializers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union


class NodeKind(Enum):
    """Kind of tree entry."""
    FILE = "file"
    DIRECTORY = "directory"


class ContentMarker(Enum):
    """Stand-ins for file content that could not be emitted as text."""
    BINARY = "[binary]"
    UNREADABLE = "[unreadable]"

    def __str__(self) -> str:
        return self.value


Content = Union[str, ContentMarker]


@dataclass
class Node:
    """A file or directory in the digest tree."""
    name: str
    relative_path: str
    kind: NodeKind
    size_bytes: int
    last_modified: Optional[datetime] = None
    content: Optional[Content] = None
    language: Optional[str] = None
    encoding: Optional[str] = None
    line_count: Optional[int] = None
    children: List[Node] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @property
    def is_binary(self) -> bool:
        return self.content is ContentMarker.BINARY

    @property
    def has_text(self) -> bool:
        """True for files whose content is real text."""
        return self.kind is NodeKind.FILE and isinstance(self.content, str)

    def iter_files(self) -> Iterator[Node]:
        """Yield file nodes in tree order."""
        if not self.is_dir:
            yield self
            return
        for child in self.children:
            yield from child.iter_files()


@dataclass(frozen=True)
class FileEntry:
    """A (path, size) pair for the largest-files list."""
    path: str
    size: int


@dataclass
class Stats:
    """Aggregate counters for one walk."""
    total_files: int = 0
    total_directories: int = 0
    total_size: int = 0
    text_size: int = 0
    binary_files: int = 0
    language_breakdown: Dict[str, int] = field(default_factory=dict)
    largest_files: List[FileEntry] = field(default_factory=list)
    estimated_tokens: int = 0
    processing_time: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        """Serializable form with the field names used in JSON output."""
        return {
            "totalFiles": self.total_files,
            "totalDirectories": self.total_directories,
            "totalSize": self.total_size,
            "textSize": self.text_size,
            "binaryFiles": self.binary_files,
            "languageBreakdown": dict(self.language_breakdown),
            "largestFiles": [{"path": f.path, "size": f.size} for f in self.largest_files],
            "estimatedTokens": self.estimated_tokens,
            "processingTime": round(self.processing_time, 3),
        }


@dataclass(frozen=True)
class Classification:
    """Result of classifying a single file."""
    binary: bool
    language: Optional[str] = None
    encoding: Optional[str] = None


@dataclass
class WalkResult:
    """Root of the digest tree plus its finalized stats."""
    root_node: Node
    stats: Stats
