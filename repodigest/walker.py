"""
Tree walker.

Builds the digest tree by post-order recursion: every directory call returns
a Node, or None when nothing below it survived filtering, so empty
directories disappear without any clean-up pass.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union

from .classifier import PathClassifier
from .display import Display, LoggingDisplay
from .errors import NoFilesFoundError, RootNotFoundError, WalkCancelledError
from .models import ContentMarker, Node, NodeKind, WalkResult
from .patterns import PatternResolver, PatternSet
from .stats import StatsAggregator
from .utils import format_bytes

CancelFlag = Callable[[], bool]


def _mtime(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)


def _clean_name(name: str) -> str:
    # Undecodable bytes in a name arrive as lone surrogates; show them as U+FFFD.
    return os.fsencode(name).decode("utf-8", "replace")


def _sort_key(node: Node):
    return (node.kind is not NodeKind.DIRECTORY, node.name)


class TreeWalker:
    """Walks one root directory into a Node tree plus Stats."""

    def __init__(
        self,
        resolver: PatternResolver,
        classifier: Optional[PathClassifier] = None,
        max_size_bytes: Optional[int] = None,
        max_depth: Optional[int] = None,
        display: Optional[Display] = None,
        cancel_flag: Optional[CancelFlag] = None,
        timeout: Optional[float] = None,
    ):
        self.resolver = resolver
        self.classifier = classifier or PathClassifier()
        self.max_size_bytes = max_size_bytes
        self.max_depth = max_depth
        self.display = display or LoggingDisplay()
        self.cancel_flag = cancel_flag
        self.timeout = timeout
        self._deadline: Optional[float] = None
        self.aggregator = StatsAggregator()

    def walk(self, root: Union[str, Path]) -> WalkResult:
        """Walk ``root``. Raises RootNotFoundError, NoFilesFoundError or WalkCancelledError."""
        root_path = Path(root).resolve()
        if not root_path.is_dir():
            reason = "is not a directory" if root_path.exists() else "does not exist"
            raise RootNotFoundError(f"Root path {reason}: {root_path}", str(root_path))

        self.aggregator = StatsAggregator()
        if self.timeout is not None:
            self._deadline = time.monotonic() + self.timeout

        root_node = self._walk_directory(root_path, "", 0)
        if root_node is None:
            raise NoFilesFoundError(str(root_path))

        stats = self.aggregator.finalize()
        self.display.info(
            f"Processed {stats.total_files} files in {stats.total_directories} directories"
        )
        return WalkResult(root_node=root_node, stats=stats)

    # -------------------------------------------------------------------------

    def _check_cancelled(self) -> None:
        if self.cancel_flag is not None and self.cancel_flag():
            raise WalkCancelledError("Walk cancelled")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise WalkCancelledError(f"Walk exceeded its time budget of {self.timeout}s")

    def _walk_directory(self, full_path: Path, rel: str, depth: int) -> Optional[Node]:
        self._check_cancelled()

        if self.max_depth is not None and depth > self.max_depth:
            return None
        if rel and self.resolver.should_ignore(rel, is_dir=True):
            return None
        if rel and not self.resolver.should_include(rel, is_file=False):
            return None

        try:
            dir_stat = full_path.stat()
            with os.scandir(full_path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self.display.warn(f"Could not read directory: {rel or full_path} ({e.strerror or e})")
            return None

        children: List[Node] = []
        for entry in entries:
            name = _clean_name(entry.name)
            child_rel = f"{rel}/{name}" if rel else name
            try:
                if entry.is_symlink():
                    logging.debug(f"Skipping symlink: {child_rel}")
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError:
                continue

            if is_dir:
                child = self._walk_directory(Path(entry.path), child_rel, depth + 1)
            elif is_file:
                child = self._walk_file(Path(entry.path), child_rel)
            else:
                child = None
            if child is not None:
                children.append(child)

        if not children:
            return None

        children.sort(key=_sort_key)
        if rel:
            self.aggregator.record_directory()
        return Node(
            name=_clean_name(full_path.name),
            relative_path=rel,
            kind=NodeKind.DIRECTORY,
            size_bytes=sum(child.size_bytes for child in children),
            last_modified=_mtime(dir_stat),
            children=children,
        )

    def _walk_file(self, full_path: Path, rel: str) -> Optional[Node]:
        self._check_cancelled()

        if self.resolver.should_ignore(rel):
            return None
        if not self.resolver.should_include(rel, is_file=True):
            return None

        try:
            st = full_path.stat()
        except OSError:
            return None

        if self.max_size_bytes is not None and st.st_size > self.max_size_bytes:
            self.display.warn(f"Skipping large file: {rel} ({format_bytes(st.st_size)})")
            return None

        classifier = self.classifier
        language = classifier.detect_language(full_path)
        node = Node(
            name=_clean_name(full_path.name),
            relative_path=rel,
            kind=NodeKind.FILE,
            size_bytes=st.st_size,
            last_modified=_mtime(st),
            language=language,
        )

        if classifier.is_binary(full_path, st.st_size):
            node.content = ContentMarker.BINARY
            self.aggregator.record_file(rel, st.st_size, language, binary=True)
            return node

        encoding = classifier.detect_encoding(full_path)
        try:
            text = classifier.read_text(full_path, encoding)
        except OSError as e:
            self.display.warn(f"Could not read file: {rel} ({e.strerror or e})")
            node.content = ContentMarker.UNREADABLE
            self.aggregator.record_file(rel, st.st_size, language, binary=False, readable=False)
            return node

        node.content = text
        node.encoding = encoding
        node.line_count = classifier.count_lines(text)
        self.aggregator.record_file(rel, st.st_size, language, binary=False)
        return node


def walk(
    root: Union[str, Path],
    pattern_set: PatternSet,
    max_size_bytes: Optional[int],
    max_depth: Optional[int] = None,
    *,
    classifier: Optional[PathClassifier] = None,
    display: Optional[Display] = None,
    cancel_flag: Optional[CancelFlag] = None,
    timeout: Optional[float] = None,
) -> WalkResult:
    """Walk ``root`` with the given patterns and limits."""
    resolver = PatternResolver(pattern_set, display)
    walker = TreeWalker(
        resolver,
        classifier=classifier,
        max_size_bytes=max_size_bytes,
        max_depth=max_depth,
        display=display,
        cancel_flag=cancel_flag,
        timeout=timeout,
    )
    return walker.walk(root)
