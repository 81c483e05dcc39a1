"""Unit tests for repodigest.walker."""

from __future__ import annotations

import itertools
import logging
import os
import sys
from pathlib import Path
from typing import List

import pytest

from repodigest.classifier import PathClassifier
from repodigest.errors import NoFilesFoundError, RootNotFoundError, WalkCancelledError
from repodigest.models import ContentMarker, Node, NodeKind
from repodigest.patterns import PatternSet
from repodigest.walker import walk


def paths(node: Node) -> List[str]:
    return [f.relative_path for f in node.iter_files()]


def child(node: Node, name: str) -> Node:
    return next(c for c in node.children if c.name == name)


@pytest.mark.unit
class TestScenarios:
    """End-to-end walks over small trees."""

    def test_text_and_binary_under_one_directory(self, make_tree) -> None:
        root = make_tree({"a/b.txt": "hello\nworld", "a/c.bin": b"\x00\x01\x02"})
        result = walk(root, PatternSet(), max_size_bytes=None)

        tree = result.root_node
        assert [c.name for c in tree.children] == ["a"]
        a = tree.children[0]
        assert a.kind is NodeKind.DIRECTORY
        assert [c.name for c in a.children] == ["b.txt", "c.bin"]

        b, c = a.children
        assert b.content == "hello\nworld"
        assert b.line_count == 2
        assert b.encoding == "utf-8"
        assert c.content is ContentMarker.BINARY
        assert c.line_count is None

        stats = result.stats
        assert stats.total_files == 2
        assert stats.binary_files == 1
        assert stats.total_directories == 1

    def test_include_prunes_directories_without_matches(self, make_tree) -> None:
        root = make_tree({"README.md": "# hi", "src/index.ts": "export {}"})
        result = walk(root, PatternSet(include=("**/*.md",)), max_size_bytes=None)
        assert paths(result.root_node) == ["README.md"]
        assert [c.name for c in result.root_node.children] == ["README.md"]
        assert result.stats.total_directories == 0

    def test_depth_zero_skips_subdirectories(self, make_tree) -> None:
        root = make_tree({"sub/file.txt": "x"})
        with pytest.raises(NoFilesFoundError):
            walk(root, PatternSet(), max_size_bytes=None, max_depth=0)

    def test_depth_zero_keeps_root_files(self, make_tree) -> None:
        root = make_tree({"top.txt": "x", "sub/file.txt": "y"})
        result = walk(root, PatternSet(), max_size_bytes=None, max_depth=0)
        assert paths(result.root_node) == ["top.txt"]

    def test_oversized_file_is_skipped_with_warning(
        self, make_tree, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = make_tree({"big.txt": "x" * 2048, "small.txt": "ok"})
        with caplog.at_level(logging.WARNING):
            result = walk(root, PatternSet(), max_size_bytes=1024)

        assert paths(result.root_node) == ["small.txt"]
        assert result.stats.total_files == 1
        assert result.stats.total_size == 2
        assert "Skipping large file: big.txt (2 KB)" in caplog.text

    def test_exclude_beats_include(self, make_tree) -> None:
        root = make_tree({"foo.ts": "a", "foo.test.ts": "b"})
        pattern_set = PatternSet(include=("**/*.ts",), exclude=("*.test.*",))
        result = walk(root, pattern_set, max_size_bytes=None)
        assert paths(result.root_node) == ["foo.ts"]


@pytest.mark.unit
class TestTreeShape:
    """Ordering, pruning and size invariants."""

    def test_directories_first_then_by_name(self, make_tree) -> None:
        root = make_tree({
            "zeta.txt": "z",
            "alpha.txt": "a",
            "src/m.py": "m",
            "docs/x.md": "x",
            "Beta.txt": "b",
        })
        tree = walk(root, PatternSet(), max_size_bytes=None).root_node
        assert [c.name for c in tree.children] == ["docs", "src", "Beta.txt", "alpha.txt", "zeta.txt"]

    def test_empty_and_fully_ignored_directories_are_pruned(self, make_tree) -> None:
        root = make_tree({
            "keep.txt": "k",
            "empty/": "",
            "nested/deeper/": "",
            "node_modules/pkg/index.js": "x",
            "logs/app.log": "x",
        })
        tree = walk(root, PatternSet(), max_size_bytes=None).root_node
        assert [c.name for c in tree.children] == ["keep.txt"]

    def test_no_directory_is_empty(self, make_tree) -> None:
        root = make_tree({
            "a/b/c/d.py": "d",
            "a/e/": "",
            "f/g.log": "x",
        })

        def check(node: Node) -> None:
            if node.is_dir:
                assert node.children
                for c in node.children:
                    check(c)

        check(walk(root, PatternSet(), max_size_bytes=None).root_node)

    def test_directory_size_is_sum_of_children(self, make_tree) -> None:
        root = make_tree({"a/x.txt": "12345", "a/y/z.txt": "123", "w.txt": "1"})
        tree = walk(root, PatternSet(), max_size_bytes=None).root_node
        assert tree.size_bytes == 9
        assert child(tree, "a").size_bytes == 8
        assert child(child(tree, "a"), "y").size_bytes == 3

    def test_total_size_matches_file_nodes(self, make_tree) -> None:
        root = make_tree({"a.py": "aaa", "b/c.bin": b"\x00" * 7, "b/d.md": "dd"})
        result = walk(root, PatternSet(), max_size_bytes=None)
        files = list(result.root_node.iter_files())
        assert result.stats.total_size == sum(f.size_bytes for f in files)
        assert result.stats.total_files == len(files)

    def test_walk_is_deterministic(self, make_tree) -> None:
        root = make_tree({
            "b/2.txt": "2",
            "a/1.txt": "1",
            "c.txt": "c",
            "a/z/9.py": "9",
        })
        first = walk(root, PatternSet(), max_size_bytes=None)
        second = walk(root, PatternSet(), max_size_bytes=None)
        assert first.root_node == second.root_node
        assert first.stats.largest_files == second.stats.largest_files

    def test_relative_paths_use_forward_slashes(self, make_tree) -> None:
        root = make_tree({"a/b/c.txt": "c"})
        tree = walk(root, PatternSet(), max_size_bytes=None).root_node
        assert paths(tree) == ["a/b/c.txt"]
        assert tree.relative_path == ""

    def test_language_breakdown(self, make_tree) -> None:
        root = make_tree({"a.py": "a", "b.py": "b", "c.go": "c", "d.txt": "d"})
        stats = walk(root, PatternSet(), max_size_bytes=None).stats
        assert stats.language_breakdown == {"Python": 2, "Go": 1}


@pytest.mark.unit
class TestFailures:
    """Error paths and degraded reads."""

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(RootNotFoundError, match="does not exist"):
            walk(tmp_path / "nowhere", PatternSet(), max_size_bytes=None)

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(RootNotFoundError, match="is not a directory"):
            walk(f, PatternSet(), max_size_bytes=None)

    def test_everything_filtered(self, make_tree) -> None:
        root = make_tree({"a.py": "a"})
        with pytest.raises(NoFilesFoundError) as excinfo:
            walk(root, PatternSet(include=("**/*.rs",)), max_size_bytes=None)
        assert "No files found" in str(excinfo.value)

    def test_unreadable_directory_is_skipped(
        self, make_tree, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = make_tree({"ok/a.txt": "a", "locked/b.txt": "b"}).resolve()
        real_scandir = os.scandir

        def scandir(path):
            if Path(path).name == "locked":
                raise PermissionError(13, "Permission denied")
            return real_scandir(path)

        monkeypatch.setattr("repodigest.walker.os.scandir", scandir)
        with caplog.at_level(logging.WARNING):
            result = walk(root, PatternSet(), max_size_bytes=None)

        assert paths(result.root_node) == ["ok/a.txt"]
        assert "Could not read directory: locked (Permission denied)" in caplog.text

    def test_unreadable_file_gets_marker(
        self, make_tree, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = make_tree({"a.txt": "aaaa", "b.txt": "bb"})
        real_read = PathClassifier.read_text

        def read_text(path, encoding):
            if Path(path).name == "a.txt":
                raise PermissionError(13, "Permission denied")
            return real_read(path, encoding)

        monkeypatch.setattr(PathClassifier, "read_text", staticmethod(read_text))
        with caplog.at_level(logging.WARNING):
            result = walk(root, PatternSet(), max_size_bytes=None)

        a = child(result.root_node, "a.txt")
        assert a.content is ContentMarker.UNREADABLE
        assert not a.has_text
        assert result.stats.total_files == 2
        assert result.stats.total_size == 6
        assert result.stats.text_size == 2
        assert "Could not read file: a.txt" in caplog.text

    def test_invalid_utf8_content_is_marked(self, make_tree) -> None:
        root = make_tree({"latin.txt": b"ab\xffcd\n"})
        node = child(walk(root, PatternSet(), max_size_bytes=None).root_node, "latin.txt")
        assert node.content == "ab\ufffdcd\n"
        assert node.line_count == 2

    @pytest.mark.skipif(sys.platform != "linux", reason="needs byte-transparent file names")
    def test_undecodable_file_name_is_replaced(self, make_tree) -> None:
        root = make_tree({"ok.txt": "ok"})
        (root / os.fsdecode(b"bad\xff.txt")).write_text("bad")
        tree = walk(root, PatternSet(), max_size_bytes=None).root_node

        assert paths(tree) == ["bad\ufffd.txt", "ok.txt"]
        bad = child(tree, "bad\ufffd.txt")
        assert bad.content == "bad"

    def test_symlinks_are_skipped(self, make_tree) -> None:
        root = make_tree({"real.txt": "r", "dir/inner.txt": "i"})
        os.symlink(root / "real.txt", root / "link.txt")
        os.symlink(root / "dir", root / "linkdir")
        tree = walk(root, PatternSet(), max_size_bytes=None).root_node
        assert paths(tree) == ["dir/inner.txt", "real.txt"]


@pytest.mark.unit
class TestCancellation:
    """Cooperative cancellation and the time budget."""

    def test_cancel_flag_aborts(self, make_tree) -> None:
        root = make_tree({"a.txt": "a", "b.txt": "b"})
        with pytest.raises(WalkCancelledError):
            walk(root, PatternSet(), max_size_bytes=None, cancel_flag=lambda: True)

    def test_cancel_flag_checked_between_entries(self, make_tree) -> None:
        root = make_tree({f"f{i}.txt": str(i) for i in range(5)})
        calls = []

        def flag() -> bool:
            calls.append(1)
            return len(calls) > 3

        with pytest.raises(WalkCancelledError):
            walk(root, PatternSet(), max_size_bytes=None, cancel_flag=flag)
        assert len(calls) == 4

    def test_false_flag_lets_walk_finish(self, make_tree) -> None:
        root = make_tree({"a.txt": "a"})
        result = walk(root, PatternSet(), max_size_bytes=None, cancel_flag=lambda: False)
        assert result.stats.total_files == 1

    def test_expired_timeout(self, make_tree, monkeypatch: pytest.MonkeyPatch) -> None:
        root = make_tree({"a.txt": "a"})
        clock = itertools.count(100.0, 100.0)
        monkeypatch.setattr("repodigest.walker.time.monotonic", lambda: next(clock))
        with pytest.raises(WalkCancelledError, match="time budget"):
            walk(root, PatternSet(), max_size_bytes=None, timeout=5)
