"""Unit tests for repodigest.cli."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import pytest

from repodigest import __version__
from repodigest.cli import main
from repodigest.tokens import TokenEstimator


@pytest.fixture(autouse=True)
def no_tiktoken(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(TokenEstimator, "_get_encoding", lambda self: None)


@pytest.mark.unit
class TestMain:
    """End-to-end runs through main()."""

    def test_text_to_stdout(self, make_tree, capsys: pytest.CaptureFixture) -> None:
        root = make_tree({"src/app.py": "print('hi')\n", "logo.png": b"\x89PNG\x00"})
        assert main([str(root), "-o", "-"]) == 0

        captured = capsys.readouterr()
        assert "Repository Digest: repo" in captured.out
        assert "FILE: src/app.py" in captured.out
        assert "logo.png [binary]" in captured.out
        assert "Files: 2" in captured.err

    def test_json_file_with_stats(self, make_tree, tmp_path: Path) -> None:
        root = make_tree({"a.md": "# a", "b/c.go": "package c\n"})
        out = tmp_path / "out.json"
        code = main([str(root), "--format", "json", "--compress", "--stats", "-o", str(out)])
        assert code == 0

        doc = json.loads(out.read_text())
        assert sorted(doc["files"]) == ["a.md", "b/c.go"]
        assert doc["metadata"]["version"] == __version__
        assert doc["stats"]["estimatedTokens"] > 0
        stats = json.loads((tmp_path / "out.json.stats.json").read_text())
        assert stats["totalFiles"] == 2

    def test_filters(self, make_tree, capsys: pytest.CaptureFixture) -> None:
        root = make_tree({"foo.ts": "a", "foo.test.ts": "b", "README.md": "r"})
        assert main([str(root), "-o", "-", "-i", "**/*.ts", "-e", "*.test.*"]) == 0
        out = capsys.readouterr().out
        assert "FILE: foo.ts" in out
        assert "foo.test.ts" not in out
        assert "README.md" not in out

    def test_existing_output_needs_force(self, make_tree, tmp_path: Path, capsys) -> None:
        root = make_tree({"a.txt": "a"})
        out = tmp_path / "digest.txt"
        out.write_text("old")
        assert main([str(root), "-o", str(out)]) == 1
        assert "already exists" in capsys.readouterr().err
        assert main([str(root), "-o", str(out), "--force"]) == 0
        assert "FILE: a.txt" in out.read_text()

    @pytest.mark.skipif(sys.platform != "linux", reason="needs byte-transparent file names")
    def test_undecodable_file_name_reaches_output(self, make_tree, tmp_path: Path) -> None:
        root = make_tree({"ok.txt": "ok"})
        (root / os.fsdecode(b"bad\xff.txt")).write_text("bad")
        out = tmp_path / "digest.json"
        assert main([str(root), "--format", "json", "-o", str(out)]) == 0
        doc = json.loads(out.read_text(encoding="utf-8"))
        assert sorted(doc["files"]) == ["bad\ufffd.txt", "ok.txt"]

    def test_missing_root(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        assert main([str(tmp_path / "missing"), "-o", "-"]) == 1
        assert "Error: Directory does not exist" in capsys.readouterr().err

    def test_nothing_left_after_filtering(self, make_tree, capsys: pytest.CaptureFixture) -> None:
        root = make_tree({"a.txt": "a"})
        assert main([str(root), "-o", "-", "-l", "rust"]) == 1
        assert "No files found" in capsys.readouterr().err

    def test_bad_size(self, make_tree, capsys: pytest.CaptureFixture) -> None:
        root = make_tree({"a.txt": "a"})
        assert main([str(root), "-o", "-", "--max-size", "huge"]) == 1
        assert "Invalid size format" in capsys.readouterr().err

    def test_version(self, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out
