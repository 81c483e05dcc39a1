"""
Pytest configuration and shared fixtures for repodigest tests.

This file provides:
- ``make_tree``: writes a dict of relative paths to contents under tmp_path
- ``quiet_tokens``: a token estimator that never touches tiktoken
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Union

import pytest

from repodigest.tokens import TokenEstimator

TreeLayout = Dict[str, Union[str, bytes]]


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """
    Build a directory tree from ``{"a/b.txt": "content", "c.bin": b"..."}``.

    Paths ending in ``/`` create empty directories. Returns the root.
    """

    def _make(layout: TreeLayout, root_name: str = "repo") -> Path:
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for rel, content in layout.items():
            target = root / rel
            if rel.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_bytes(content.encode("utf-8"))
        return root

    return _make


class _HeuristicEstimator(TokenEstimator):
    def _get_encoding(self):
        return None


@pytest.fixture
def quiet_tokens() -> TokenEstimator:
    """Token estimator pinned to the length heuristic."""
    return _HeuristicEstimator()
