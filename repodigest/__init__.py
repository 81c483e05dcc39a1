"""
repodigest - turn a directory tree or git repository into an LLM-ready digest.

    source → patterns → walk (classify, aggregate) → render → token count
"""

__version__ = "1.3.0"

from .classifier import PathClassifier, classify
from .errors import (
    ConfigError,
    DigestError,
    NoFilesFoundError,
    RootNotFoundError,
    SourceError,
    WalkCancelledError,
)
from .models import Classification, ContentMarker, FileEntry, Node, NodeKind, Stats, WalkResult
from .patterns import PatternResolver, PatternSet, build_pattern_set
from .stats import StatsAggregator
from .tokens import TokenEstimator
from .walker import TreeWalker, walk

__all__ = [
    "__version__",
    "Classification",
    "ConfigError",
    "ContentMarker",
    "DigestError",
    "FileEntry",
    "NoFilesFoundError",
    "Node",
    "NodeKind",
    "PathClassifier",
    "PatternResolver",
    "PatternSet",
    "RootNotFoundError",
    "SourceError",
    "Stats",
    "StatsAggregator",
    "TokenEstimator",
    "TreeWalker",
    "WalkCancelledError",
    "WalkResult",
    "build_pattern_set",
    "classify",
    "walk",
]
