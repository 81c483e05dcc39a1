"""Serializers turning a walked tree and its stats into digest text."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from . import __version__
from .constants import (
    GLYPH_CHILD,
    GLYPH_LAST,
    GLYPH_PIPE,
    GLYPH_SPACE,
    MARKDOWN_FENCES,
    Separators,
)
from .models import ContentMarker, Node, Stats
from .tokens import TokenEstimator
from .utils import format_bytes, format_duration


@dataclass
class DigestMetadata:
    """Describes where a digest came from."""
    source: str
    format: str = "text"
    branch: Optional[str] = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )
    version: str = __version__

    @property
    def name(self) -> str:
        return PurePath(self.source.rstrip("/")).name or self.source


def _sorted_languages(stats: Stats) -> List[tuple]:
    return sorted(stats.language_breakdown.items(), key=lambda kv: (-kv[1], kv[0]))


def _tree_suffix(node: Node) -> str:
    if node.is_dir:
        return "/"
    if isinstance(node.content, ContentMarker):
        return f" {node.content}"
    if node.language:
        return f" [{node.language}]"
    return ""


def render_tree(root: Node) -> List[str]:
    """Box-drawing tree, one line per node."""
    lines = [f"{root.name}/"]

    def walk(nodes: List[Node], prefix: str) -> None:
        for i, node in enumerate(nodes):
            is_last = i == len(nodes) - 1
            connector = GLYPH_LAST if is_last else GLYPH_CHILD
            lines.append(f"{prefix}{connector}{node.name}{_tree_suffix(node)}")
            if node.children:
                walk(node.children, prefix + (GLYPH_SPACE if is_last else GLYPH_PIPE))

    walk(root.children, "")
    return lines


# =============================================================================
# TEXT
# =============================================================================

class TextFormatter:
    """Plain text digest."""

    def format(self, root: Node, stats: Stats, metadata: DigestMetadata) -> str:
        sections = [
            self._header(metadata),
            self._summary(stats, metadata),
            "\n".join(["DIRECTORY STRUCTURE", Separators.SECTION] + render_tree(root)),
            self._contents(root),
        ]
        return "\n\n".join(sections)

    def _header(self, metadata: DigestMetadata) -> str:
        return "\n".join([
            f"Repository Digest: {metadata.name}",
            Separators.MAIN,
            "This digest contains the structure and text contents of the repository.",
            f"Generated by repodigest {metadata.version} on {metadata.timestamp}.",
        ])

    def _summary(self, stats: Stats, metadata: DigestMetadata) -> str:
        lines = [
            "SUMMARY",
            Separators.SECTION,
            f"Repository: {metadata.name}",
            f"Source: {metadata.source}",
        ]
        if metadata.branch:
            lines.append(f"Branch: {metadata.branch}")
        lines.extend([
            f"Files Analyzed: {stats.total_files:,}",
            f"Directories: {stats.total_directories:,}",
            f"Total Size: {format_bytes(stats.total_size)}",
            f"Text Content: {format_bytes(stats.text_size)}",
            f"Binary Files: {stats.binary_files:,}",
            f"Processing Time: {format_duration(stats.processing_time)}",
            f"Estimated Tokens: ~{stats.estimated_tokens:,}",
        ])
        languages = _sorted_languages(stats)
        if languages:
            lines.extend(["", "Language Breakdown:"])
            lines.extend(f"  {lang}: {count} files" for lang, count in languages[:10])
        return "\n".join(lines)

    def _contents(self, root: Node) -> str:
        lines = ["FILE CONTENTS", Separators.SECTION]
        for node in root.iter_files():
            if not node.has_text:
                continue
            lines.extend(["", Separators.FILE, f"FILE: {node.relative_path}"])
            if node.language:
                lines.append(f"LANGUAGE: {node.language}")
            if node.line_count:
                lines.append(f"LINES: {node.line_count}")
            lines.extend([Separators.FILE, node.content])
        return "\n".join(lines)


# =============================================================================
# MARKDOWN
# =============================================================================

class MarkdownFormatter:
    """Markdown digest with fenced file contents."""

    def format(self, root: Node, stats: Stats, metadata: DigestMetadata) -> str:
        lines = [
            f"# Repository Digest: {metadata.name}",
            "",
            "## Metadata",
            f"- **Source**: {metadata.source}",
        ]
        if metadata.branch:
            lines.append(f"- **Branch**: {metadata.branch}")
        lines.extend([
            f"- **Generated**: {metadata.timestamp}",
            "",
            "## Statistics",
            f"- **Files**: {stats.total_files:,}",
            f"- **Directories**: {stats.total_directories:,}",
            f"- **Total Size**: {format_bytes(stats.total_size)}",
            f"- **Text Size**: {format_bytes(stats.text_size)}",
            f"- **Binary Files**: {stats.binary_files:,}",
            f"- **Estimated Tokens**: {stats.estimated_tokens:,}",
            "",
        ])

        languages = _sorted_languages(stats)
        if languages:
            lines.append("## Language Breakdown")
            lines.extend(f"- **{lang}**: {count} files" for lang, count in languages)
            lines.append("")

        lines.extend(["## Directory Structure", "```"])
        lines.extend(render_tree(root))
        lines.extend(["```", "", "## File Contents"])

        for node in root.iter_files():
            if not node.has_text:
                continue
            lines.append(f"### {node.relative_path}")
            if node.language:
                lines.append(f"**Language**: {node.language}  ")
            if node.line_count:
                lines.append(f"**Lines**: {node.line_count}  ")
            lines.extend([
                "",
                f"```{self._fence(node.language)}",
                node.content,
                "```",
                "",
            ])

        return "\n".join(lines)

    @staticmethod
    def _fence(language: Optional[str]) -> str:
        if not language:
            return ""
        return MARKDOWN_FENCES.get(language, language.lower())


# =============================================================================
# JSON
# =============================================================================

class JsonFormatter:
    """JSON digest: metadata, stats, structure and file contents."""

    def __init__(self, compress: bool = False):
        self.compress = compress

    def format(self, root: Node, stats: Stats, metadata: DigestMetadata) -> str:
        output = {
            "metadata": {
                "source": metadata.source,
                "branch": metadata.branch,
                "timestamp": metadata.timestamp,
                "version": metadata.version,
                "format": "json",
            },
            "stats": stats.to_dict(),
            "structure": self.node_to_dict(root),
            "files": {
                node.relative_path: {
                    "content": node.content,
                    "language": node.language,
                    "encoding": node.encoding,
                    "lineCount": node.line_count,
                    "size": node.size_bytes,
                    "lastModified": self._timestamp(node),
                }
                for node in root.iter_files()
                if node.has_text
            },
        }
        if self.compress:
            return json.dumps(output, separators=(",", ":"), ensure_ascii=False)
        return json.dumps(output, indent=2, ensure_ascii=False)

    def node_to_dict(self, node: Node) -> Dict[str, Any]:
        """Content-free representation of a node and its subtree."""
        result: Dict[str, Any] = {
            "name": node.name,
            "path": node.relative_path,
            "type": node.kind.value,
            "size": node.size_bytes,
        }
        if node.language:
            result["language"] = node.language
        if node.encoding:
            result["encoding"] = node.encoding
        if node.line_count:
            result["lineCount"] = node.line_count
        if isinstance(node.content, ContentMarker):
            result["content"] = node.content.value
        if node.last_modified:
            result["lastModified"] = self._timestamp(node)
        if node.is_dir:
            result["children"] = [self.node_to_dict(child) for child in node.children]
        return result

    @staticmethod
    def _timestamp(node: Node) -> Optional[str]:
        return node.last_modified.isoformat() if node.last_modified else None


# =============================================================================
# RENDERING
# =============================================================================

def get_formatter(fmt: str, compress: bool = False):
    """Formatter instance for ``text``, ``json`` or ``markdown``."""
    if fmt == "json":
        return JsonFormatter(compress=compress)
    if fmt == "markdown":
        return MarkdownFormatter()
    if fmt == "text":
        return TextFormatter()
    raise ValueError(f"Unknown output format: {fmt}")


def render_digest(
    root: Node,
    stats: Stats,
    metadata: DigestMetadata,
    estimator: Optional[TokenEstimator] = None,
    compress: bool = False,
) -> str:
    """
    Render the digest and record its token count in ``stats``.

    The text is rendered once to measure it, then again so the summary shows
    the measured count.
    """
    formatter = get_formatter(metadata.format, compress)
    estimator = estimator or TokenEstimator()
    draft = formatter.format(root, stats, metadata)
    stats.estimated_tokens = estimator.estimate(draft)
    return formatter.format(root, stats, metadata)
