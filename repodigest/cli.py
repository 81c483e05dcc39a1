"""
repodigest command line.

    SOURCE → materialize → patterns → walk → render → tokens → output
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ConfigBuilder, DigestConfig
from .constants import OUTPUT_FORMATS, SizeLimits
from .display import LoggingDisplay
from .errors import DigestError
from .formatters import DigestMetadata, render_digest
from .output import OutputWriter
from .patterns import build_pattern_set
from .source import materialize
from .tokens import TokenEstimator
from .utils import format_bytes, format_duration
from .walker import walk


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="repodigest",
        description="Digest a local directory or git repository into text, JSON or Markdown for LLMs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  repodigest                                  # Digest current dir into digest.txt
  repodigest ./project -o - --format markdown # Markdown to stdout
  repodigest https://github.com/owner/repo    # Clone and digest a repository
  repodigest --include "**/*.py" --exclude "*.test.*"
  repodigest --language python --depth 2
        """,
    )

    parser.add_argument(
        "source",
        nargs="?",
        default=".",
        help="Local directory or repository URL (default: current directory)",
    )

    out = parser.add_argument_group("Output Options")
    out.add_argument("-o", "--output", metavar="FILE", help="Output file, '-' for stdout (default: digest.<ext>)")
    out.add_argument("--clipboard", action="store_true", help="Copy the digest to the clipboard")
    out.add_argument("--format", choices=OUTPUT_FORMATS, default="text", help="Output format (default: text)")
    out.add_argument("--compress", action="store_true", help="Compact JSON output")
    out.add_argument("--stats", action="store_true", help="Also write <output>.stats.json")
    out.add_argument("-f", "--force", action="store_true", help="Overwrite an existing output file")

    filt = parser.add_argument_group("Filtering")
    filt.add_argument("-i", "--include", "--include-pattern", action="append", metavar="PATTERN", help="Glob of files to include")
    filt.add_argument("-e", "--exclude", "--exclude-pattern", action="append", metavar="PATTERN", help="Glob of files to exclude")
    filt.add_argument("-l", "--language", action="append", metavar="LANG", help="Only include files of a language")
    filt.add_argument(
        "--max-size",
        default=str(SizeLimits.DEFAULT_MAX_SIZE),
        help="Skip files larger than this (e.g. 500k, 10M; default: 10M)",
    )
    filt.add_argument("-d", "--depth", type=int, metavar="N", help="Max directory depth (root is 0)")
    filt.add_argument(
        "--include-gitignored",
        action="store_true",
        help="Do not read ignore files (default excludes still apply)",
    )

    remote = parser.add_argument_group("Remote Repositories")
    remote.add_argument("-b", "--branch", help="Branch to clone")
    remote.add_argument("-t", "--token", help="Access token for private repositories (or GITHUB_TOKEN)")

    meta = parser.add_argument_group("Information")
    meta.add_argument("-v", "--verbose", action="store_true", help="Show progress messages")
    meta.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def run(config: DigestConfig) -> int:
    """Produce and write one digest."""
    display = LoggingDisplay()

    with materialize(config.source, branch=config.branch, token=config.token, display=display) as source:
        pattern_set = build_pattern_set(
            source.root,
            include=config.include,
            exclude=config.exclude,
            languages=config.languages,
            include_ignored=config.include_ignored,
            display=display,
        )
        result = walk(
            source.root,
            pattern_set,
            config.max_size_bytes,
            config.max_depth,
            display=display,
        )

        metadata = DigestMetadata(
            source=source.descriptor,
            format=config.output_format,
            branch=source.branch,
        )
        content = render_digest(
            result.root_node,
            result.stats,
            metadata,
            estimator=TokenEstimator(),
            compress=config.compress,
        )

    destination = OutputWriter.write(content, config, result.stats)

    stats = result.stats
    summary = [
        f"Files: {stats.total_files:,}",
        f"Directories: {stats.total_directories:,}",
        f"Size: {format_bytes(stats.total_size)}",
        f"Tokens: ~{stats.estimated_tokens:,}",
        f"Time: {format_duration(stats.processing_time)}",
    ]
    print(" | ".join(summary), file=sys.stderr)
    if destination != "stdout":
        print(f"Digest written to {destination}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ConfigBuilder.from_args(args)
        return run(config)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except DigestError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
