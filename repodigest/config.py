"""Run configuration and its construction from CLI arguments."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from .constants import DEFAULT_OUTPUT_NAMES, OUTPUT_FORMATS, SizeLimits
from .errors import ConfigError

STDOUT = "-"


@dataclass(frozen=True)
class DigestConfig:
    """Immutable configuration for one digest run."""
    source: str
    output: Optional[str]
    output_format: str = "text"

    # Limits
    max_size_bytes: int = SizeLimits.DEFAULT_MAX_SIZE
    max_depth: Optional[int] = None

    # Patterns
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    languages: Tuple[str, ...] = ()
    include_ignored: bool = False

    # Remote
    branch: Optional[str] = None
    token: Optional[str] = None

    # Output behavior
    force: bool = False
    compress: bool = False
    write_stats: bool = False
    clipboard: bool = False

    @property
    def to_stdout(self) -> bool:
        return self.output == STDOUT


def parse_size(size_str: str) -> int:
    """Parse a size such as ``10M``, ``500k`` or ``2048`` into bytes."""
    text = str(size_str).strip().lower()
    if text.endswith("b"):
        text = text[:-1]
    multipliers = {"k": 1024, "m": 1024**2, "g": 1024**3}
    try:
        if text and text[-1] in multipliers:
            value = int(float(text[:-1]) * multipliers[text[-1]])
        else:
            value = int(text)
    except (ValueError, IndexError):
        raise ConfigError(f"Invalid size format: {size_str}")
    if value <= 0:
        raise ConfigError(f"Size must be positive: {size_str}")
    return value


class ConfigBuilder:
    """Builds DigestConfig from parsed CLI arguments."""

    @staticmethod
    def from_args(args: argparse.Namespace) -> DigestConfig:
        fmt = args.format
        if fmt not in OUTPUT_FORMATS:
            raise ConfigError(f"Unknown output format: {fmt}")

        if args.depth is not None and args.depth < 0:
            raise ConfigError(f"Depth must be zero or positive: {args.depth}")

        if args.clipboard:
            output = None
        else:
            output = args.output or DEFAULT_OUTPUT_NAMES[fmt]

        if args.compress and fmt != "json":
            logging.warning("--compress only applies to JSON output; ignoring")

        return DigestConfig(
            source=str(args.source),
            output=output,
            output_format=fmt,
            max_size_bytes=parse_size(args.max_size),
            max_depth=args.depth,
            include=tuple(args.include or ()),
            exclude=tuple(args.exclude or ()),
            languages=tuple(args.language or ()),
            include_ignored=args.include_gitignored,
            branch=args.branch,
            token=args.token,
            force=args.force,
            compress=args.compress and fmt == "json",
            write_stats=args.stats,
            clipboard=args.clipboard,
        )

    @staticmethod
    def stats_path(output: str) -> Path:
        """Sibling path for the ``--stats`` JSON file."""
        path = Path(output)
        return path.with_name(path.name + ".stats.json")
