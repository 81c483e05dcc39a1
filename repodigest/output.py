"""Output destinations: file, stdout or clipboard."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import pyperclip

from .config import ConfigBuilder, DigestConfig
from .errors import DigestError
from .models import Stats


class OutputWriter:
    """Writes the rendered digest where the config points."""

    @staticmethod
    def write(content: str, config: DigestConfig, stats: Optional[Stats] = None) -> str:
        """Write ``content``; returns a description of the destination."""
        if config.clipboard:
            return OutputWriter._write_clipboard(content)
        if config.to_stdout:
            return OutputWriter._write_stdout(content)

        path = Path(config.output)
        OutputWriter._write_file(content, path, config.force)
        if config.write_stats and stats is not None:
            OutputWriter._write_file(
                json.dumps(stats.to_dict(), indent=2),
                ConfigBuilder.stats_path(config.output),
                force=True,
            )
        return str(path)

    @staticmethod
    def _write_file(content: str, path: Path, force: bool) -> None:
        if path.exists() and not force:
            raise DigestError(f"Output file already exists: {path} (use --force to overwrite)", str(path))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise DigestError(f"Error writing file {path}: {e}", str(path))

    @staticmethod
    def _write_stdout(content: str) -> str:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()
        return "stdout"

    @staticmethod
    def _write_clipboard(content: str) -> str:
        try:
            pyperclip.copy(content)
        except pyperclip.PyperclipException as e:
            logging.warning(f"Clipboard unavailable ({e}), printing to stdout")
            return OutputWriter._write_stdout(content)
        return "clipboard"
