"""Incremental statistics for a single walk."""

from __future__ import annotations

import time
from typing import List, Optional

from .constants import SizeLimits
from .models import FileEntry, Stats


def _by_size(entry: FileEntry):
    return (-entry.size, entry.path)


class StatsAggregator:
    """Owns the Stats of one walk; fed by the walker as it goes."""

    def __init__(self, top_n: int = SizeLimits.TOP_FILES):
        self.top_n = top_n
        self.stats = Stats()
        self._started = time.perf_counter()
        self._finalized = False

    def record_directory(self) -> None:
        self.stats.total_directories += 1

    def record_file(
        self,
        path: str,
        size: int,
        language: Optional[str],
        binary: bool,
        readable: bool = True,
    ) -> None:
        """Account for one accepted file."""
        stats = self.stats
        stats.total_files += 1
        stats.total_size += size

        if language:
            stats.language_breakdown[language] = stats.language_breakdown.get(language, 0) + 1

        if binary:
            stats.binary_files += 1
        elif readable:
            stats.text_size += size

        largest: List[FileEntry] = stats.largest_files
        largest.append(FileEntry(path, size))
        if len(largest) > self.top_n:
            largest.sort(key=_by_size)
            del largest[self.top_n:]

    def finalize(self) -> Stats:
        """Sort the largest-files list and stamp the elapsed time."""
        if not self._finalized:
            self.stats.largest_files.sort(key=_by_size)
            self.stats.processing_time = time.perf_counter() - self._started
            self._finalized = True
        return self.stats
