"""File classification: binary sniffing, language, encoding and line counts."""

from __future__ import annotations

import codecs
import logging
import mimetypes
import os
from pathlib import Path
from typing import Optional, Union

from .constants import (
    BINARY_EXTENSIONS,
    EXTENSIONLESS_LANGUAGES,
    LANGUAGE_EXTENSIONS,
    SizeLimits,
)
from .models import Classification

PathLike = Union[str, Path]

UNKNOWN_ENCODING = "unknown"

# Maps encoding tags to the codec used for decoding.
_CODECS = {
    "utf-8": "utf-8",
    "utf-8-bom": "utf-8-sig",
    "utf-16le": "utf-16",
    "utf-16be": "utf-16",
}


def _build_mime_table() -> mimetypes.MimeTypes:
    # A private table is built from the interpreter defaults only, so results
    # do not depend on the host's mime.types files.
    table = mimetypes.MimeTypes()
    for extensions in LANGUAGE_EXTENSIONS.values():
        for ext in extensions:
            if ext.startswith(".") and ext.lower() not in BINARY_EXTENSIONS:
                table.add_type("text/plain", ext.lower())
    return table


class PathClassifier:
    """Classifies a single file by name and a small byte sample."""

    def __init__(self, chunk_size: int = SizeLimits.CHUNK_SIZE):
        self.chunk_size = chunk_size
        self._mime = _build_mime_table()

    # -- binary ---------------------------------------------------------------

    def is_binary(self, path: PathLike, size: Optional[int] = None) -> bool:
        """
        Decide whether ``path`` holds binary data.

        Checks, in order: known binary extension, empty file (never binary),
        MIME type, then a NUL byte in the first ``chunk_size`` bytes. Any I/O
        error counts as binary.
        """
        path = Path(path)
        try:
            if path.suffix.lower() in BINARY_EXTENSIONS:
                return True

            if size is None:
                size = path.stat().st_size
            if size == 0:
                return False

            mime_type, _ = self._mime.guess_type(path.name, strict=False)
            if (mime_type and not mime_type.startswith("text/")
                    and "json" not in mime_type and "xml" not in mime_type):
                return True

            with open(path, "rb") as f:
                return b"\x00" in f.read(self.chunk_size)
        except OSError as e:
            logging.debug(f"Treating {path} as binary: {e}")
            return True

    # -- language -------------------------------------------------------------

    @staticmethod
    def detect_language(path: PathLike) -> Optional[str]:
        """Language tag from the exact basename or the extension."""
        name = os.path.basename(str(path))
        ext = os.path.splitext(name)[1].lower()

        for language, extensions in LANGUAGE_EXTENSIONS.items():
            if name in extensions or (ext and ext in extensions):
                return language

        if not ext:
            lowered = name.lower()
            for needle, language in EXTENSIONLESS_LANGUAGES:
                if needle in lowered:
                    return language
        return None

    # -- encoding -------------------------------------------------------------

    @staticmethod
    def detect_encoding(path: PathLike) -> str:
        """Sniff a byte-order mark; default to utf-8."""
        try:
            with open(path, "rb") as f:
                head = f.read(4)
        except OSError:
            return UNKNOWN_ENCODING

        if head.startswith(codecs.BOM_UTF8):
            return "utf-8-bom"
        if head.startswith(codecs.BOM_UTF16_LE):
            return "utf-16le"
        if head.startswith(codecs.BOM_UTF16_BE):
            return "utf-16be"
        return "utf-8"

    # -- content --------------------------------------------------------------

    @staticmethod
    def read_text(path: PathLike, encoding: str = "utf-8") -> str:
        """Decode a text file; invalid bytes become U+FFFD. Raises OSError on read failure."""
        data = Path(path).read_bytes()
        return data.decode(_CODECS.get(encoding, "utf-8"), errors="replace")

    @staticmethod
    def count_lines(text: str) -> int:
        """Number of newline-separated segments; 0 for empty text."""
        if not text:
            return 0
        return text.count("\n") + 1

    def classify(self, path: PathLike) -> Classification:
        """Binary flag, language and (for text files) encoding of ``path``."""
        binary = self.is_binary(path)
        language = self.detect_language(path)
        encoding = None if binary else self.detect_encoding(path)
        return Classification(binary=binary, language=language, encoding=encoding)


_default_classifier: Optional[PathClassifier] = None


def classify(path: PathLike) -> Classification:
    """Classify ``path`` with a shared default classifier."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = PathClassifier()
    return _default_classifier.classify(path)
