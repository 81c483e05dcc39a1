"""Token estimation over the final rendered digest."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

DEFAULT_ENCODING = "cl100k_base"
CHARS_PER_TOKEN = 4


def heuristic_token_count(text: str) -> int:
    """Roughly four characters per token."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class TokenEstimator:
    """
    Counts tokens with tiktoken when it is usable.

    Falls back to ``ceil(len(text) / 4)`` when tiktoken is not installed, the
    encoding cannot be loaded (it is fetched on first use), or encoding fails.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name
        self._encoding: Optional[Any] = None
        self._unavailable = False

    def _get_encoding(self) -> Optional[Any]:
        if self._encoding is not None or self._unavailable:
            return self._encoding
        try:
            import tiktoken
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        except ImportError:
            logging.info("tiktoken not installed, token count will be approximate")
            self._unavailable = True
        except Exception as e:
            logging.warning(f"Could not load tokenizer '{self.encoding_name}': {e}")
            self._unavailable = True
        return self._encoding

    def estimate(self, text: str) -> int:
        """Token count of ``text``."""
        encoding = self._get_encoding()
        if encoding is None:
            return heuristic_token_count(text)
        try:
            return len(encoding.encode(text, disallowed_special=()))
        except Exception as e:
            logging.warning(f"Tokenizer failed, using estimate: {e}")
            return heuristic_token_count(text)
