"""Display sink used by the engine to surface warnings and progress."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod


class Display(ABC):
    """Fire-and-forget message sink. Implementations must never raise."""

    @abstractmethod
    def warn(self, message: str) -> None:
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        pass


class LoggingDisplay(Display):
    """Route messages through the standard logging module."""

    def warn(self, message: str) -> None:
        logging.warning(message)

    def info(self, message: str) -> None:
        logging.info(message)
