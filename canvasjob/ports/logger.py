from __future__ import annotations
from typing import Protocol

class Logger(Protocol):
    """Progress messages from image handles and the web app."""
    def log(self, message: str) -> None: ...

class NullLogger(Logger):
    """Default for library use: image handles stay quiet unless given a logger."""
    def log(self, message: str) -> None:
        return None
