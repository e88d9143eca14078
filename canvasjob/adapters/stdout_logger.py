from __future__ import annotations
from typing import Callable, Optional
from canvasjob.ports.logger import Logger

class StdoutLogger(Logger):
    def __init__(self, sink: Optional[Callable[[str], None]] = None, prefix: str = "[canvasjob] "):
        self._sink = sink  # optional callback for the web log buffer
        self._prefix = prefix
    def log(self, message: str) -> None:
        if self._sink:
            self._sink(message)
        print(f"{self._prefix}{message}")
