from __future__ import annotations
from pathlib import Path
from typing import Any, Protocol, Tuple

from canvasjob.domain.text_layout import BBox

class RasterBackend(Protocol):
    def allocate_canvas(self, width: int, height: int) -> Any: ...

    def fill_rect(self, buf: Any, x: int, y: int, width: int, height: int,
                  rgba: Tuple[int, int, int, int]) -> None: ...

    def resample_copy(self, dst: Any, src: Any,
                      dst_x: int, dst_y: int, dst_w: int, dst_h: int,
                      src_w: int, src_h: int) -> None: ...

    def measure_text(self, font: Path, size: int, text: str) -> BBox: ...

    def draw_text(self, buf: Any, font: Path, size: int, x: float, y: float,
                  rgb: Tuple[int, int, int], text: str) -> None: ...

    def release_buffer(self, buf: Any) -> None: ...
