from __future__ import annotations
from pathlib import Path
from typing import Dict, Tuple

from PIL import Image, ImageDraw, ImageFont

from canvasjob.domain.text_layout import BBox
from canvasjob.errors import ConfigurationError
from canvasjob.ports.raster_backend import RasterBackend

class PillowRasterBackend(RasterBackend):
    """RGBA canvases backed by Pillow images, text through FreeType fonts."""

    def __init__(self):
        self._fonts: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}

    def _font(self, font: Path, size: int) -> ImageFont.FreeTypeFont:
        key = (str(font), int(size))
        if key not in self._fonts:
            try:
                self._fonts[key] = ImageFont.truetype(str(font), int(size))
            except OSError as exc:
                raise ConfigurationError(f'Font file not readable "{font}"') from exc
        return self._fonts[key]

    def allocate_canvas(self, width: int, height: int) -> Image.Image:
        return Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))

    def fill_rect(self, buf: Image.Image, x: int, y: int, width: int, height: int,
                  rgba: Tuple[int, int, int, int]) -> None:
        # paste replaces pixels, alpha included, so transparent fills really clear
        buf.paste(rgba, (int(x), int(y), int(x + width), int(y + height)))

    def resample_copy(self, dst: Image.Image, src: Image.Image,
                      dst_x: int, dst_y: int, dst_w: int, dst_h: int,
                      src_w: int, src_h: int) -> None:
        region = src
        if src.size != (src_w, src_h):
            region = src.crop((0, 0, src_w, src_h))
        if region.mode != "RGBA":
            region = region.convert("RGBA")
        if region.size != (dst_w, dst_h):
            region = region.resize((int(dst_w), int(dst_h)), Image.LANCZOS)
        dst.paste(region, (int(dst_x), int(dst_y)))

    def measure_text(self, font: Path, size: int, text: str) -> BBox:
        f = self._font(font, size)
        if not text:
            return BBox(0, 0)
        left, top, right, bottom = f.getbbox(text)
        return BBox(width=f.getlength(text), height=abs(bottom - top))

    def draw_text(self, buf: Image.Image, font: Path, size: int, x: float, y: float,
                  rgb: Tuple[int, int, int], text: str) -> None:
        if not text:
            return
        draw = ImageDraw.Draw(buf)
        # y is a baseline, as in the layout engine
        draw.text((x, y), text, fill=tuple(rgb) + (255,), font=self._font(font, size), anchor="ls")

    def release_buffer(self, buf: Image.Image) -> None:
        buf.close()
