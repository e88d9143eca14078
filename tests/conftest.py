"""Shared fixtures.

The fake backends record every call so tests can check what the image handle
asked for without touching real pixels. Text metrics are deterministic: each
character is `char_width` wide and every non-empty word is `height` tall.
"""

from pathlib import Path

import pytest

from canvasjob.config import Config
from canvasjob.domain.text_layout import BBox
from canvasjob.ports.codec_backend import DecodedImage, ImageType


class FakeBuffer:
    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.ops = []

    def __repr__(self):
        return f"FakeBuffer({self.width}x{self.height})"


class FakeRaster:
    def __init__(self, char_width=10, height=12):
        self.char_width = char_width
        self.text_height = height
        self.calls = []
        self.released = []

    def allocate_canvas(self, width, height):
        self.calls.append(("allocate", width, height))
        return FakeBuffer(width, height)

    def fill_rect(self, buf, x, y, width, height, rgba):
        buf.ops.append(("fill", x, y, width, height, rgba))

    def resample_copy(self, dst, src, dst_x, dst_y, dst_w, dst_h, src_w, src_h):
        dst.ops.append(("copy", src, dst_x, dst_y, dst_w, dst_h, src_w, src_h))

    def measure_text(self, font, size, text):
        if not text:
            return BBox(0, 0)
        return BBox(len(text) * self.char_width, self.text_height)

    def draw_text(self, buf, font, size, x, y, rgb, text):
        buf.ops.append(("text", text, x, y, rgb))

    def release_buffer(self, buf):
        self.released.append(buf)


class FakeCodec:
    def __init__(self, width=800, height=600, image_type=ImageType.JPEG):
        self.size = (width, height)
        self.image_type = image_type
        self.decoded = []
        self.encoded = []

    def decode(self, path):
        self.decoded.append(Path(path))
        return DecodedImage(FakeBuffer(*self.size), self.size[0], self.size[1], self.image_type)

    def encode(self, pixels, image_type, quality, path=None):
        self.encoded.append((pixels, image_type, quality, path))
        if path is None:
            return b"encoded"
        Path(path).write_bytes(b"encoded")
        return None


@pytest.fixture
def fake_raster():
    return FakeRaster()


@pytest.fixture
def font_dir(tmp_path):
    """A font directory with an (unreadable by FreeType, but present) arial.ttf."""
    d = tmp_path / "fonts"
    d.mkdir(exist_ok=True)
    (d / "arial.ttf").write_bytes(b"not a real font")
    return d


@pytest.fixture
def config(tmp_path, font_dir):
    return Config(font_dir=font_dir, upload_dir=tmp_path / "uploads")


@pytest.fixture
def source_file(tmp_path):
    p = tmp_path / "source.jpg"
    p.write_bytes(b"jpeg")
    return p


@pytest.fixture
def real_font(tmp_path):
    """A real TrueType font written to disk, taken from Pillow's bundled default."""
    from PIL import ImageFont
    try:
        font = ImageFont.load_default(size=16)
    except TypeError:
        pytest.skip("Pillow too old to ship a scalable default font")
    data = getattr(font, "font_bytes", None)
    if not data:
        pytest.skip("No scalable font available")
    path = tmp_path / "fonts" / "default.ttf"
    path.parent.mkdir(exist_ok=True)
    path.write_bytes(data)
    return path
