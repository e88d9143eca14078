from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol

class ImageType(str, Enum):
    JPEG = "jpg"
    PNG = "png"
    GIF = "gif"

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]

    @classmethod
    def parse(cls, value) -> Optional["ImageType"]:
        """'jpeg', 'JPG', '.png', ImageType.GIF ... -> ImageType; unknown -> None."""
        if isinstance(value, cls):
            return value
        v = str(value or "").strip().lower().lstrip(".")
        if v == "jpeg":
            v = "jpg"
        try:
            return cls(v)
        except ValueError:
            return None

CONTENT_TYPES = {
    ImageType.JPEG: "image/jpeg",
    ImageType.PNG: "image/png",
    ImageType.GIF: "image/gif",
}

@dataclass
class DecodedImage:
    pixels: Any
    width: int
    height: int
    image_type: ImageType

class CodecBackend(Protocol):
    def decode(self, path: Path) -> DecodedImage: ...

    def encode(self, pixels: Any, image_type: ImageType, quality: int,
               path: Optional[Path] = None) -> Optional[bytes]: ...
