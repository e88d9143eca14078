from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from canvasjob.errors import ImageIOError
from canvasjob.ports.codec_backend import CodecBackend, DecodedImage, ImageType

PIL_FORMATS = {
    "JPEG": ImageType.JPEG,
    "PNG": ImageType.PNG,
    "GIF": ImageType.GIF,
}

class PillowCodecBackend(CodecBackend):
    def decode(self, path: Path) -> DecodedImage:
        path = Path(path)
        try:
            with Image.open(path) as im:
                image_type = PIL_FORMATS.get(im.format or "")
                if image_type is None:
                    raise ImageIOError(f"Unsupported image format {im.format!r}: {path}")
                # first frame only, fully loaded so the file handle can close
                pixels = im.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise ImageIOError(f"File is not an image: {path}") from exc
        except OSError as exc:
            raise ImageIOError(f"Could not read image {path}: {exc}") from exc
        width, height = pixels.size
        return DecodedImage(pixels=pixels, width=width, height=height, image_type=image_type)

    def encode(self, pixels: Image.Image, image_type: ImageType, quality: int,
               path: Optional[Path] = None) -> Optional[bytes]:
        if image_type is ImageType.JPEG:
            out = pixels.convert("RGB") if pixels.mode != "RGB" else pixels
            params = {"format": "JPEG", "quality": max(0, min(100, int(quality)))}
        elif image_type is ImageType.PNG:
            out = pixels
            params = {"format": "PNG", "compress_level": int(quality) % 10}
        elif image_type is ImageType.GIF:
            out = pixels
            params = {"format": "GIF"}
        else:
            raise ImageIOError(f"Unsupported output type: {image_type!r}")

        buffer = BytesIO()
        try:
            out.save(buffer, **params)
        except (OSError, ValueError) as exc:
            raise ImageIOError(f"Could not encode {image_type.value}: {exc}") from exc

        if path is None:
            return buffer.getvalue()
        try:
            Path(path).write_bytes(buffer.getvalue())
        except OSError as exc:
            raise ImageIOError(f"Could not write {path}: {exc}") from exc
        return None
