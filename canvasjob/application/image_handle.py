from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from canvasjob.config import Config, resolve_font_path
from canvasjob.domain.color import parse_color, parse_rgb
from canvasjob.domain.geometry import (
    Align, ResizeMethod, ResizeSpec, VerticalAlign, coerce, compute_layout,
)
from canvasjob.domain.jobs import RESIZE_KEY, ChangeQueue, Job, ResizeJob, WriteTextJob
from canvasjob.domain.text_layout import BlockWidth, TextJob, layout_text
from canvasjob.errors import ConfigurationError, ResourceError
from canvasjob.ports.codec_backend import CodecBackend, ImageType
from canvasjob.ports.logger import Logger, NullLogger
from canvasjob.ports.raster_backend import RasterBackend

PathLike = Union[str, Path]


@dataclass
class RasterImage:
    """A backend buffer plus its size. Released at most once."""
    buffer: Any
    width: int
    height: int
    image_type: Optional[ImageType] = None
    released: bool = False

    def release(self, raster: RasterBackend) -> None:
        if not self.released:
            raster.release_buffer(self.buffer)
            self.released = True


@dataclass(frozen=True)
class RenderedImage:
    data: bytes
    content_type: str


class ImageHandle:
    """
    Facade over one source image and its derived working image.

    Calls such as `resize` and `write_text` only queue work. Anything that
    needs pixels or final sizes (`render`, `save`, `width`, `height`,
    `get_image`) first loads the source, then replays the queue once per
    change. The source is either decoded from `source_path` or, after
    `create_empty_image`, a blank canvas filled with the background color.
    """

    def __init__(self,
                 source_path: Optional[PathLike] = None,
                 *,
                 raster: Optional[RasterBackend] = None,
                 codec: Optional[CodecBackend] = None,
                 config: Optional[Config] = None,
                 logger: Optional[Logger] = None) -> None:
        if raster is None or codec is None:
            from canvasjob.adapters.pillow_codec import PillowCodecBackend
            from canvasjob.adapters.pillow_raster import PillowRasterBackend
            raster = raster or PillowRasterBackend()
            codec = codec or PillowCodecBackend()
        self.raster = raster
        self.codec = codec
        self.cfg = config or Config()
        self.log = (logger or NullLogger()).log

        self.queue = ChangeQueue()
        self._source: Optional[RasterImage] = None
        self._working: Optional[RasterImage] = None

        self._source_path: Optional[Path] = Path(source_path) if source_path else None
        self._new_image_path: Optional[Path] = None
        self._create_empty = False
        self._empty_size = (1, 1)
        self._image_type: Optional[ImageType] = None
        self._quality = self.cfg.quality

        self._background = self.cfg.background_color
        self._method = coerce(ResizeMethod, self.cfg.resize_method, ResizeMethod.FIT)
        self._align = coerce(Align, self.cfg.align, Align.CENTER)
        self._vertical_align = coerce(VerticalAlign, self.cfg.vertical_align, VerticalAlign.MIDDLE)
        self._target_width: Optional[int] = None
        self._target_height: Optional[int] = None

    # ---- context manager ----
    def __enter__(self) -> "ImageHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.clear()

    # ---- settings ----
    @property
    def source_path(self) -> Optional[Path]:
        return self._source_path

    def set_source_path(self, path: PathLike) -> "ImageHandle":
        self._release_source()
        self._source_path = Path(path)
        self._create_empty = False
        self._source_changed()
        return self

    @property
    def new_image_path(self) -> Optional[Path]:
        return self._new_image_path

    def set_new_image_path(self, path: PathLike) -> "ImageHandle":
        self._new_image_path = Path(path)
        return self

    @property
    def quality(self) -> int:
        return self._quality

    def set_quality(self, value: int) -> "ImageHandle":
        self._quality = int(value)
        return self

    @property
    def background_color(self) -> str:
        return self._background

    def set_background_color(self, color: str) -> "ImageHandle":
        """Used by the next `resize` call and by blank canvases."""
        self._background = color
        return self

    def set_alignment(self, align=None, vertical_align=None) -> "ImageHandle":
        """Content placement for the next `resize` call; unknown values mean center/middle."""
        if align is not None:
            self._align = coerce(Align, align, Align.CENTER)
        if vertical_align is not None:
            self._vertical_align = coerce(VerticalAlign, vertical_align, VerticalAlign.MIDDLE)
        return self

    @property
    def image_type(self) -> Optional[ImageType]:
        if self._image_type:
            return self._image_type
        source = self._load_source()
        if source is not None and source.image_type:
            return source.image_type
        return ImageType.parse(self.cfg.image_type)

    def set_image_type(self, value) -> "ImageHandle":
        image_type = ImageType.parse(value)
        if image_type is None:
            raise ConfigurationError(f"Unsupported image type: {value!r}")
        self._image_type = image_type
        return self

    # ---- source ----
    def create_empty_image(self, width: int = 1, height: int = 1) -> "ImageHandle":
        width, height = int(width), int(height)
        if width < 1 or height < 1:
            raise ConfigurationError("Please define correct image size.")
        self._release_source()
        self._empty_size = (width, height)
        self._create_empty = True
        self._source_changed()
        return self

    @property
    def source_width(self) -> Optional[int]:
        source = self._load_source()
        return source.width if source else None

    @property
    def source_height(self) -> Optional[int]:
        source = self._load_source()
        return source.height if source else None

    def _load_source(self) -> Optional[RasterImage]:
        if self._source is not None:
            return self._source
        if self._create_empty:
            width, height = self._empty_size
            buf = self.raster.allocate_canvas(width, height)
            self.raster.fill_rect(buf, 0, 0, width, height, parse_color(self._background).rgba())
            self._source = RasterImage(buf, width, height)
            self.log(f"Created blank {width}x{height} canvas ({self._background}).")
        elif self._source_path and self._source_path.is_file():
            decoded = self.codec.decode(self._source_path)
            self._source = RasterImage(decoded.pixels, decoded.width, decoded.height, decoded.image_type)
            self.log(f"Loaded {self._source_path.name}: {decoded.width}x{decoded.height} {decoded.image_type.value}")
        return self._source

    def _source_changed(self) -> None:
        # queued jobs must be replayed against the new source
        if len(self.queue):
            self.queue.mark_dirty()

    def _require_source(self) -> RasterImage:
        source = self._load_source()
        if source is None:
            where = f" ({self._source_path})" if self._source_path else ""
            raise ResourceError(f"Image resource not defined{where}.")
        return source

    # ---- queued changes ----
    def resize(self, width: Optional[int] = None, height: Optional[int] = None,
               method=None) -> "ImageHandle":
        """
        Queue a resize. Arguments left out keep their previous value, so
        `resize(100)` then `resize(None, 200)` ends as one 100x200 resize.
        """
        for name, value in (("width", width), ("height", height)):
            if value is not None and int(value) < 0:
                raise ConfigurationError(f"Please define correct image size ({name}={value}).")
        if width:
            self._target_width = int(width)
        if height:
            self._target_height = int(height)
        if method:
            self._method = coerce(ResizeMethod, method, ResizeMethod.FIT)
        spec = ResizeSpec(
            width=self._target_width,
            height=self._target_height,
            method=self._method,
            align=self._align,
            vertical_align=self._vertical_align,
            background=self._background,
        )
        self.queue.enqueue(RESIZE_KEY, ResizeJob(spec))
        self.queue.mark_dirty()
        return self

    def write_text(self,
                   content: str,
                   font_size: Optional[int] = None,
                   font_name: Optional[str] = None,
                   color: Optional[str] = None,
                   line_height: Optional[float] = None,
                   block_width: BlockWidth = None,
                   position_x: int = 0,
                   position_y: int = 0,
                   align=Align.LEFT,
                   vertical_align=VerticalAlign.TOP) -> "ImageHandle":
        text = TextJob(
            content=content or "",
            font_size=int(font_size or self.cfg.font_size),
            font_name=font_name or self.cfg.font_name,
            color=color or self.cfg.text_color,
            line_height=line_height,
            block_width=block_width,
            position_x=int(position_x or 0),
            position_y=int(position_y or 0),
            align=coerce(Align, align, Align.LEFT),
            vertical_align=coerce(VerticalAlign, vertical_align, VerticalAlign.TOP),
        )
        job = WriteTextJob(text)
        self.queue.enqueue(job.key, job)
        self.queue.mark_dirty()
        return self

    # ---- pixel access ----
    def _apply_changes(self) -> None:
        if not self.queue.dirty:
            return
        source = self._require_source()
        # replay on fresh pixels so earlier cycles never draw twice
        self._install_working(self._copy_of(source))
        self.queue.drain(self._run_job)

    def _run_job(self, job: Job) -> None:
        if isinstance(job, ResizeJob):
            self._resize(job.spec)
        elif isinstance(job, WriteTextJob):
            self._write_text(job.text)
        else:
            raise TypeError(f"Unknown job {job!r}")

    def _copy_of(self, image: RasterImage) -> RasterImage:
        buf = self.raster.allocate_canvas(image.width, image.height)
        self.raster.resample_copy(buf, image.buffer, 0, 0, image.width, image.height,
                                  image.width, image.height)
        return RasterImage(buf, image.width, image.height, image.image_type)

    def _install_working(self, image: RasterImage) -> None:
        previous = self._working
        self._working = image
        if previous is not None:
            previous.release(self.raster)

    def _resize(self, spec: ResizeSpec) -> None:
        if not spec.has_target:
            return
        source = self._require_source()
        layout = compute_layout(source.width, source.height, spec)
        buf = self.raster.allocate_canvas(layout.canvas_width, layout.canvas_height)
        self.raster.fill_rect(buf, 0, 0, layout.canvas_width, layout.canvas_height,
                              parse_color(spec.background).rgba())
        self.raster.resample_copy(buf, source.buffer,
                                  layout.offset_x, layout.offset_y,
                                  layout.content_width, layout.content_height,
                                  source.width, source.height)
        self._install_working(RasterImage(buf, layout.canvas_width, layout.canvas_height, source.image_type))
        self._target_width, self._target_height = layout.canvas_width, layout.canvas_height
        self.log(f"Resized {source.width}x{source.height} -> {layout.canvas_width}x{layout.canvas_height} "
                 f"({spec.method.value}, content {layout.content_width}x{layout.content_height} "
                 f"at {layout.offset_x},{layout.offset_y})")

    def _write_text(self, text: TextJob) -> None:
        font = resolve_font_path(self.cfg.font_dir, text.font_name)
        if not font.is_file():
            raise ConfigurationError(f'Font file not found "{font}"')

        def measure(word: str):
            return self.raster.measure_text(font, text.font_size, word)

        def auto_resize(width: int, height: int):
            self._resize(ResizeSpec(width=width, height=height, method=ResizeMethod.SCALE,
                                    background=self._background))
            return self._current().width, self._current().height

        current = self._current()
        placements = layout_text(text, measure, (current.width, current.height), on_resize=auto_resize)
        target = self._current()
        rgb = parse_rgb(text.color).as_tuple()
        for p in placements:
            self.raster.draw_text(target.buffer, font, text.font_size, p.x, p.y, rgb, p.word)
        if placements:
            self.log(f"Wrote {len(placements)} word(s) with {font.name} {text.font_size}px")

    def _current(self) -> RasterImage:
        if self._working is not None:
            return self._working
        return self._require_source()

    def get_image(self) -> Any:
        """The current backend buffer with every queued change applied."""
        self._require_source()
        self._apply_changes()
        return self._current().buffer

    @property
    def width(self) -> Optional[int]:
        if self._load_source() is None:
            return None
        self._apply_changes()
        return self._current().width

    @property
    def height(self) -> Optional[int]:
        if self._load_source() is None:
            return None
        self._apply_changes()
        return self._current().height

    # ---- output ----
    def _output_type(self) -> ImageType:
        image_type = self.image_type
        if image_type is None:
            raise ConfigurationError("Output image type not defined.")
        return image_type

    def render(self) -> RenderedImage:
        """Encode the result in memory, with the matching HTTP content type."""
        buf = self.get_image()
        image_type = self._output_type()
        data = self.codec.encode(buf, image_type, self._quality)
        self.log(f"Rendered {image_type.value} ({len(data or b'')} bytes)")
        return RenderedImage(data=data or b"", content_type=image_type.content_type)

    def save(self, path: Optional[PathLike] = None) -> "ImageHandle":
        if path:
            self.set_new_image_path(path)
        if not self._new_image_path:
            raise ConfigurationError("Destination path not defined.")
        buf = self.get_image()
        image_type = self._output_type()
        self.codec.encode(buf, image_type, self._quality, path=self._new_image_path)
        self.log(f"Saved {self._new_image_path}")
        return self

    # ---- lifecycle ----
    def _release_source(self) -> None:
        if self._source is not None:
            self._source.release(self.raster)
            self._source = None

    def clear(self) -> "ImageHandle":
        """Release both buffers and forget queued changes; settings are kept."""
        self._release_source()
        if self._working is not None:
            self._working.release(self.raster)
            self._working = None
        self.queue.clear()
        return self
