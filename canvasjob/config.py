from __future__ import annotations
import json, os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, List


CONFIG_DIR = Path.home() / ".config" / "canvasjob"
CONFIG_PATH = CONFIG_DIR / "config.json"

FONT_SUFFIXES = (".ttf", ".otf", ".ttc")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


@dataclass
class Config:
    # IO
    font_dir: Path = Path(os.environ.get("CANVASJOB_FONT_DIR", "fonts"))
    upload_dir: Path = Path(os.environ.get("CANVASJOB_UPLOAD_DIR", str(CONFIG_DIR / "uploads")))

    # Output
    quality: int = _env_int("CANVASJOB_QUALITY", 75)
    image_type: str = os.environ.get("CANVASJOB_IMAGE_TYPE", "png")

    # Canvas defaults
    background_color: str = os.environ.get("CANVASJOB_BACKGROUND", "transparent")
    resize_method: str = "fit"
    align: str = "center"
    vertical_align: str = "middle"

    # Text defaults
    font_name: str = "arial.ttf"
    font_size: int = 12
    text_color: str = "000000"


class ConfigManager:
    """Load / save configuration as JSON. Missing or broken files give defaults."""

    @staticmethod
    def load(path: Optional[Path] = None) -> Config:
        path = Path(path or CONFIG_PATH)
        c = Config()
        if not path.exists():
            return c
        try:
            d = json.loads(path.read_text())
            c.font_dir = Path(d.get("font_dir", str(c.font_dir)))
            c.upload_dir = Path(d.get("upload_dir", str(c.upload_dir)))
            c.quality = int(d.get("quality", c.quality))
            c.image_type = d.get("image_type", c.image_type)
            c.background_color = d.get("background_color", c.background_color)
            c.resize_method = d.get("resize_method", c.resize_method)
            c.align = d.get("align", c.align)
            c.vertical_align = d.get("vertical_align", c.vertical_align)
            c.font_name = d.get("font_name", c.font_name)
            c.font_size = int(d.get("font_size", c.font_size))
            c.text_color = d.get("text_color", c.text_color)
        except (ValueError, TypeError, OSError, AttributeError):
            return Config()
        return c

    @staticmethod
    def save(c: Config, path: Optional[Path] = None) -> None:
        path = Path(path or CONFIG_PATH)
        data: Dict[str, Any] = {
            "font_dir": str(c.font_dir),
            "upload_dir": str(c.upload_dir),
            "quality": c.quality,
            "image_type": c.image_type,
            "background_color": c.background_color,
            "resize_method": c.resize_method,
            "align": c.align,
            "vertical_align": c.vertical_align,
            "font_name": c.font_name,
            "font_size": c.font_size,
            "text_color": c.text_color,
        }
        ensure_dir(path.parent)
        path.write_text(json.dumps(data, indent=2))


# small helpers used across the app
def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def resolve_font_path(font_dir: Path, font_name: str) -> Path:
    p = Path(font_name)
    if p.is_absolute():
        return p
    return Path(font_dir) / p

def list_fonts(font_dir: Path) -> List[str]:
    font_dir = Path(font_dir)
    if not font_dir.is_dir():
        return []
    return sorted(p.name for p in font_dir.iterdir()
                  if p.is_file() and p.suffix.lower() in FONT_SUFFIXES)
