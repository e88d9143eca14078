#!/usr/bin/env python3
from __future__ import annotations

import uuid
from pathlib import Path
from typing import List, Optional
from flask import Flask, Response, request, jsonify

from canvasjob.config import Config, ConfigManager, ensure_dir, list_fonts
from canvasjob.application.image_handle import ImageHandle
from canvasjob.errors import ConfigurationError, ImageIOError, CanvasJobError, ResourceError

# Adapters
from canvasjob.adapters.stdout_logger import StdoutLogger
from canvasjob.adapters.pillow_raster import PillowRasterBackend
from canvasjob.adapters.pillow_codec import PillowCodecBackend

# Recent log lines (UI polls this)
LOGS: List[str] = []
MAX_LOGS = 500

def ui_log(line: str) -> None:
    LOGS.append(line)
    del LOGS[:-MAX_LOGS]

ERROR_STATUS = {
    ConfigurationError: 400,
    ResourceError: 404,
    ImageIOError: 422,
}


def _int(name: str) -> Optional[int]:
    raw = (request.form.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"'{name}' must be an integer, got {raw!r}.")

def _float(name: str) -> Optional[float]:
    raw = (request.form.get(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"'{name}' must be a number, got {raw!r}.")

def _block_width():
    raw = (request.form.get("block_width") or "").strip()
    if raw.lower() == "auto":
        return "auto"
    return _int("block_width")


def create_app(cfg: Optional[Config] = None) -> Flask:
    cfg = cfg or ConfigManager.load()
    app = Flask(__name__)
    app.config["UPLOAD_FOLDER"] = str(Path(cfg.upload_dir).absolute())

    raster = PillowRasterBackend()
    codec = PillowCodecBackend()
    logger = StdoutLogger(sink=ui_log)

    @app.errorhandler(CanvasJobError)
    def on_image_error(exc: CanvasJobError):
        status = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500)
        logger.log(f"✖ {type(exc).__name__}: {exc}")
        return jsonify({"ok": False, "error": str(exc), "kind": type(exc).__name__}), status

    @app.post("/render")
    def render():
        form = request.form
        image = ImageHandle(raster=raster, codec=codec, config=cfg, logger=logger)
        upload = request.files.get("image")
        uploaded: Optional[Path] = None
        try:
            if upload and upload.filename:
                ensure_dir(Path(app.config["UPLOAD_FOLDER"]))
                uploaded = Path(app.config["UPLOAD_FOLDER"]) / f"{uuid.uuid4().hex}{Path(upload.filename).suffix}"
                upload.save(uploaded)
                image.set_source_path(uploaded)
            else:
                image.create_empty_image(_int("canvas_width") or 1, _int("canvas_height") or 1)

            if form.get("background"):
                image.set_background_color(form["background"])
            image.set_alignment(form.get("align"), form.get("vertical_align"))
            if form.get("type"):
                image.set_image_type(form["type"])
            if _int("quality") is not None:
                image.set_quality(_int("quality"))

            width, height = _int("width"), _int("height")
            if width or height:
                image.resize(width, height, form.get("method"))

            if (form.get("text") or "").strip():
                image.write_text(
                    form["text"],
                    font_size=_int("font_size"),
                    font_name=form.get("font_name") or None,
                    color=form.get("color") or None,
                    line_height=_float("line_height"),
                    block_width=_block_width(),
                    position_x=_int("position_x") or 0,
                    position_y=_int("position_y") or 0,
                    align=form.get("text_align") or "left",
                    vertical_align=form.get("text_vertical_align") or "top",
                )

            out = image.render()
        finally:
            image.clear()
            if uploaded is not None and uploaded.exists():
                uploaded.unlink()
        return Response(out.data, mimetype=out.content_type)

    @app.get("/fonts")
    def fonts():
        return jsonify({"font_dir": str(cfg.font_dir), "fonts": list_fonts(cfg.font_dir)})

    @app.get("/logs")
    def logs():
        return jsonify({"lines": LOGS})

    return app


if __name__ == "__main__":
    create_app().run("127.0.0.1", 5000, debug=True)
