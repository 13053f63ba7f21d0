from __future__ import annotations

import io
import shutil
from dataclasses import dataclass
from pathlib import Path
from xml.etree.ElementTree import ParseError

from PIL import Image, UnidentifiedImageError

from ..orchestrator.errors import ImageOptimizeError
from .svg import optimize_svg


RASTER_FORMATS = {".gif": "GIF", ".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG"}


@dataclass(frozen=True)
class ImageOptions:
    gif_interlaced: bool = True
    jpeg_progressive: bool = True
    png_compress_level: int = 9
    svg_remove_viewbox: bool = True
    svg_cleanup_ids: bool = False

    @classmethod
    def from_params(cls, section: dict) -> "ImageOptions":
        known = {k: section[k] for k in cls.__dataclass_fields__ if k in section}
        return cls(**known)


def _encode_raster(src: Path, fmt: str, opts: ImageOptions) -> bytes:
    buf = io.BytesIO()
    with Image.open(src) as img:
        if fmt == "GIF":
            img.save(
                buf,
                "GIF",
                save_all=getattr(img, "n_frames", 1) > 1,
                interlace=opts.gif_interlaced,
                optimize=True,
            )
        elif fmt == "JPEG":
            extra = {
                k: img.info[k] for k in ("exif", "icc_profile") if img.info.get(k)
            }
            img.save(
                buf,
                "JPEG",
                quality="keep",
                progressive=opts.jpeg_progressive,
                optimize=True,
                **extra,
            )
        else:
            img.save(
                buf,
                "PNG",
                optimize=True,
                compress_level=opts.png_compress_level,
            )
    return buf.getvalue()


def optimize_image(src: Path, dest: Path, opts: ImageOptions) -> str:
    """Write an optimized copy of `src` to `dest`.

    Returns what was done: "optimized", "kept" (the re-encode was not smaller,
    source bytes copied) or "copied" (format not handled).
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    suffix = src.suffix.lower()
    original = src.read_bytes()

    if suffix == ".svg":
        try:
            data = optimize_svg(
                original,
                remove_viewbox=opts.svg_remove_viewbox,
                cleanup_ids=opts.svg_cleanup_ids,
            )
        except (ParseError, ValueError) as e:
            raise ImageOptimizeError(f"Cannot optimize {src}: {e}") from e
    elif suffix in RASTER_FORMATS:
        try:
            data = _encode_raster(src, RASTER_FORMATS[suffix], opts)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageOptimizeError(f"Cannot optimize {src}: {e}") from e
    else:
        shutil.copy2(src, dest)
        return "copied"

    if len(data) >= len(original):
        dest.write_bytes(original)
        return "kept"
    dest.write_bytes(data)
    return "optimized"
