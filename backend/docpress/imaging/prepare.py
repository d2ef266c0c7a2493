"""
DocPress — Image decoding and re-encoding for PDF embedding.

Raster formats are decoded with Pillow. SVG is rasterised with PyMuPDF,
bounded to 800x600 without enlargement. A quality setting re-encodes
opaque images as JPEG; everything else is embedded as PNG.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

import fitz
from PIL import Image, ImageOps, UnidentifiedImageError

from docpress.errors import DegenerateImageError, ImageDecodeError
from docpress.models.layout import ImageDescriptor
from docpress.models.options import Quality

SVG_MAX_WIDTH = 800
SVG_MAX_HEIGHT = 600

JPEG_QUALITY: dict[Quality, int] = {
    Quality.LOW: 50,
    Quality.MEDIUM: 70,
    Quality.HIGH: 90,
}


@dataclass(frozen=True)
class PreparedImage:
    filename: str
    descriptor: ImageDescriptor
    data: bytes


def is_svg(filename: str) -> bool:
    return Path(filename).suffix.lower() == ".svg"


def _rasterize_svg(filename: str, data: bytes) -> Image.Image:
    try:
        doc = fitz.open(stream=data, filetype="svg")
    except Exception as exc:
        raise ImageDecodeError(filename, str(exc)) from exc

    try:
        page = doc[0]
        width, height = page.rect.width, page.rect.height
        if width <= 0 or height <= 0:
            raise DegenerateImageError("Image", width, height)
        scale = min(SVG_MAX_WIDTH / width, SVG_MAX_HEIGHT / height, 1.0)
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=True)
        png = pix.tobytes("png")
    finally:
        doc.close()

    return Image.open(io.BytesIO(png))


def _decode_raster(filename: str, data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(filename, str(exc)) from exc
    return ImageOps.exif_transpose(img)


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)


def _encode(img: Image.Image, quality: Quality | None) -> bytes:
    buf = io.BytesIO()
    alpha = _has_alpha(img)
    if quality is not None and not alpha:
        img.convert("RGB").save(buf, format="JPEG", quality=JPEG_QUALITY[quality])
    else:
        if img.mode not in ("RGB", "RGBA", "L", "LA"):
            img = img.convert("RGBA" if alpha else "RGB")
        img.save(buf, format="PNG", optimize=quality is not None)
    return buf.getvalue()


def prepare_image(filename: str, data: bytes, quality: Quality | None = None) -> PreparedImage:
    """
    Decode an uploaded image and re-encode it for embedding.

    Raises ImageDecodeError when the bytes are not a readable image.
    """
    if is_svg(filename):
        img = _rasterize_svg(filename, data)
    else:
        img = _decode_raster(filename, data)

    width, height = img.size
    return PreparedImage(
        filename=filename,
        descriptor=ImageDescriptor(width=width, height=height),
        data=_encode(img, quality),
    )
