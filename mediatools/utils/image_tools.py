"""Image decode/encode helpers."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..core import MediaAsset, RasterSource
from ..core.errors import DecodeFailure

logger = logging.getLogger(__name__)

PREVIEW_MAX_SIDE = 256
_OPAQUE_FORMATS = {"JPEG", "BMP"}


def decode_image(asset: MediaAsset) -> RasterSource:
    """Decode an image asset into an RGBA raster."""

    try:
        with Image.open(BytesIO(asset.data)) as img:
            img.load()
            return RasterSource.from_image(img, format=img.format)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeFailure(asset.name, reason=str(exc)) from exc


def format_for_extension(extension: str, default: str = "PNG") -> str:
    """Pillow format name for a file extension such as ``.jpg``."""

    ext = extension.lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return Image.registered_extensions().get(ext, default)


def flatten_background(image: Image.Image, color: Tuple[int, int, int, int] = (255, 255, 255, 255)) -> Image.Image:
    """Composite onto a solid background."""

    bg = Image.new("RGBA", image.size, color)
    bg.paste(image, mask=image.split()[-1])
    return bg


def encode_image(image: Image.Image, format: str = "PNG", quality: Optional[int] = None) -> bytes:
    """Serialize ``image``; formats without alpha are flattened onto white first."""

    fmt = format.upper()
    if fmt in _OPAQUE_FORMATS and image.mode != "RGB":
        image = flatten_background(image.convert("RGBA")).convert("RGB")
    buffer = BytesIO()
    params = {"quality": quality} if quality is not None else {}
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def make_preview(image: Image.Image, max_side: int = PREVIEW_MAX_SIDE) -> bytes:
    """Small PNG thumbnail used for on-screen previews."""

    thumb = image.copy()
    thumb.thumbnail((max_side, max_side))
    return encode_image(thumb, "PNG")
