"""
PDF page rasterization.

Renders each page of an in-memory PDF to an RGBA raster at a fixed render
scale (2.0 by default, i.e. 144 dpi for a 72 pt page).

Dependencies:
    - fitz (PyMuPDF): PDF parsing and rendering
    - PIL.Image: raster handling
"""

from __future__ import annotations

import logging

import fitz
from PIL import Image

from . import MediaAsset, RasterSource
from .errors import DecodeFailure

logger = logging.getLogger(__name__)

DEFAULT_RENDER_SCALE = 2.0


class PdfDocumentReader:
    """Open PDF document that renders one page per call."""

    def __init__(self, asset: MediaAsset):
        self.name = asset.name
        try:
            self._doc = fitz.open(stream=asset.data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise DecodeFailure(asset.name, reason=str(exc)) from exc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def render_page(self, index: int, scale: float = DEFAULT_RENDER_SCALE) -> RasterSource:
        """Rasterize page ``index`` (0-based) at ``scale``."""

        try:
            page = self._doc.load_page(index)
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        except (RuntimeError, ValueError, IndexError) as exc:
            raise DecodeFailure(self.name, reason=f"page {index + 1}: {exc}") from exc
        image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        logger.debug("Rendered %s page %s at %sx%s", self.name, index + 1, pix.width, pix.height)
        return RasterSource.from_image(image, format="PNG")

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PdfDocumentReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_pdf(asset: MediaAsset) -> PdfDocumentReader:
    return PdfDocumentReader(asset)
